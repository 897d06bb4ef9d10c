"""The Chrome browsing history provider."""

from __future__ import annotations

import functools
from pathlib import Path

from bionic.chrome import history
from bionic.db import ImportFn, InputPathError, Provider


class ChromeProvider(Provider):
    """Imports a copy of Chrome's History database."""

    name = "chrome"
    table_prefix = "chrome_"
    import_description = (
        "OS X: ~/Library/Application\\ Support/Google/Chrome/Default/History\n"
        "Windows: C:\\Users\\%USERNAME%\\AppData\\Local\\Google\\Chrome\\User Data\\Default\\History\n"
        "Linux: ~/.config/google-chrome/Default/databases"
    )

    def migrate(self):
        history.create_tables(self.conn)

    def import_fns(self, input_path):
        if Path(input_path).is_dir():
            raise InputPathError("input path should be a file")
        return [ImportFn("History", functools.partial(history.import_history, self.conn), input_path)]