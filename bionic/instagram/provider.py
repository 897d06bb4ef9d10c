"""The Instagram data download provider."""

from __future__ import annotations

import functools
import glob
import os
from pathlib import Path

from bionic.db import ImportFn, InputPathError, Provider
from bionic.instagram import account_history, comments, likes, media, stories

_GLOBS = {
    "account_history.json": ("Account History", account_history.import_account_history),
    "comments.json": ("Comments", comments.import_comments),
    "likes.json": ("Likes", likes.import_likes),
    "media.json": ("Media", media.import_media),
    "stories_activities.json": ("Stories Activities", stories.import_stories_activities),
}


class InstagramProvider(Provider):
    """Imports the JSON files of an unpacked Instagram data download."""

    name = "instagram"
    table_prefix = "instagram_"
    import_description = "Request a data download in Instagram settings (Download Your Information)"

    def migrate(self):
        for module in (account_history, comments, likes, stories, media):
            module.create_tables(self.conn)

    def import_fns(self, input_path):
        if not Path(input_path).is_dir():
            raise InputPathError("input path should be a directory")

        fns = []
        for pattern, (label, fn) in _GLOBS.items():
            files = sorted(glob.glob(os.path.join(input_path, pattern)))
            if files:
                fns.append(ImportFn(label, functools.partial(fn, self.conn), files[0]))
        return fns