"""The Apple Health export provider."""

from __future__ import annotations

import functools
import os
from pathlib import Path

from bionic.db import ImportFn, Provider
from bionic.health import data_export


class HealthProvider(Provider):
    """Imports an Apple Health export, either unpacked or as a zip archive."""

    name = "health"
    table_prefix = "health_"

    def migrate(self):
        data_export.create_tables(self.conn)

    def import_fns(self, input_path):
        if Path(input_path).is_dir():
            return [
                ImportFn(
                    "Data Export",
                    functools.partial(data_export.import_from_directory, self.conn),
                    os.path.join(input_path, data_export.EXPORT_FILENAME),
                )
            ]
        return [
            ImportFn(
                "Data Export",
                functools.partial(data_export.import_from_archive, self.conn),
                input_path,
            )
        ]