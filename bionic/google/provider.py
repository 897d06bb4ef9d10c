"""The Google Takeout provider."""

from __future__ import annotations

import functools
import os
from pathlib import Path

from bionic.db import ImportFn, Provider
from bionic.google import activity, location_history, semantic_location_history

_ACTIVITY_DIRECTORY = "My Activity"
_LOCATION_DIRECTORY = "Location History"


class GoogleProvider(Provider):
    """Imports a Google Takeout export, either unpacked or as a zip archive."""

    name = "google"
    table_prefix = "google_"
    import_description = "Google Takeout export (zip archive or unpacked directory)"

    def migrate(self):
        activity.create_tables(self.conn)
        location_history.create_tables(self.conn)
        semantic_location_history.create_tables(self.conn)

    def _bind(self, fn):
        return functools.partial(fn, self.conn)

    def import_fns(self, input_path):
        if Path(input_path).is_dir():
            return [
                ImportFn(
                    "Activity",
                    self._bind(activity.import_activity_from_directory),
                    os.path.join(input_path, _ACTIVITY_DIRECTORY),
                ),
                ImportFn(
                    "Location History",
                    self._bind(location_history.import_location_history_from_file),
                    os.path.join(
                        input_path, _LOCATION_DIRECTORY, location_history.LOCATION_HISTORY_FILE
                    ),
                ),
                ImportFn(
                    "Semantic Location History",
                    self._bind(
                        semantic_location_history.import_semantic_location_history_from_directory
                    ),
                    os.path.join(
                        input_path,
                        _LOCATION_DIRECTORY,
                        semantic_location_history.SEMANTIC_DIRECTORY_NAME,
                    ),
                ),
            ]
        return [
            ImportFn(
                "Activity",
                self._bind(activity.import_activity_from_archive),
                input_path,
            ),
            ImportFn(
                "Location History",
                self._bind(location_history.import_location_history_from_archive),
                input_path,
            ),
            ImportFn(
                "Semantic Location History",
                self._bind(semantic_location_history.import_semantic_location_history_from_archive),
                input_path,
            ),
        ]