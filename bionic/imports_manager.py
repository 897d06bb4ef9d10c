"""Registry of the import providers, with migration and reset."""

from __future__ import annotations

from contextlib import contextmanager

from bionic.chrome.provider import ChromeProvider
from bionic.db import ProviderNotFoundError, create_imports_table
from bionic.google.provider import GoogleProvider
from bionic.health.provider import HealthProvider
from bionic.instagram.provider import InstagramProvider

IMPORTS_TABLE = "imports"


def default_import_providers(conn):
    return [
        GoogleProvider(conn),
        HealthProvider(conn),
        InstagramProvider(conn),
        ChromeProvider(conn),
    ]


@contextmanager
def _savepoint(conn, name):
    conn.execute(f"SAVEPOINT {name}")
    try:
        yield
    except BaseException:
        if conn.in_transaction:
            conn.execute(f"ROLLBACK TO {name}")
            conn.execute(f"RELEASE {name}")
        raise
    if conn.in_transaction:
        conn.execute(f"RELEASE {name}")


class ImportManager:
    """Looks import providers up by name and manages their tables."""

    def __init__(self, conn, providers):
        self.conn = conn
        self.providers = {provider.name: provider for provider in providers}

    def migrate(self):
        create_imports_table(self.conn)
        for provider in self.providers.values():
            provider.migrate()

    def get_by_name(self, name):
        try:
            return self.providers[name]
        except KeyError:
            raise ProviderNotFoundError(f"provider not found: {name}") from None

    def reset(self, provider):
        """Drop all of provider's tables and import records, then recreate the tables."""
        with _savepoint(self.conn, "bionic_reset"):
            self.conn.execute(f"DELETE FROM {IMPORTS_TABLE} WHERE provider = ?", (provider.name,))
            tables = [
                row[0]
                for row in self.conn.execute(
                    "SELECT name FROM sqlite_master WHERE type = 'table' AND name LIKE ?",
                    (provider.table_prefix + "%",),
                ).fetchall()
            ]
            for table in tables:
                escaped = table.replace('"', '""')
                self.conn.execute(f'DROP TABLE IF EXISTS "{escaped}"')
        provider.migrate()