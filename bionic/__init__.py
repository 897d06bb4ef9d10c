"""Load personal data exports into a local SQLite database."""

__version__ = "0.1.0"