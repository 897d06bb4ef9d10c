# bionic

Load your personal data exports into a single local SQLite database, then
query them with any SQL tool.

Supported providers:

| Provider    | Class                                        | Input                                                          |
|-------------|----------------------------------------------|----------------------------------------------------------------|
| `instagram` | `bionic.instagram.provider.InstagramProvider` | the unpacked Instagram data download directory                 |
| `google`    | `bionic.google.provider.GoogleProvider`       | a Google Takeout archive (`.zip`) or its unpacked directory    |
| `health`    | `bionic.health.provider.HealthProvider`       | an Apple Health `export.zip` or the unpacked export directory  |

## Installation

```sh
pip install .
```

The package needs nothing beyond the Python standard library (Python 3.10 or
later).

## Usage

`bionic.db.open_database(path)` opens the SQLite database at `path`, creating
the file and its parent directories when missing. Each provider is built on
that connection; `migrate()` creates its tables and `import_fns(input_path)`
returns a list of `ImportFn` objects, each a named part of the import that
runs when `call()` is invoked.

```python
from bionic.db import create_imports_table, open_database, record_import
from bionic.instagram.provider import InstagramProvider

conn = open_database("data/bionic.sqlite")
create_imports_table(conn)

provider = InstagramProvider(conn)
provider.migrate()

for import_fn in provider.import_fns("instagram-data"):
    print("importing", import_fn.name)
    import_fn.call()

record_import(conn, provider.name)
conn.commit()
```

`GoogleProvider` and `HealthProvider` are used the same way. Their
`import_fns` looks at the input path: a directory is read as an unpacked
export, anything else as a zip archive. `InstagramProvider.import_fns` raises
`bionic.db.InputPathError` when the path is not a directory.

Imports are idempotent: rows are matched on their natural keys, so importing
the same export twice does not duplicate them. Nothing is committed by the
providers themselves; commit (or roll back) the connection when the import is
done.

## Tables

Each provider keeps its tables under its own prefix (`instagram_`, `google_`,
`health_`), available as its `table_prefix` attribute.
`bionic.db.get_tables(conn)` lists all tables in the database.

```sh
sqlite3 data/bionic.sqlite "SELECT username FROM instagram_users"
```

## What it does not do

- There is no command-line program; imports are run from Python as shown
  above.
- There is no registry of providers by name and no way to reset a provider's
  tables other than dropping them yourself.
- Chrome browser history is not imported, and there is no Markdown export:
  the `bionic.chrome` and `bionic.markdown` sub-packages hold no modules.

## Running the tests

```sh
pip install ".[test]"
pytest
```