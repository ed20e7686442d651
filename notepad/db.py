import logging
import os
from pathlib import Path

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import URL, Connection
from sqlalchemy.orm import declarative_base

from notepad.exceptions import SchemaDowngradeError

logger = logging.getLogger(__name__)

DATABASE_NAME = "data.db"
DATABASE_TABLE = "notes"
DATABASE_VERSION = 1

Base = declarative_base()


def _resolve_database_dir(directory: str | os.PathLike | None) -> Path:
    """
    Resolve the directory that holds the notes database file.

    Preference order:
    1) directory supplied by the caller (the owning application's storage dir)
    2) NOTES_DB_DIR
    3) ./data relative to the working directory
    """
    if directory is not None:
        return Path(directory)

    env_dir = (os.getenv("NOTES_DB_DIR") or "").strip()
    if env_dir:
        return Path(env_dir)

    return Path.cwd() / "data"


# PUBLIC_INTERFACE
def resolve_database_path(directory: str | os.PathLike | None = None, name: str | None = None) -> Path:
    """Return the full path of the notes database file."""
    file_name = name or (os.getenv("NOTES_DB_NAME") or "").strip() or DATABASE_NAME
    return _resolve_database_dir(directory) / file_name


# PUBLIC_INTERFACE
def create_note_engine(path: Path) -> Engine:
    """Build a SQLAlchemy engine for the SQLite file at ``path``. Does not connect."""
    return create_engine(URL.create("sqlite", database=str(path)))


# PUBLIC_INTERFACE
def read_schema_version(connection: Connection) -> int:
    """Return the schema version stored in the database header (0 for a new file)."""
    return int(connection.exec_driver_sql("PRAGMA user_version").scalar() or 0)


def _write_schema_version(connection: Connection, version: int) -> None:
    # PRAGMA does not accept bound parameters.
    connection.exec_driver_sql(f"PRAGMA user_version = {int(version)}")


# PUBLIC_INTERFACE
def init_schema(connection: Connection, current_version: int, target_version: int) -> None:
    """
    Bring the notes table to ``target_version``.

    - current == target: nothing to do
    - current == 0: fresh file, create the table
    - current < target: drop and recreate the table, destroying every row
    - current > target: refuse with SchemaDowngradeError

    There is no forward migration; any version bump discards existing notes.
    """
    # Imported here so the model is registered on Base before create/drop.
    from notepad.models import Note

    if current_version == target_version:
        return
    if current_version > target_version:
        raise SchemaDowngradeError(current_version, target_version)

    table = Note.__table__
    if current_version == 0:
        table.create(connection)
    else:
        logger.warning(
            "Upgrading notes database from version %s to %s, which will destroy all old data",
            current_version,
            target_version,
        )
        table.drop(connection, checkfirst=True)
        table.create(connection)

    _write_schema_version(connection, target_version)
