"""
Data access for the notes table.

``NoteStore`` owns one SQLite file. Reads hand back a ``NoteCursor`` that the
caller must release; writes report failure through return values:

    with NoteStore(storage_dir) as store:
        note_id = store.create_note("Groceries", "Milk, eggs")
        with store.fetch_note(note_id) as cursor:
            print(cursor.current)
"""

import logging
import os
from typing import Iterator, Optional

from sqlalchemy import Engine, Result, delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from notepad.db import (
    DATABASE_VERSION,
    create_note_engine,
    init_schema,
    read_schema_version,
    resolve_database_path,
)
from notepad.exceptions import (
    CursorClosedError,
    StorageError,
    StorageOpenError,
    StoreStateError,
)
from notepad.models import Note
from notepad.schemas import NoteRecord

logger = logging.getLogger(__name__)

# Returned by create_note when the insert fails. Row ids are never negative.
CREATE_FAILED = -1

_NOTE_COLUMNS = (Note.id.label("id"), Note.title.label("title"), Note.body.label("body"))


class NoteCursor:
    """
    Forward-only view over note rows.

    Iteration starts at the row the cursor is positioned on, if any, then
    continues with the remaining rows. Exhausting the cursor releases the
    underlying result; ``close()`` (or leaving a ``with`` block) invalidates it.
    """

    def __init__(self, result: Result):
        self._result = result
        self._current: Optional[NoteRecord] = None
        self._pending = False
        self._exhausted = False
        self._closed = False

    def __enter__(self) -> "NoteCursor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __iter__(self) -> Iterator[NoteRecord]:
        self._check_open()
        if self._pending:
            self._pending = False
            yield self._current
        while self.move_to_next():
            self._pending = False
            yield self._current

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def current(self) -> Optional[NoteRecord]:
        """The row the cursor is positioned on, or None before the first / after the last row."""
        return self._current

    def move_to_next(self) -> bool:
        """Advance one row. Returns False once the rows are used up."""
        self._check_open()
        if self._exhausted:
            return False
        try:
            row = self._result.fetchone()
        except SQLAlchemyError as exc:
            self._release()
            raise StorageError("Failed reading notes") from exc

        if row is None:
            self._current = None
            self._pending = False
            self._release()
            return False

        self._current = NoteRecord(id=row.id, title=row.title, body=row.body)
        self._pending = True
        return True

    def close(self) -> None:
        if self._closed:
            return
        self._release()
        self._current = None
        self._pending = False
        self._closed = True

    def _release(self) -> None:
        if not self._exhausted:
            self._exhausted = True
            self._result.close()

    def _check_open(self) -> None:
        if self._closed:
            raise CursorClosedError("Cursor has been closed")


class NoteStore:
    """Lifecycle-scoped adapter over the ``notes`` table of one SQLite file."""

    def __init__(
        self,
        directory: str | os.PathLike | None = None,
        name: str | None = None,
        schema_version: int = DATABASE_VERSION,
    ):
        if schema_version < 1:
            raise ValueError(f"Schema version must be >= 1, was {schema_version}")
        self.path = resolve_database_path(directory, name)
        self.schema_version = schema_version
        self._engine: Optional[Engine] = None
        self._session: Optional[Session] = None

    def __enter__(self) -> "NoteStore":
        if not self.is_open:
            self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "open" if self.is_open else "closed"
        return f"<NoteStore path={str(self.path)!r} {state}>"

    @property
    def is_open(self) -> bool:
        return self._session is not None

    # -- lifecycle ---------------------------------------------------------------

    # PUBLIC_INTERFACE
    def open(self) -> "NoteStore":
        """
        Open the notes database, creating the file and table when needed.

        An older stored schema version causes the table to be dropped and
        recreated. Returns ``self`` so the call can be chained.

        Raises:
            StoreStateError: the store is already open.
            StorageOpenError: the file could not be created or opened.
            SchemaDowngradeError: the file has a newer schema version.
        """
        if self.is_open:
            raise StoreStateError(f"Note store {self.path} is already open")

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageOpenError(f"Unable to create directory for {self.path}") from exc

        engine = create_note_engine(self.path)
        try:
            with engine.begin() as connection:
                init_schema(connection, read_schema_version(connection), self.schema_version)
        except SQLAlchemyError as exc:
            engine.dispose()
            raise StorageOpenError(f"Unable to open notes database {self.path}") from exc
        except StorageError:
            engine.dispose()
            raise

        self._engine = engine
        self._session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
        return self

    # PUBLIC_INTERFACE
    def close(self) -> None:
        """Release the connection. Safe to call more than once, or before open()."""
        session, engine = self._session, self._engine
        self._session = None
        self._engine = None
        try:
            if session is not None:
                session.close()
        finally:
            if engine is not None:
                engine.dispose()

    def stored_version(self) -> int:
        """Schema version recorded in the open database file."""
        session = self._require_session()
        try:
            return read_schema_version(session.connection())
        except SQLAlchemyError as exc:
            raise StorageError("Unable to read notes schema version") from exc

    # -- writes ------------------------------------------------------------------

    # PUBLIC_INTERFACE
    def create_note(self, title: str, body: str) -> int:
        """Insert a note. Returns its new id, or CREATE_FAILED if the insert failed."""
        session = self._require_session()
        note = Note(title=title, body=body)
        try:
            session.add(note)
            session.flush()
            note_id = note.id
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            logger.exception("Failed creating note in %s", self.path)
            return CREATE_FAILED
        return note_id

    # PUBLIC_INTERFACE
    def delete_note(self, note_id: int) -> bool:
        """Delete the note with ``note_id``. Returns True if a row was removed."""
        session = self._require_session()
        try:
            result = session.execute(delete(Note).where(Note.id == note_id))
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            logger.exception("Failed deleting note %s", note_id)
            return False
        return result.rowcount > 0

    # PUBLIC_INTERFACE
    def update_note(self, note_id: int, title: str, body: str) -> bool:
        """Overwrite title and body of ``note_id``. Returns True if a row was changed."""
        session = self._require_session()
        try:
            result = session.execute(
                update(Note).where(Note.id == note_id).values(title=title, body=body)
            )
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            logger.exception("Failed updating note %s", note_id)
            return False
        return result.rowcount > 0

    # -- reads -------------------------------------------------------------------

    # PUBLIC_INTERFACE
    def fetch_all_notes(self) -> NoteCursor:
        """Cursor over every note, in storage order."""
        return NoteCursor(self._query(select(*_NOTE_COLUMNS)))

    # PUBLIC_INTERFACE
    def fetch_note(self, note_id: int) -> NoteCursor:
        """
        Cursor positioned on the note with ``note_id``.

        A missing note is not an error: the cursor comes back empty and
        ``cursor.current`` is None.
        """
        cursor = NoteCursor(self._query(select(*_NOTE_COLUMNS).where(Note.id == note_id)))
        try:
            cursor.move_to_next()
        except StorageError:
            cursor.close()
            raise
        return cursor

    def _query(self, statement) -> Result:
        session = self._require_session()
        try:
            return session.execute(statement)
        except SQLAlchemyError as exc:
            session.rollback()
            raise StorageError(f"Failed querying notes in {self.path}") from exc

    def _require_session(self) -> Session:
        if self._session is None:
            raise StoreStateError(f"Note store {self.path} is not open")
        return self._session
