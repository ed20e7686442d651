"""SQLite-backed notes store for the notepad tutorial application."""

from notepad.exceptions import (
    CursorClosedError,
    SchemaDowngradeError,
    StorageError,
    StorageOpenError,
    StoreStateError,
)
from notepad.schemas import NoteRecord
from notepad.store import CREATE_FAILED, NoteCursor, NoteStore

__all__ = [
    "CREATE_FAILED",
    "CursorClosedError",
    "NoteCursor",
    "NoteRecord",
    "NoteStore",
    "SchemaDowngradeError",
    "StorageError",
    "StorageOpenError",
    "StoreStateError",
]
