"""Errors raised by the notes store."""


class StorageError(Exception):
    """Base class for notes storage failures."""


class StorageOpenError(StorageError):
    """The database file could not be created or opened."""


class SchemaDowngradeError(StorageError):
    """The file was written by a newer schema version than the one requested."""

    def __init__(self, current_version: int, target_version: int):
        super().__init__(
            f"Can't downgrade notes database from version {current_version} to {target_version}"
        )
        self.current_version = current_version
        self.target_version = target_version


class StoreStateError(StorageError):
    """The store was used in the wrong lifecycle state (e.g. opened twice, used while closed)."""


class CursorClosedError(StorageError):
    """A cursor was used after it was released."""
