class StorageError(Exception):
    """Base exception for all storage-related errors."""


class LedgerEmptyError(StorageError):
    """Raised when the next job is requested from a ledger with no active jobs."""


class RecordError(StorageError):
    """Base exception for an item whose hashes could not be recorded."""


class NoFilesError(RecordError):
    """Raised when an item is recorded with an empty file list."""


class NoValidContentError(RecordError):
    """Raised when none of an item's files produced a storable hash."""


class ItemAlreadyRecordedError(RecordError):
    """Raised when an item with the same name has already been recorded."""


class ItemInsertError(RecordError):
    """Raised when the database rejects an item row for any other reason."""
