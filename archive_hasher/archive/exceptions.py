class ArchiveError(Exception):
    """Base exception for all archive client errors."""


class ArchiveRequestError(ArchiveError):
    """Raised when a request cannot be built from the given arguments."""


class ArchiveFetchError(ArchiveError):
    """Raised when the archive cannot be reached or returns an unusable response."""
