from abc import ABC, abstractmethod

from archive_hasher.archive.models import ItemFile, ItemKind


class BaseArchiveClient(ABC):
    """Contract for listing collections and reading item metadata."""

    @abstractmethod
    def fetch_page(self, collection: str, page_size: int, page: int) -> list[str]:
        """Return the entry names on one page of a collection, possibly empty.

        Raises:
            ArchiveError: if the page cannot be fetched.
        """

    @abstractmethod
    def fetch_kind(self, item: str) -> ItemKind:
        """Tell whether an entry is itself a collection."""

    @abstractmethod
    def fetch_files(self, item: str) -> list[ItemFile]:
        """Return the files of a leaf item with their hashes."""
