from archive_hasher.archive.base import BaseArchiveClient
from archive_hasher.archive.http_client import ArchiveHttpClient
from archive_hasher.archive.models import ItemFile, ItemKind

__all__ = ["ArchiveHttpClient", "BaseArchiveClient", "ItemFile", "ItemKind"]
