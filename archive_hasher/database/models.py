from dataclasses import dataclass
from datetime import datetime


@dataclass
class Job:
    """Represents a row from the crawl_jobs table: scan `page` of `collection`."""

    collection: str
    page: int = 1


@dataclass(frozen=True)
class DoneRecord:
    """Represents a row from the crawl_done table.

    An empty reason means the collection was fully scanned; anything else is
    the error that made the crawler give up on it.
    """

    collection: str
    page: int
    reason: str = ""
    finished_at: datetime | None = None

    @property
    def failed(self) -> bool:
        return self.reason != ""
