import enum
import time

from archive_hasher.archive.base import BaseArchiveClient
from archive_hasher.archive.exceptions import ArchiveError
from archive_hasher.config.settings import Settings
from archive_hasher.database.exceptions import RecordError
from archive_hasher.database.models import Job
from archive_hasher.database.repositories.hash_repository import HashRepository
from archive_hasher.database.repositories.ledger_repository import LedgerRepository
from archive_hasher.logging.logger import Log


class JobOutcome(enum.Enum):
    """What happened to a job after one of its pages was processed."""

    ADVANCED = "advanced"
    COMPLETED = "completed"
    FAILED = "failed"


class JobRunner:
    """Scan one page of one collection and move the job forward or retire it."""

    def __init__(
        self,
        client: BaseArchiveClient,
        ledger: LedgerRepository,
        recorder: HashRepository,
        settings: Settings,
    ) -> None:
        self._client = client
        self._ledger = ledger
        self._recorder = recorder
        self._settings = settings

    def run(self, job: Job) -> JobOutcome:
        """Process the page the job points at.

        A page that cannot be fetched is retried once at the following page;
        if that fails too the collection is retired with the error as reason.
        An empty page retires the collection as complete.
        """
        Log.info(
            f"Scanning {job.collection} page {job.page}",
            collection=job.collection,
            page=job.page,
        )
        try:
            entries = self._fetch_page(job)
        except ArchiveError as exc:
            if not self._settings.retry_failed_page:
                return self._fail(job, exc)
            Log.warning(
                f"Page {job.page} of {job.collection} failed ({exc}), trying page {job.page + 1}",
                collection=job.collection,
                page=job.page,
            )
            job.page += 1
            try:
                entries = self._fetch_page(job)
            except ArchiveError as retry_exc:
                return self._fail(job, retry_exc)
            self._ledger.increment(job.collection)

        if not entries:
            self._ledger.remove(job, "")
            Log.info(
                f"Collection {job.collection} complete",
                collection=job.collection,
                page=job.page,
            )
            return JobOutcome.COMPLETED

        for entry in entries:
            self._process_entry(job, entry)

        self._ledger.increment(job.collection)
        return JobOutcome.ADVANCED

    def _fetch_page(self, job: Job) -> list[str]:
        return self._client.fetch_page(job.collection, self._settings.batch_size, job.page)

    def _process_entry(self, job: Job, entry: str) -> None:
        """Queue a sub-collection or record the hashes of a leaf item."""
        time.sleep(self._settings.item_delay_seconds)
        try:
            kind = self._client.fetch_kind(entry)
            if kind.is_collection:
                self._ledger.add(entry)
                return
            files = self._client.fetch_files(entry)
        except ArchiveError as exc:
            Log.error(
                f"Skipping {entry} in {job.collection}: {exc}",
                collection=job.collection,
                item=entry,
            )
            return

        try:
            self._recorder.record(entry, files)
        except RecordError as exc:
            Log.warning(f"in item {entry}: {exc}", collection=job.collection, item=entry)

    def _fail(self, job: Job, exc: Exception) -> JobOutcome:
        self._ledger.remove(job, str(exc))
        Log.error(
            f"Removed {job.collection} due to error {exc}",
            collection=job.collection,
            page=job.page,
        )
        return JobOutcome.FAILED
