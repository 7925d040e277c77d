import threading
from dataclasses import dataclass

from archive_hasher.crawler.job_runner import JobOutcome, JobRunner
from archive_hasher.database.repositories.ledger_repository import LedgerRepository
from archive_hasher.logging.logger import Log


@dataclass
class CrawlSummary:
    """Counts of what one call to Crawler.run did."""

    jobs_run: int = 0
    pages_advanced: int = 0
    collections_completed: int = 0
    collections_failed: int = 0
    cancelled: bool = False


class Crawler:
    """Crawl loop: check for cancellation -> pick the next job -> run it.

    Cancellation is only looked at between jobs, so a page that has started is
    always processed to the end before the loop stops.
    """

    def __init__(
        self,
        ledger: LedgerRepository,
        job_runner: JobRunner,
        stop_event: threading.Event | None = None,
    ) -> None:
        self._ledger = ledger
        self._job_runner = job_runner
        self._stop_event = stop_event or threading.Event()

    def stop(self) -> None:
        """Ask the loop to stop before its next job."""
        self._stop_event.set()

    def run(self, max_jobs: int | None = None) -> CrawlSummary:
        """Run until the ledger is empty or a stop is requested.

        If max_jobs is set, stop after running that many jobs (for testing).
        """
        summary = CrawlSummary()
        Log.info(f"Crawler started with {len(self._ledger)} active jobs")
        while True:
            if self._stop_event.is_set():
                Log.info("interrupted; shut down safely")
                summary.cancelled = True
                break
            if len(self._ledger) == 0:
                Log.info("No active jobs left, crawl finished")
                break
            if max_jobs is not None and summary.jobs_run >= max_jobs:
                break

            job = self._ledger.next_job()
            outcome = self._job_runner.run(job)
            summary.jobs_run += 1
            if outcome is JobOutcome.ADVANCED:
                summary.pages_advanced += 1
            elif outcome is JobOutcome.COMPLETED:
                summary.collections_completed += 1
            else:
                summary.collections_failed += 1

        return summary
