import argparse
import signal
import threading
from collections.abc import Sequence
from types import FrameType

from archive_hasher.archive.http_client import ArchiveHttpClient
from archive_hasher.config.settings import Settings
from archive_hasher.crawler.crawler import Crawler
from archive_hasher.crawler.job_runner import JobRunner
from archive_hasher.database.connection import close_pools, init_pools
from archive_hasher.database.repositories.hash_repository import HashRepository
from archive_hasher.database.repositories.ledger_repository import LedgerRepository
from archive_hasher.database.schema import ensure_schema
from archive_hasher.logging.logger import Log


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Crawl archive collections and record the content hashes of their items."
    )
    parser.add_argument(
        "collections",
        nargs="*",
        help="collection names to queue before the crawl starts",
    )
    return parser.parse_args(argv)


def install_stop_handlers(stop_event: threading.Event) -> None:
    """Turn SIGINT/SIGTERM into a request to stop before the next job."""

    def _handler(signum: int, _frame: FrameType | None) -> None:
        Log.info(f"Received signal {signum}, stopping after the current job")
        stop_event.set()

    signal.signal(signal.SIGINT, _handler)
    signal.signal(signal.SIGTERM, _handler)


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point: open stores -> seed ledger -> crawl until empty or interrupted."""
    args = parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)
    init_pools(settings)

    try:
        ensure_schema()
        ledger = LedgerRepository()
        for name in args.collections:
            ledger.add(name)

        stop_event = threading.Event()
        install_stop_handlers(stop_event)

        with ArchiveHttpClient(
            base_url=settings.archive_base_url,
            timeout_seconds=settings.archive_timeout_seconds,
        ) as client:
            job_runner = JobRunner(client, ledger, HashRepository(), settings)
            crawler = Crawler(ledger, job_runner, stop_event)
            summary = crawler.run()

        Log.info(
            f"Ran {summary.jobs_run} jobs: {summary.collections_completed} collections completed, "
            f"{summary.collections_failed} failed, {len(ledger)} still active, "
            f"{ledger.done_count()} done in total"
        )
    finally:
        close_pools()


if __name__ == "__main__":
    main()
