from psycopg.rows import dict_row

from archive_hasher.database.connection import LEDGER, get_connection
from archive_hasher.database.exceptions import LedgerEmptyError, StorageError
from archive_hasher.database.models import DoneRecord, Job
from archive_hasher.logging.logger import Log


class LedgerRepository:
    """Database operations for the crawl_jobs and crawl_done tables.

    crawl_jobs holds one row per collection still being paged through;
    crawl_done is the write-once log of collections that reached a terminal
    outcome. A name lives in at most one of the two tables, and a name in
    crawl_done is never queued again.
    """

    def __init__(self) -> None:
        self._length = self._count_jobs()

    def __len__(self) -> int:
        return self._length

    def add(self, name: str) -> bool:
        """Queue a collection at page 1 unless it is active or already done.

        Returns True if a new job was inserted.
        """
        with get_connection(LEDGER) as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute("SELECT 1 FROM crawl_done WHERE name = %s", (name,))
                if cur.fetchone() is not None:
                    Log.debug(f"Collection {name} already done, not queueing", collection=name)
                    return False
                cur.execute(
                    """
                    INSERT INTO crawl_jobs (name, page)
                    VALUES (%s, 1)
                    ON CONFLICT (name) DO NOTHING
                    """,
                    (name,),
                )
                inserted = cur.rowcount == 1
            conn.commit()

        if inserted:
            self._length += 1
            Log.info(f"Queued collection {name}", collection=name)
        return inserted

    def next_job(self) -> Job:
        """Return the active job with the lowest page, oldest first on ties.

        Raises:
            LedgerEmptyError: if there are no active jobs.
        """
        with get_connection(LEDGER) as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT name, page
                    FROM crawl_jobs
                    ORDER BY page, seq
                    LIMIT 1
                    """
                )
                row = cur.fetchone()

        if row is None:
            raise LedgerEmptyError("No active jobs in the ledger")
        return Job(collection=row["name"], page=row["page"])

    def increment(self, name: str) -> None:
        """Advance a job to its next page."""
        with get_connection(LEDGER) as conn:
            conn.execute(
                "UPDATE crawl_jobs SET page = page + 1 WHERE name = %s",
                (name,),
            )
            conn.commit()

    def remove(self, job: Job, reason: str) -> None:
        """Retire a job and log it as done in a single transaction.

        An empty reason records success; otherwise it is the failure text.
        """
        with get_connection(LEDGER) as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute("DELETE FROM crawl_jobs WHERE name = %s", (job.collection,))
                deleted = cur.rowcount
                cur.execute(
                    """
                    INSERT INTO crawl_done (name, page, reason)
                    VALUES (%s, %s, %s)
                    ON CONFLICT (name) DO NOTHING
                    """,
                    (job.collection, job.page, reason),
                )
            conn.commit()

        if deleted:
            self._length -= 1

    def find_job(self, name: str) -> Job | None:
        """Find an active job by collection name."""
        with get_connection(LEDGER) as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute("SELECT name, page FROM crawl_jobs WHERE name = %s", (name,))
                row = cur.fetchone()

        if row is None:
            return None
        return Job(collection=row["name"], page=row["page"])

    def find_done(self, name: str) -> DoneRecord | None:
        """Find the done record of a collection."""
        with get_connection(LEDGER) as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    "SELECT name, page, reason, finished_at FROM crawl_done WHERE name = %s",
                    (name,),
                )
                row = cur.fetchone()

        if row is None:
            return None
        return DoneRecord(
            collection=row["name"],
            page=row["page"],
            reason=row["reason"],
            finished_at=row["finished_at"],
        )

    def done_count(self) -> int:
        with get_connection(LEDGER) as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute("SELECT COUNT(*) AS total FROM crawl_done")
                row = cur.fetchone()
        return int(row["total"]) if row else 0

    def _count_jobs(self) -> int:
        with get_connection(LEDGER) as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute("SELECT COUNT(*) AS total FROM crawl_jobs")
                row = cur.fetchone()
        if row is None:
            raise StorageError("Could not count active jobs")
        return int(row["total"])
