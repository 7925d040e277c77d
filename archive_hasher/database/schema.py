"""DDL for the ledger and hash stores, applied idempotently at startup."""

from archive_hasher.database.connection import HASHES, LEDGER, get_connection

LEDGER_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS crawl_jobs (
        name TEXT PRIMARY KEY,
        page INTEGER NOT NULL CHECK (page >= 1),
        seq BIGSERIAL NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_crawl_jobs_page_seq ON crawl_jobs (page, seq)",
    """
    CREATE TABLE IF NOT EXISTS crawl_done (
        name TEXT PRIMARY KEY,
        page INTEGER NOT NULL,
        reason TEXT NOT NULL DEFAULT '',
        finished_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
)

HASHES_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS archive_items (
        id BIGSERIAL PRIMARY KEY,
        name TEXT UNIQUE NOT NULL,
        recorded_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS item_hashes (
        hash BYTEA NOT NULL CHECK (octet_length(hash) = 20),
        item_id BIGINT NOT NULL REFERENCES archive_items (id) ON DELETE CASCADE,
        PRIMARY KEY (hash, item_id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_item_hashes_item ON item_hashes (item_id)",
)


def ensure_schema() -> None:
    """Create any missing tables and indexes in both stores."""
    for store, statements in ((LEDGER, LEDGER_SCHEMA), (HASHES, HASHES_SCHEMA)):
        with get_connection(store) as conn:
            for statement in statements:
                conn.execute(statement)
            conn.commit()
