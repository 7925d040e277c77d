import os
from collections.abc import Generator

import pytest

from archive_hasher.config.settings import Settings
from archive_hasher.database.connection import (
    HASHES,
    LEDGER,
    close_pools,
    get_connection,
    init_pools,
)
from archive_hasher.database.repositories.hash_repository import HashRepository
from archive_hasher.database.repositories.ledger_repository import LedgerRepository
from archive_hasher.database.schema import ensure_schema


def _test_settings() -> Settings:
    os.environ.setdefault("LEDGER_DB_DATABASE", "archive_ledger_test")
    os.environ.setdefault("HASHES_DB_DATABASE", "archive_hashes_test")
    os.environ.setdefault("DB_CONNECT_TIMEOUT_SECONDS", "3")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pools(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pools(test_settings)
        ensure_schema()
    except Exception as e:
        close_pools()
        pytest.skip(
            f"PostgreSQL test databases not available: {e}. "
            "Set DB_* / LEDGER_DB_DATABASE / HASHES_DB_DATABASE env"
        )
    try:
        yield
    finally:
        close_pools()


@pytest.fixture(autouse=True)
def clean_stores(integration_pools: None) -> Generator[None, None, None]:
    yield
    with get_connection(LEDGER) as conn:
        conn.execute("TRUNCATE crawl_jobs, crawl_done")
        conn.commit()
    with get_connection(HASHES) as conn:
        conn.execute("TRUNCATE item_hashes, archive_items")
        conn.commit()


@pytest.fixture
def ledger() -> LedgerRepository:
    return LedgerRepository()


@pytest.fixture
def recorder() -> HashRepository:
    return HashRepository()
