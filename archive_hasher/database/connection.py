from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

import psycopg
from psycopg_pool import ConnectionPool

from archive_hasher.config.settings import Settings

LEDGER = "ledger"
HASHES = "hashes"

_pools: dict[str, ConnectionPool] = {}


def init_pools(settings: Settings) -> None:
    """Open one connection pool per store and wait until each can connect.

    Raises psycopg_pool.PoolTimeout if a store is unreachable.
    """
    databases = {
        LEDGER: settings.ledger_db_database,
        HASHES: settings.hashes_db_database,
    }
    try:
        for store, database in databases.items():
            pool = ConnectionPool(
                settings.conninfo(database),
                min_size=1,
                max_size=settings.db_pool_max_size,
                open=False,
            )
            _pools[store] = pool
            pool.open(wait=True, timeout=settings.db_connect_timeout_seconds)
    except Exception:
        close_pools()
        raise


def close_pools() -> None:
    """Close every open connection pool."""
    while _pools:
        _store, pool = _pools.popitem()
        pool.close()


@contextmanager
def get_connection(store: str) -> Generator[psycopg.Connection[Any], None, None]:
    """Yield a connection to the given store. Caller manages commit/rollback."""
    pool = _pools.get(store)
    if pool is None:
        raise RuntimeError(f"Connection pool '{store}' not initialized. Call init_pools() first.")
    with pool.connection() as conn:
        yield conn
