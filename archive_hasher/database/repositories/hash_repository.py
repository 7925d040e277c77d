import binascii
from collections.abc import Sequence

import psycopg
from psycopg.rows import dict_row

from archive_hasher.archive.models import ItemFile
from archive_hasher.database.connection import HASHES, get_connection
from archive_hasher.database.exceptions import (
    ItemAlreadyRecordedError,
    ItemInsertError,
    NoFilesError,
    NoValidContentError,
    StorageError,
)
from archive_hasher.logging.logger import Log

THUMBNAIL_FILE = "__ia_thumb.jpg"

# Files the archive derives from every item; they say nothing about its content.
GENERATED_SUFFIXES = frozenset(
    {
        "_archive.torrent",
        "_files.xml",
        "_meta.sqlite",
        "_meta.xml",
        "_reviews.xml",
    }
)

SHA1_HEX_LENGTH = 40


def is_generated_file(item_name: str, file_name: str) -> bool:
    """True for the thumbnail and the archive's per-item metadata files."""
    if file_name == THUMBNAIL_FILE:
        return True
    if file_name.startswith(item_name):
        return file_name[len(item_name):] in GENERATED_SUFFIXES
    return False


def decode_hash(item_name: str, file: ItemFile) -> bytes | None:
    """Decode a file's hex SHA-1, logging and returning None if it is unusable."""
    if len(file.sha1) != SHA1_HEX_LENGTH:
        Log.warning(
            f"item {item_name}: file {file.name}: hash '{file.sha1}' would not be 20 bytes",
            item=item_name,
            file_name=file.name,
        )
        return None
    try:
        return binascii.unhexlify(file.sha1)
    except (binascii.Error, ValueError) as exc:
        Log.warning(
            f"item {item_name}: file {file.name}: {exc} in '{file.sha1}'",
            item=item_name,
            file_name=file.name,
        )
        return None


class HashRepository:
    """Database operations for the archive_items and item_hashes tables."""

    def record(self, item_name: str, files: Sequence[ItemFile]) -> int:
        """Store an item and the content hashes of its files.

        The item row and its hash rows are written in one transaction. Files
        that are generated by the archive or carry an unusable hash are skipped,
        as is any single hash insert the database rejects.

        Returns:
            The number of hashes stored.

        Raises:
            NoFilesError: if files is empty.
            ItemAlreadyRecordedError: if the item was recorded before.
            ItemInsertError: if the database rejects the item row.
            NoValidContentError: if no file yielded a hash; nothing is stored.
        """
        if not files:
            raise NoFilesError(f"Item {item_name} has no files")

        with get_connection(HASHES) as conn:
            with conn.transaction():
                with conn.cursor(row_factory=dict_row) as cur:
                    try:
                        cur.execute(
                            "INSERT INTO archive_items (name) VALUES (%s) RETURNING id",
                            (item_name,),
                        )
                    except psycopg.errors.UniqueViolation as exc:
                        raise ItemAlreadyRecordedError(
                            f"Item {item_name} already recorded"
                        ) from exc
                    except psycopg.Error as exc:
                        raise ItemInsertError(
                            f"Item {item_name} could not be stored: {exc}"
                        ) from exc
                    row = cur.fetchone()
                    if row is None:
                        raise StorageError(f"Item {item_name} was not inserted")
                    item_id = row["id"]

                    inserted = 0
                    for file in files:
                        if is_generated_file(item_name, file.name):
                            continue
                        digest = decode_hash(item_name, file)
                        if digest is None:
                            continue
                        try:
                            # savepoint: a rejected row must not abort the item
                            with conn.transaction():
                                cur.execute(
                                    "INSERT INTO item_hashes (hash, item_id) VALUES (%s, %s)",
                                    (digest, item_id),
                                )
                        except psycopg.Error as exc:
                            Log.warning(
                                f"item {item_name}: file {file.name}: {exc}",
                                item=item_name,
                                file_name=file.name,
                            )
                            continue
                        inserted += 1

                    if inserted == 0:
                        raise NoValidContentError(f"Item {item_name} has no valid files")

        Log.debug(f"Recorded {inserted} hashes for item {item_name}", item=item_name)
        return inserted

    def item_exists(self, item_name: str) -> bool:
        with get_connection(HASHES) as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute("SELECT 1 FROM archive_items WHERE name = %s", (item_name,))
                return cur.fetchone() is not None

    def find_hashes(self, item_name: str) -> list[bytes]:
        """Return the stored hashes of an item, empty if it was never recorded."""
        with get_connection(HASHES) as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT h.hash
                    FROM item_hashes h
                    JOIN archive_items i ON i.id = h.item_id
                    WHERE i.name = %s
                    ORDER BY h.hash
                    """,
                    (item_name,),
                )
                rows = cur.fetchall()
        return [bytes(row["hash"]) for row in rows]
