from unittest.mock import MagicMock, patch

import psycopg
import pytest

from archive_hasher.archive.models import ItemFile
from archive_hasher.database.exceptions import (
    ItemAlreadyRecordedError,
    ItemInsertError,
    NoFilesError,
    NoValidContentError,
)
from archive_hasher.database.repositories.hash_repository import (
    HashRepository,
    decode_hash,
    is_generated_file,
)

PATCH_TARGET = "archive_hasher.database.repositories.hash_repository.get_connection"


def _mock_connection(mock_get_conn: MagicMock) -> tuple[MagicMock, MagicMock]:
    """Wire up a mock connection + cursor and return (mock_conn, mock_cursor)."""
    mock_cursor = MagicMock()
    mock_cursor.fetchone.return_value = {"id": 42}
    mock_conn = MagicMock()
    mock_conn.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
    mock_conn.cursor.return_value.__exit__ = MagicMock(return_value=False)
    mock_get_conn.return_value.__enter__ = MagicMock(return_value=mock_conn)
    mock_get_conn.return_value.__exit__ = MagicMock(return_value=False)
    return mock_conn, mock_cursor


def _hash_inserts(mock_cursor: MagicMock) -> list[tuple]:
    return [
        c.args[1]
        for c in mock_cursor.execute.call_args_list
        if "INSERT INTO item_hashes" in c.args[0]
    ]


class TestIsGeneratedFile:
    def test_thumbnail(self) -> None:
        assert is_generated_file("x", "__ia_thumb.jpg") is True

    @pytest.mark.parametrize(
        "suffix",
        ["_archive.torrent", "_files.xml", "_meta.sqlite", "_meta.xml", "_reviews.xml"],
    )
    def test_item_metadata_files(self, suffix: str) -> None:
        assert is_generated_file("x", f"x{suffix}") is True

    def test_suffix_of_another_item_is_content(self) -> None:
        assert is_generated_file("x", "y_meta.xml") is False

    def test_regular_file(self) -> None:
        assert is_generated_file("x", "x.pdf") is False


class TestDecodeHash:
    def test_decodes_valid_sha1(self, valid_sha1: str) -> None:
        digest = decode_hash("x", ItemFile(name="a", sha1=valid_sha1))
        assert digest == bytes.fromhex(valid_sha1)
        assert len(digest) == 20

    def test_rejects_wrong_length(self) -> None:
        assert decode_hash("x", ItemFile(name="a", sha1="abcd")) is None

    def test_rejects_missing_hash(self) -> None:
        assert decode_hash("x", ItemFile(name="a")) is None

    def test_rejects_non_hex(self) -> None:
        assert decode_hash("x", ItemFile(name="a", sha1="zz" * 20)) is None


class TestRecord:
    def test_raises_no_files_before_touching_db(self) -> None:
        with patch(PATCH_TARGET) as mock_get_conn:
            with pytest.raises(NoFilesError):
                HashRepository().record("x", [])
        mock_get_conn.assert_not_called()

    @patch(PATCH_TARGET)
    def test_inserts_only_content_files(
        self, mock_get_conn: MagicMock, mixed_files: list[ItemFile], valid_sha1: str
    ) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)

        inserted = HashRepository().record("x", mixed_files)

        assert inserted == 1
        item_sql, item_params = mock_cursor.execute.call_args_list[0].args
        assert "INSERT INTO archive_items" in item_sql
        assert item_params == ("x",)
        assert _hash_inserts(mock_cursor) == [(bytes.fromhex(valid_sha1), 42)]

    @patch(PATCH_TARGET)
    def test_only_thumbnail_raises_no_valid_content(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)

        with pytest.raises(NoValidContentError):
            HashRepository().record("x", [ItemFile(name="__ia_thumb.jpg", sha1="aa" * 20)])

        assert _hash_inserts(mock_cursor) == []

    @patch(PATCH_TARGET)
    def test_failed_insert_skips_file_and_keeps_going(
        self, mock_get_conn: MagicMock, valid_sha1: str
    ) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.execute.side_effect = [
            None,
            psycopg.errors.UniqueViolation("duplicate key"),
            None,
        ]
        files = [
            ItemFile(name="a.bin", sha1=valid_sha1),
            ItemFile(name="b.bin", sha1="0123456789abcdef0123456789abcdef01234567"),
        ]

        inserted = HashRepository().record("x", files)

        assert inserted == 1
        assert mock_cursor.execute.call_count == 3

    @patch(PATCH_TARGET)
    def test_every_insert_failing_raises_no_valid_content(
        self, mock_get_conn: MagicMock, valid_sha1: str
    ) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.execute.side_effect = [None, psycopg.errors.UniqueViolation("duplicate key")]

        with pytest.raises(NoValidContentError):
            HashRepository().record("x", [ItemFile(name="a.bin", sha1=valid_sha1)])

    @patch(PATCH_TARGET)
    def test_hash_inserts_run_in_savepoints(
        self, mock_get_conn: MagicMock, valid_sha1: str
    ) -> None:
        mock_conn, _cursor = _mock_connection(mock_get_conn)

        HashRepository().record("x", [ItemFile(name="a.bin", sha1=valid_sha1)])

        # outer transaction plus one savepoint per attempted hash
        assert mock_conn.transaction.call_count == 2

    @patch(PATCH_TARGET)
    def test_duplicate_item_raises(self, mock_get_conn: MagicMock, valid_sha1: str) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.execute.side_effect = psycopg.errors.UniqueViolation("duplicate key")

        with pytest.raises(ItemAlreadyRecordedError):
            HashRepository().record("x", [ItemFile(name="a.bin", sha1=valid_sha1)])

    @patch(PATCH_TARGET)
    def test_rejected_item_row_raises_record_error(
        self, mock_get_conn: MagicMock, valid_sha1: str
    ) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.execute.side_effect = psycopg.DataError("text fields cannot contain NUL")

        with pytest.raises(ItemInsertError) as excinfo:
            HashRepository().record("bad\x00item", [ItemFile(name="a.bin", sha1=valid_sha1)])

        assert isinstance(excinfo.value.__cause__, psycopg.DataError)
        mock_cursor.execute.assert_called_once()


class TestFindHashes:
    @patch(PATCH_TARGET)
    def test_returns_bytes(self, mock_get_conn: MagicMock, valid_sha1: str) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchall.return_value = [{"hash": memoryview(bytes.fromhex(valid_sha1))}]

        assert HashRepository().find_hashes("x") == [bytes.fromhex(valid_sha1)]
        assert mock_cursor.execute.call_args.args[1] == ("x",)
