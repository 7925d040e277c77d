import pytest

from archive_hasher.archive.models import ItemFile

VALID_SHA1 = "da39a3ee5e6b4b0d3255bfef95601890afd80709"


@pytest.fixture()
def valid_sha1() -> str:
    """A well-formed 40 character hex SHA-1."""
    return VALID_SHA1


@pytest.fixture()
def mixed_files() -> list[ItemFile]:
    """Files of item "x": a thumbnail, a generated metadata file and one real file."""
    return [
        ItemFile(name="__ia_thumb.jpg", sha1="aa" * 20),
        ItemFile(name="x_meta.xml", sha1="bb" * 20),
        ItemFile(name="data.bin", sha1=VALID_SHA1),
    ]
