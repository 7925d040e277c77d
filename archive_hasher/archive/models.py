from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class ItemFile:
    """One file of an archive item with its hex-encoded SHA-1."""

    name: str
    sha1: str = ""


@dataclass(frozen=True)
class ItemKind:
    """Whether an archive entry is a collection or a leaf item."""

    is_collection: bool


class SearchDoc(BaseModel):
    model_config = ConfigDict(extra="ignore")

    identifier: str = ""


class SearchResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    num_found: int = Field(default=0, alias="numFound")
    start: int = 0
    docs: list[SearchDoc] = Field(default_factory=list)


class SearchResponse(BaseModel):
    """Payload of advancedsearch.php with output=json."""

    model_config = ConfigDict(extra="ignore")

    response: SearchResult


class MediatypeResponse(BaseModel):
    """Payload of /metadata/<item>/metadata/mediatype."""

    model_config = ConfigDict(extra="ignore")

    result: str | None = None


class FileEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    sha1: str = ""


class FilesResponse(BaseModel):
    """Payload of /metadata/<item>/files."""

    model_config = ConfigDict(extra="ignore")

    result: list[FileEntry] = Field(default_factory=list)
