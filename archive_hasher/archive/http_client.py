from typing import TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from archive_hasher.archive.base import BaseArchiveClient
from archive_hasher.archive.exceptions import ArchiveFetchError, ArchiveRequestError
from archive_hasher.archive.models import (
    FilesResponse,
    ItemFile,
    ItemKind,
    MediatypeResponse,
    SearchResponse,
)

ModelT = TypeVar("ModelT", bound=BaseModel)

COLLECTION_MEDIATYPE = "collection"


class ArchiveHttpClient(BaseArchiveClient):
    """Archive client built on the Internet Archive search and metadata APIs."""

    def __init__(
        self,
        *,
        base_url: str,
        timeout_seconds: float,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout_seconds,
            headers={"Accept-Encoding": "gzip"},
            follow_redirects=True,
            transport=transport,
        )

    def __enter__(self) -> "ArchiveHttpClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def fetch_page(self, collection: str, page_size: int, page: int) -> list[str]:
        if page_size < 1 or page < 1:
            raise ArchiveRequestError(
                f"count ({page_size}) and page ({page}) must be >= 1"
            )
        params = {
            "q": f"collection:{collection}",
            "fl[]": "identifier",
            "rows": page_size,
            "page": page,
            "sort[]": "downloads desc",
            "output": "json",
        }
        payload = self._get_json("/advancedsearch.php", SearchResponse, params=params)
        # docs without an identifier cannot be looked up
        return [doc.identifier for doc in payload.response.docs if doc.identifier]

    def fetch_kind(self, item: str) -> ItemKind:
        payload = self._get_json(f"/metadata/{item}/metadata/mediatype", MediatypeResponse)
        return ItemKind(is_collection=payload.result == COLLECTION_MEDIATYPE)

    def fetch_files(self, item: str) -> list[ItemFile]:
        payload = self._get_json(f"/metadata/{item}/files", FilesResponse)
        return [ItemFile(name=entry.name, sha1=entry.sha1) for entry in payload.result]

    def _get_json(
        self,
        path: str,
        model: type[ModelT],
        params: dict[str, str | int] | None = None,
    ) -> ModelT:
        try:
            response = self._client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise ArchiveFetchError(f"GET {path} failed: {exc}") from exc

        try:
            return model.model_validate_json(response.content)
        except ValidationError as exc:
            raise ArchiveFetchError(f"GET {path} returned unexpected JSON: {exc}") from exc
