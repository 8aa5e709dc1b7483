"""In-process storage driver for development and tests."""

from collections.abc import AsyncIterator
from dataclasses import dataclass

from storehub.adapters.storage.cursor import paginate
from storehub.core.interfaces import ListFilesResult, StorageDriver


@dataclass
class StoredObject:
    content: bytes
    content_type: str


class MemoryDriver(StorageDriver):
    """Keeps objects in a dict keyed by namespace, then path."""

    def __init__(self, read_url_prefix: str, page_size: int = 100) -> None:
        self._read_url_prefix = read_url_prefix.rstrip("/") + "/"
        self._page_size = page_size
        self._objects: dict[str, dict[str, StoredObject]] = {}

    @property
    def backend_name(self) -> str:
        return "memory"

    @property
    def read_url_prefix(self) -> str:
        return self._read_url_prefix

    async def store(
        self,
        namespace: str,
        path: str,
        content: AsyncIterator[bytes],
        content_type: str,
    ) -> str:
        # Buffer first so a failed stream leaves the previous object intact
        chunks = [chunk async for chunk in content]
        self._objects.setdefault(namespace, {})[path] = StoredObject(
            content=b"".join(chunks), content_type=content_type
        )
        return self.public_url(namespace, path)

    async def list_files(self, namespace: str, page: str | None) -> ListFilesResult:
        paths = sorted(self._objects.get(namespace, {}))
        return paginate(paths, page, self._page_size)

    def get(self, namespace: str, path: str) -> StoredObject | None:
        return self._objects.get(namespace, {}).get(path)
