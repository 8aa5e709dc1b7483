"""Storage driver interface for namespaced object persistence."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass, field


@dataclass
class ListFilesResult:
    """One page of a namespace listing.

    ``page`` is the opaque cursor for the next page, or None when the
    listing is exhausted.
    """

    entries: list[str] = field(default_factory=list)
    page: str | None = None


class StorageDriver(ABC):
    """Interface for storage backends.

    Implementations: MemoryDriver, DiskDriver, S3Driver

    Drivers must accept concurrent ``store`` calls for different
    (namespace, path) pairs. Concurrent writes to the same pair are
    last-write-wins.
    """

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Return the backend identifier used in configuration."""
        ...

    @property
    @abstractmethod
    def read_url_prefix(self) -> str:
        """Return the prefix clients use to build read URLs (ends with '/')."""
        ...

    def public_url(self, namespace: str, path: str) -> str:
        return f"{self.read_url_prefix}{namespace}/{path}"

    @abstractmethod
    async def store(
        self,
        namespace: str,
        path: str,
        content: AsyncIterator[bytes],
        content_type: str,
    ) -> str:
        """Persist an object and return its public URL.

        Args:
            namespace: Validated namespace address
            path: Normalized object path
            content: Object bytes, streamed
            content_type: MIME type to record with the object

        Returns:
            Public read URL for the object
        """
        ...

    @abstractmethod
    async def list_files(self, namespace: str, page: str | None) -> ListFilesResult:
        """List one page of object paths in a namespace.

        Args:
            namespace: Validated namespace address
            page: Cursor returned by a previous call, or None for the first page

        Returns:
            ListFilesResult; an empty namespace yields no entries and page=None

        Raises:
            InvalidPageError: If the cursor was not issued by this driver
        """
        ...

    async def start(self) -> None:
        """Prepare backend resources at application startup."""
        return None

    async def close(self) -> None:
        """Release backend resources at application shutdown."""
        return None
