"""Local disk storage driver.

Objects live at ``storage_root_dir/<namespace>/<path>``. Each write
streams into a temporary file beside its target and is moved into place
with ``os.replace``, so readers see either the old or the new object and
a cancelled upload leaves nothing behind.
"""

import asyncio
import os
import tempfile
from collections.abc import AsyncIterator

from storehub.adapters.storage.cursor import paginate
from storehub.core.interfaces import ListFilesResult, StorageDriver

_TEMP_PREFIX = ".storehub-upload-"


def _current_umask() -> int:
    # os.umask can only be read by setting it
    mask = os.umask(0)
    os.umask(mask)
    return mask


class DiskDriver(StorageDriver):
    """Storage driver writing to a local directory tree."""

    def __init__(
        self,
        storage_root_dir: str,
        read_url_prefix: str,
        page_size: int = 100,
    ) -> None:
        """Initialize with the storage root directory.

        Args:
            storage_root_dir: Absolute directory that holds all namespaces
            read_url_prefix: Prefix of the server that publishes this tree
            page_size: Maximum entries per listing page
        """
        self._root = storage_root_dir.rstrip("/")
        self._read_url_prefix = read_url_prefix.rstrip("/") + "/"
        self._page_size = page_size
        # mkstemp creates 0600 files; published objects get the usual 0666 & ~umask
        self._file_mode = 0o666 & ~_current_umask()

    @property
    def backend_name(self) -> str:
        return "disk"

    @property
    def read_url_prefix(self) -> str:
        return self._read_url_prefix

    def _namespace_dir(self, namespace: str) -> str:
        return os.path.join(self._root, namespace)

    def _compute_path(self, namespace: str, path: str) -> str:
        return os.path.join(self._root, namespace, *path.split("/"))

    async def start(self) -> None:
        await asyncio.to_thread(os.makedirs, self._root, exist_ok=True)

    async def store(
        self,
        namespace: str,
        path: str,
        content: AsyncIterator[bytes],
        content_type: str,
    ) -> str:
        """Write an object atomically.

        The content type is not persisted; the disk tree is expected to be
        published by a static file server that infers it.
        """
        target = self._compute_path(namespace, path)
        directory = os.path.dirname(target)
        await asyncio.to_thread(os.makedirs, directory, exist_ok=True)

        fd, temp_path = await asyncio.to_thread(
            tempfile.mkstemp, prefix=_TEMP_PREFIX, dir=directory
        )
        try:
            os.fchmod(fd, self._file_mode)
            with os.fdopen(fd, "wb") as f:
                async for chunk in content:
                    await asyncio.to_thread(f.write, chunk)
            await asyncio.to_thread(os.replace, temp_path, target)
        except BaseException:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise

        return self.public_url(namespace, path)

    def _walk(self, namespace: str) -> list[str]:
        base = self._namespace_dir(namespace)
        paths: list[str] = []
        for dirpath, _dirnames, filenames in os.walk(base):
            rel_dir = os.path.relpath(dirpath, base)
            for filename in filenames:
                if filename.startswith(_TEMP_PREFIX):
                    continue
                rel = filename if rel_dir == "." else os.path.join(rel_dir, filename)
                paths.append(rel.replace(os.sep, "/"))
        paths.sort()
        return paths

    async def list_files(self, namespace: str, page: str | None) -> ListFilesResult:
        paths = await asyncio.to_thread(self._walk, namespace)
        return paginate(paths, page, self._page_size)
