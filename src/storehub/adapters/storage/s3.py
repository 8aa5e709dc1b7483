"""S3 storage driver.

Objects are stored under ``<namespace>/<path>`` keys. Listing uses the S3
continuation token as the page cursor, so ordering and page boundaries
follow S3's own key order.
"""

import logging
from collections.abc import AsyncIterator

from botocore.exceptions import ClientError

from storehub.core.errors import InvalidPageError
from storehub.core.interfaces import ListFilesResult, StorageDriver
from storehub.infra.s3 import S3Connection

logger = logging.getLogger(__name__)


class S3Driver(StorageDriver):
    """S3-compatible object store driver."""

    def __init__(
        self,
        connection: S3Connection,
        read_url_prefix: str | None = None,
        page_size: int = 100,
    ) -> None:
        self._connection = connection
        self._page_size = page_size
        if read_url_prefix is None:
            endpoint = (connection.endpoint_url or "https://s3.amazonaws.com").rstrip("/")
            read_url_prefix = f"{endpoint}/{connection.bucket_name}"
        self._read_url_prefix = read_url_prefix.rstrip("/") + "/"

    @property
    def backend_name(self) -> str:
        return "s3"

    @property
    def read_url_prefix(self) -> str:
        return self._read_url_prefix

    async def start(self) -> None:
        await self._connection.ensure_bucket()

    async def store(
        self,
        namespace: str,
        path: str,
        content: AsyncIterator[bytes],
        content_type: str,
    ) -> str:
        # put_object needs a sized body; the upload limit bounds the buffer
        body = b"".join([chunk async for chunk in content])
        async with self._connection.client() as s3:
            await s3.put_object(
                Bucket=self._connection.bucket_name,
                Key=f"{namespace}/{path}",
                Body=body,
                ContentType=content_type,
            )
        return self.public_url(namespace, path)

    async def list_files(self, namespace: str, page: str | None) -> ListFilesResult:
        prefix = f"{namespace}/"
        params: dict[str, object] = {
            "Bucket": self._connection.bucket_name,
            "Prefix": prefix,
            "MaxKeys": self._page_size,
        }
        if page is not None:
            params["ContinuationToken"] = page

        async with self._connection.client() as s3:
            try:
                response = await s3.list_objects_v2(**params)
            except ClientError as e:
                code = e.response.get("Error", {}).get("Code")
                if page is not None and code == "InvalidArgument":
                    raise InvalidPageError() from e
                raise

        entries = [obj["Key"][len(prefix) :] for obj in response.get("Contents", [])]
        next_page = None
        if response.get("IsTruncated"):
            next_page = response.get("NextContinuationToken")
        return ListFilesResult(entries=entries, page=next_page)
