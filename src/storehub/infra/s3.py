"""S3 client management."""

import logging
from types import TracebackType

import aioboto3
from botocore.exceptions import ClientError
from types_aiobotocore_s3 import S3Client

from storehub.core.logging_schema import Component, LogEvent

logger = logging.getLogger(__name__)


class S3Connection:
    """Connection parameters plus the aioboto3 session they are used with."""

    def __init__(
        self,
        bucket_name: str,
        endpoint_url: str | None = None,
        region: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        session: aioboto3.Session | None = None,
    ) -> None:
        self.bucket_name = bucket_name
        self.endpoint_url = endpoint_url
        self.region = region
        self._access_key = access_key
        self._secret_key = secret_key
        self._session = session or aioboto3.Session()

    def client(self) -> "S3ClientContext":
        return S3ClientContext(self)

    def _open(self) -> object:
        return self._session.client(
            "s3",
            endpoint_url=self.endpoint_url,
            region_name=self.region,
            aws_access_key_id=self._access_key,
            aws_secret_access_key=self._secret_key,
        )

    async def ensure_bucket(self) -> None:
        """Create the bucket if it does not exist yet."""
        try:
            async with self.client() as s3:
                try:
                    await s3.head_bucket(Bucket=self.bucket_name)
                    logger.info(
                        "S3 storage connected",
                        extra={
                            "event": LogEvent.S3_CONNECTED,
                            "component": Component.DRIVER,
                            "bucket": self.bucket_name,
                            "endpoint": self.endpoint_url,
                        },
                    )
                except ClientError:
                    await s3.create_bucket(Bucket=self.bucket_name)
                    logger.info(
                        "S3 bucket created",
                        extra={
                            "event": LogEvent.S3_BUCKET_CREATED,
                            "component": Component.DRIVER,
                            "bucket": self.bucket_name,
                            "endpoint": self.endpoint_url,
                        },
                    )
        except Exception as e:
            logger.error(
                "S3 connection failed",
                extra={
                    "event": LogEvent.S3_ERROR,
                    "component": Component.DRIVER,
                    "error_type": type(e).__name__,
                    "error": str(e),
                    "bucket": self.bucket_name,
                    "endpoint": self.endpoint_url,
                },
            )
            raise


class S3ClientContext:
    """Context manager for S3 client."""

    def __init__(self, connection: S3Connection) -> None:
        self._connection = connection
        self._client: S3Client | None = None
        self._context: object | None = None

    async def __aenter__(self) -> S3Client:
        self._context = self._connection._open()
        self._client = await self._context.__aenter__()
        return self._client

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._context:
            await self._context.__aexit__(exc_type, exc_val, exc_tb)
