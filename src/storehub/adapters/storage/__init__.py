"""Storage drivers and the registry that selects one from configuration."""

from collections.abc import Callable

from storehub.adapters.storage.disk import DiskDriver
from storehub.adapters.storage.memory import MemoryDriver
from storehub.adapters.storage.s3 import S3Driver
from storehub.app.config import DriverConfig
from storehub.core.interfaces import StorageDriver
from storehub.infra.s3 import S3Connection


def _disk(config: DriverConfig) -> StorageDriver:
    return DiskDriver(
        storage_root_dir=config.disk.storage_root_dir,
        read_url_prefix=config.read_url_prefix,  # type: ignore[arg-type]
        page_size=config.page_size,
    )


def _s3(config: DriverConfig) -> StorageDriver:
    connection = S3Connection(
        bucket_name=config.s3.bucket_name,
        endpoint_url=config.s3.endpoint_url,
        region=config.s3.region,
        access_key=config.s3.access_key,
        secret_key=config.s3.secret_key,
    )
    return S3Driver(
        connection,
        read_url_prefix=config.read_url_prefix,
        page_size=config.page_size,
    )


def _memory(config: DriverConfig) -> StorageDriver:
    return MemoryDriver(
        read_url_prefix=config.read_url_prefix,  # type: ignore[arg-type]
        page_size=config.page_size,
    )


DRIVERS: dict[str, Callable[[DriverConfig], StorageDriver]] = {
    "disk": _disk,
    "s3": _s3,
    "memory": _memory,
}


def create_driver(config: DriverConfig) -> StorageDriver:
    """Build the driver named by config.backend."""
    factory = DRIVERS.get(config.backend)
    if factory is None:
        raise ValueError(f"Unsupported storage backend: {config.backend}")
    return factory(config)


__all__ = [
    "DRIVERS",
    "DiskDriver",
    "MemoryDriver",
    "S3Driver",
    "create_driver",
]
