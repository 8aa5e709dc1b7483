"""Core interfaces for storehub."""

from storehub.core.interfaces.storage import ListFilesResult, StorageDriver

__all__ = [
    "ListFilesResult",
    "StorageDriver",
]
