"""Adapters module - infrastructure implementations."""

from storehub.adapters.proofs import HttpProofSource
from storehub.adapters.storage import DiskDriver, MemoryDriver, S3Driver, create_driver

__all__ = [
    "DiskDriver",
    "HttpProofSource",
    "MemoryDriver",
    "S3Driver",
    "create_driver",
]
