"""Infrastructure clients shared by adapters."""

from storehub.infra.s3 import S3ClientContext, S3Connection

__all__ = ["S3ClientContext", "S3Connection"]
