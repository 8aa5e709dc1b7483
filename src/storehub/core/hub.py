"""Hub server: request authorization and dispatch to the storage driver.

Order of checks for a write:
    path -> authentication -> proofs -> size -> driver.store

A request that fails any check never reaches the driver. Known
StoreHubError kinds pass through unchanged; anything else raised while
serving a request is logged with full detail and surfaced as ServerError.
"""

import logging
import time
from collections.abc import AsyncIterator, Mapping

from storehub.core.authentication import Authenticator
from storehub.core.errors import PayloadTooLargeError, ServerError, StoreHubError
from storehub.core.interfaces import ListFilesResult, StorageDriver
from storehub.core.logging_schema import Component, LogEvent
from storehub.core.paths import normalize_path, validate_namespace
from storehub.core.proofs import ProofChecker

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def _header(headers: Mapping[str, str], name: str) -> str | None:
    return headers.get(name) or headers.get(name.title())


async def _limit_stream(
    body: AsyncIterator[bytes], max_bytes: int
) -> AsyncIterator[bytes]:
    received = 0
    async for chunk in body:
        received += len(chunk)
        if received > max_bytes:
            raise PayloadTooLargeError()
        yield chunk


class HubServer:
    """Composes validation, authentication, proof checks and a driver."""

    def __init__(
        self,
        driver: StorageDriver,
        authenticator: Authenticator,
        proof_checker: ProofChecker,
        max_upload_bytes: int,
    ) -> None:
        self.driver = driver
        self.authenticator = authenticator
        self.proof_checker = proof_checker
        self.max_upload_bytes = max_upload_bytes

    @property
    def server_name(self) -> str:
        return self.authenticator.server_name

    @property
    def challenge_text(self) -> str:
        return self.authenticator.challenge_text

    def get_read_url_prefix(self) -> str:
        return self.driver.read_url_prefix

    async def handle_request(
        self,
        namespace: str,
        path: str,
        headers: Mapping[str, str],
        body: AsyncIterator[bytes],
    ) -> str:
        """Authorize and store one object, returning its public URL.

        Raises:
            BadPathError: Invalid namespace or path
            ValidationError: Authentication failed
            NotEnoughProofError: Proof policy not satisfied
            PayloadTooLargeError: Body exceeds max_upload_bytes
            ServerError: Driver or proof service failure
        """
        validate_namespace(namespace)
        path = normalize_path(path)

        start = time.monotonic()
        try:
            self.authenticator.authenticate(headers, namespace)
            await self.proof_checker.ensure_proofs(namespace)

            declared = _header(headers, "content-length")
            if declared is not None and declared.isdigit():
                if int(declared) > self.max_upload_bytes:
                    raise PayloadTooLargeError()

            content_type = _header(headers, "content-type") or DEFAULT_CONTENT_TYPE
            public_url = await self.driver.store(
                namespace,
                path,
                _limit_stream(body, self.max_upload_bytes),
                content_type,
            )
        except StoreHubError:
            raise
        except Exception as e:
            logger.exception(
                "Store failed",
                extra={
                    "event": LogEvent.BACKEND_ERROR,
                    "component": Component.HUB,
                    "backend": self.driver.backend_name,
                    "namespace": namespace,
                    "path": path,
                    "error_type": type(e).__name__,
                },
            )
            raise ServerError() from e

        logger.info(
            "Object stored",
            extra={
                "event": LogEvent.STORE_COMPLETE,
                "component": Component.HUB,
                "namespace": namespace,
                "path": path,
                "content_type": content_type,
                "duration_ms": (time.monotonic() - start) * 1000,
            },
        )
        return public_url

    async def handle_list_files(
        self,
        namespace: str,
        page: str | None,
        headers: Mapping[str, str],
    ) -> ListFilesResult:
        """Authorize and list one page of a namespace.

        Listing is read-level trust: the proof checker is never consulted.
        """
        validate_namespace(namespace)

        try:
            self.authenticator.authenticate(headers, namespace)
            result = await self.driver.list_files(namespace, page)
        except StoreHubError:
            raise
        except Exception as e:
            logger.exception(
                "List failed",
                extra={
                    "event": LogEvent.BACKEND_ERROR,
                    "component": Component.HUB,
                    "backend": self.driver.backend_name,
                    "namespace": namespace,
                    "error_type": type(e).__name__,
                },
            )
            raise ServerError() from e

        logger.debug(
            "Listed files",
            extra={
                "event": LogEvent.LIST_COMPLETE,
                "component": Component.HUB,
                "namespace": namespace,
                "count": len(result.entries),
                "has_more": result.page is not None,
            },
        )
        return result
