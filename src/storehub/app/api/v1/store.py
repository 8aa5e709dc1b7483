"""Object write and listing endpoints.

Endpoints:
- POST /store/{namespace}/{path} - Store raw request body as an object
- POST /list-files/{namespace} - List one page of object paths
"""

import json

from fastapi import APIRouter, Request, status
from pydantic import BaseModel

from storehub.app.api.dependencies import AppSettings, Hub
from storehub.app.metrics.collector import HUB_OPERATIONS_TOTAL
from storehub.core.errors import InvalidRequestError, StoreHubError

router = APIRouter(tags=["store"])

BODY_TOO_LONG_MESSAGE = "Invalid JSON: too long"


class StoreResponse(BaseModel):
    """Response schema for a stored object."""

    publicURL: str  # noqa: N815 - wire format


class ListFilesResponse(BaseModel):
    """Response schema for one listing page."""

    entries: list[str]
    page: str | None


async def _read_limited_body(request: Request, max_bytes: int) -> bytes:
    """Read the request body, refusing anything above max_bytes.

    The declared Content-Length is checked first so an oversized body is
    rejected without reading it.
    """
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > max_bytes:
        raise InvalidRequestError(BODY_TOO_LONG_MESSAGE)

    body = bytearray()
    async for chunk in request.stream():
        body += chunk
        if len(body) > max_bytes:
            raise InvalidRequestError(BODY_TOO_LONG_MESSAGE)
    return bytes(body)


def _parse_page(body: bytes) -> str | None:
    if not body.strip():
        return None
    try:
        data = json.loads(body)
    except ValueError as e:
        raise InvalidRequestError("Invalid JSON") from e
    if not isinstance(data, dict):
        raise InvalidRequestError("Invalid JSON: expected an object")

    page = data.get("page")
    if page is None or page == "":
        return None
    if not isinstance(page, str):
        raise InvalidRequestError("Invalid JSON: page must be a string")
    return page


@router.post("/store/{namespace}/{path:path}", status_code=status.HTTP_202_ACCEPTED)
async def store_object(namespace: str, path: str, request: Request, hub: Hub) -> StoreResponse:
    """Store the raw request body at namespace/path.

    Returns 401 on authentication failure, 402 when the namespace lacks
    proofs, 403 for a bad path and 413 when the body is too large.
    """
    try:
        public_url = await hub.handle_request(
            namespace, path, request.headers, request.stream()
        )
    except StoreHubError as e:
        HUB_OPERATIONS_TOTAL.labels(operation="store", outcome=e.code.value).inc()
        raise

    HUB_OPERATIONS_TOTAL.labels(operation="store", outcome="ok").inc()
    return StoreResponse(publicURL=public_url)


@router.post("/list-files/{namespace}", status_code=status.HTTP_202_ACCEPTED)
@router.post(
    "/list-files/{namespace}/",
    status_code=status.HTTP_202_ACCEPTED,
    include_in_schema=False,
)
async def list_files(
    namespace: str, request: Request, hub: Hub, settings: AppSettings
) -> ListFilesResponse:
    """List one page of namespace objects.

    Body: optional JSON ``{"page": <cursor>}``; omit for the first page.
    """
    try:
        body = await _read_limited_body(request, settings.limits.list_body_max_bytes)
        page = _parse_page(body)
        result = await hub.handle_list_files(namespace, page, request.headers)
    except StoreHubError as e:
        HUB_OPERATIONS_TOTAL.labels(operation="list", outcome=e.code.value).inc()
        raise

    HUB_OPERATIONS_TOTAL.labels(operation="list", outcome="ok").inc()
    return ListFilesResponse(entries=result.entries, page=result.page)
