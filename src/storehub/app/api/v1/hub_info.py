"""Discovery endpoint.

Endpoints:
- GET /hub_info/ - Challenge text, latest auth version and read URL prefix
"""

from fastapi import APIRouter
from pydantic import BaseModel

from storehub.app.api.dependencies import Hub
from storehub.core.authentication import (
    LATEST_AUTH_VERSION,
    MIN_CHALLENGE_TEXT_LENGTH,
    get_challenge_text,
)
from storehub.core.errors import ConfigurationError

router = APIRouter(tags=["hub"])


class HubInfoResponse(BaseModel):
    """Response schema for hub discovery."""

    challenge_text: str
    latest_auth_version: str
    read_url_prefix: str


@router.get("/hub_info/")
async def hub_info(hub: Hub) -> HubInfoResponse:
    """Describe how clients authenticate against and read from this hub.

    A challenge text shorter than MIN_CHALLENGE_TEXT_LENGTH is a deployment
    defect and is never served.
    """
    challenge_text = get_challenge_text(hub.server_name)
    if len(challenge_text) < MIN_CHALLENGE_TEXT_LENGTH:
        raise ConfigurationError("Server challenge text misconfigured")

    return HubInfoResponse(
        challenge_text=challenge_text,
        latest_auth_version=LATEST_AUTH_VERSION.value,
        read_url_prefix=hub.get_read_url_prefix(),
    )
