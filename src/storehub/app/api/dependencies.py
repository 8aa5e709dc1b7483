"""Shared dependencies for API endpoints."""

from typing import Annotated

from fastapi import Depends, Request

from storehub.app.config import Settings
from storehub.core.hub import HubServer


def get_hub(request: Request) -> HubServer:
    """Get the HubServer built by create_app."""
    return request.app.state.hub


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


Hub = Annotated[HubServer, Depends(get_hub)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]
