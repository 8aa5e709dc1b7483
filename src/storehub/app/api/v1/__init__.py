"""API v1 module."""

from storehub.app.api.v1.hub_info import router as hub_info_router
from storehub.app.api.v1.store import router as store_router

__all__ = ["hub_info_router", "store_router"]
