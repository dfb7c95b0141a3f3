"""API routes package."""

from sync_node.routes.config_routes import router as config_router
from sync_node.routes.internal_routes import router as internal_router

__all__ = ["config_router", "internal_router"]
