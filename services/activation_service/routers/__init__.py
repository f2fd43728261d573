"""Activation Service routers."""

from services.activation_service.routers.admin import router as admin_router
from services.activation_service.routers.doer import router as doer_router

__all__ = ["admin_router", "doer_router"]
