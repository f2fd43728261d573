"""FastAPI application for the Activation Service."""

from fastapi import FastAPI
from libs.common.events import EventBus
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import add_rate_limiting
from services.activation_service.routers import admin_router, doer_router
from services.activation_service.services.listeners import register_listeners


def create_app() -> FastAPI:
    """Create and configure the Activation Service FastAPI app."""
    app = FastAPI(
        title="Doer Activation Service",
        version="0.1.0",
        description="Training, quiz and bank-details activation gates for doers.",
    )
    add_observability_middleware(app)
    add_rate_limiting(app)

    bus = EventBus()
    register_listeners(bus)
    app.state.event_bus = bus

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "activation"}

    # Doer-facing routes
    app.include_router(doer_router)

    # Admin routes
    app.include_router(admin_router)

    return app


app = create_app()
