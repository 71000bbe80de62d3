"""FastAPI application factory for Cashea-Relay."""

from fastapi import FastAPI

from cashea_relay.common.config import get_settings
from cashea_relay.common.logging import setup_logging
from cashea_relay.common.schemas import HealthResponse


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
    )

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(version=settings.api_version)

    # Mount routers
    from cashea_relay.confirmation.router import router as confirmation_router

    app.include_router(confirmation_router, prefix=settings.api_prefix)

    return app
