"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from infrastructure.dependencies import create_http_client
from infrastructure.logging import configure_logging
from infrastructure.settings import get_settings, get_supabase_settings
from infrastructure.version import __version__
from onboarding.presentation import router as onboarding_router


@asynccontextmanager
async def ecclesia_lifespan(app: FastAPI):
    """Application lifespan context.

    Manages:
    - Logging configuration
    - Shared HTTP client for backend calls (closed on shutdown)
    """
    configure_logging(debug=get_settings().debug)

    async with create_http_client(get_supabase_settings()) as client:
        app.state.http_client = client
        yield


app = FastAPI(
    title="Ecclesia API",
    description="Church onboarding on a hosted multi-tenant backend",
    version=__version__,
    lifespan=ecclesia_lifespan,
)

# Include Onboarding bounded context routes
app.include_router(onboarding_router)


@app.get("/health")
def health():
    """Basic health check endpoint."""
    return {"status": "ok", "version": __version__}
