"""Shared infrastructure dependencies.

Provides ONLY raw backend infrastructure resources (HTTP client, access
token). Does NOT import from bounded contexts to maintain DDD boundaries.
"""

from typing import Annotated

import httpx
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from infrastructure.settings import SupabaseSettings

# Missing credentials are not an error here: the session guard decides.
bearer_scheme = HTTPBearer(auto_error=False)


def create_http_client(settings: SupabaseSettings) -> httpx.AsyncClient:
    """Create the application-scoped client used for all backend calls."""
    return httpx.AsyncClient(timeout=settings.timeout_seconds)


def get_http_client(request: Request) -> httpx.AsyncClient:
    """Get the shared HTTP client created in the application lifespan."""
    return request.app.state.http_client


def get_access_token(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ],
) -> str | None:
    """Get the caller's backend access token from the Authorization header."""
    if credentials is None:
        return None
    return credentials.credentials
