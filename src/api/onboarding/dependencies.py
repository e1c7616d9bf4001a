"""FastAPI dependency wiring for the onboarding context."""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

import httpx
from fastapi import Depends

from infrastructure.backend import SupabaseAuthProvider, SupabaseDataStore
from infrastructure.dependencies import get_access_token, get_http_client
from infrastructure.settings import get_bootstrap_settings, get_supabase_settings
from onboarding.application.observability import BootstrapProbe, DefaultBootstrapProbe
from onboarding.application.retry import RetryPolicy
from onboarding.application.services import BootstrapService, SetupStatusService
from onboarding.application.submission_lock import SubmissionLock
from shared_kernel.backend import AuthProvider, DataStore


def get_auth_provider(
    client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
    access_token: Annotated[str | None, Depends(get_access_token)],
) -> AuthProvider:
    """Get the auth provider bound to the caller's access token."""
    return SupabaseAuthProvider(client, get_supabase_settings(), access_token)


def get_data_store(
    client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
    access_token: Annotated[str | None, Depends(get_access_token)],
) -> DataStore:
    """Get the data store acting with the caller's access token."""
    return SupabaseDataStore(client, get_supabase_settings(), access_token)


@lru_cache
def get_submission_lock() -> SubmissionLock:
    """Get the process-wide registry of in-flight bootstraps (singleton)."""
    return SubmissionLock()


def get_bootstrap_probe() -> BootstrapProbe:
    """Get BootstrapProbe instance."""
    return DefaultBootstrapProbe()


def get_bootstrap_service(
    auth_provider: Annotated[AuthProvider, Depends(get_auth_provider)],
    data_store: Annotated[DataStore, Depends(get_data_store)],
    submission_lock: Annotated[SubmissionLock, Depends(get_submission_lock)],
    probe: Annotated[BootstrapProbe, Depends(get_bootstrap_probe)],
) -> BootstrapService:
    """Get BootstrapService configured from bootstrap settings."""
    settings = get_bootstrap_settings()
    return BootstrapService(
        auth_provider=auth_provider,
        data_store=data_store,
        retry_policy=RetryPolicy.from_settings(settings),
        probe=probe,
        submission_lock=submission_lock,
        check_existing_profile=settings.check_existing_profile,
    )


def get_setup_status_service(
    auth_provider: Annotated[AuthProvider, Depends(get_auth_provider)],
    data_store: Annotated[DataStore, Depends(get_data_store)],
    probe: Annotated[BootstrapProbe, Depends(get_bootstrap_probe)],
) -> SetupStatusService:
    """Get SetupStatusService instance."""
    return SetupStatusService(auth_provider, data_store, probe)
