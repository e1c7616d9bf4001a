"""Supabase adapters for the backend collaborator protocols."""

from infrastructure.backend.auth_provider import SupabaseAuthProvider
from infrastructure.backend.data_store import SupabaseDataStore
from infrastructure.backend.errors import parse_backend_error
from infrastructure.backend.observability import (
    BackendClientProbe,
    DefaultBackendClientProbe,
)

__all__ = [
    "BackendClientProbe",
    "DefaultBackendClientProbe",
    "SupabaseAuthProvider",
    "SupabaseDataStore",
    "parse_backend_error",
]
