"""Backend-as-a-service collaborator contracts.

The hosted backend provides authentication and Postgres-style tables behind
row-level security. Bounded contexts depend only on these protocols; the
Supabase adapters live in infrastructure.backend.
"""

from shared_kernel.backend.errors import BackendError
from shared_kernel.backend.protocols import AuthProvider, DataStore
from shared_kernel.backend.types import Filters, Principal, PrincipalId, Row, SelectResult

__all__ = [
    "AuthProvider",
    "BackendError",
    "DataStore",
    "Filters",
    "Principal",
    "PrincipalId",
    "Row",
    "SelectResult",
]
