"""Error taxonomy of the tenant bootstrap procedure.

Every failure that ends a bootstrap run is reported as a BootstrapError
subclass. Only TransientSchemaError is ever recovered from, and only by
the tenant provisioning step.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from shared_kernel.backend import BackendError


class BootstrapError(Exception):
    """Base class for bootstrap failures.

    Attributes:
        message: Operator-facing description of the failure
        backend_error: The backend error behind this failure, if any
    """

    def __init__(self, message: str, backend_error: BackendError | None = None):
        super().__init__(message)
        self.message = message
        self.backend_error = backend_error


class UnauthenticatedError(BootstrapError):
    """Raised when no authenticated principal exists at start."""

    def __init__(self, message: str = "Session expired. Please sign in again."):
        super().__init__(message)


class TransientSchemaError(BootstrapError):
    """Raised when the backend reports a table or column as not yet visible."""

    def __init__(self, backend_error: BackendError):
        super().__init__(
            f"Database schema not ready ({backend_error.code}): {backend_error.message}",
            backend_error=backend_error,
        )


class ProvisioningTimeoutError(BootstrapError):
    """Raised when every tenant insert attempt hit a transient schema error."""

    def __init__(self, attempts: int, last_error: BackendError):
        super().__init__(
            "Database unreachable after "
            f"{attempts} attempts. Code: {last_error.code}. "
            f"Detail: {last_error.message}",
            backend_error=last_error,
        )
        self.attempts = attempts
        self.last_error = last_error


class PermissionDeniedError(BootstrapError):
    """Raised when a backend access policy rejects a write.

    This usually means the access policies were not (fully) installed,
    so the operator is told to re-run the backend setup.
    """

    def __init__(self, backend_error: BackendError | None = None):
        super().__init__(
            "Permission error (row-level security). "
            "Re-run the backend setup script and try again.",
            backend_error=backend_error,
        )


class UnknownBackendError(BootstrapError):
    """Raised for backend failures outside the known categories."""

    def __init__(self, backend_error: BackendError):
        super().__init__(backend_error.message, backend_error=backend_error)


class AlreadyBootstrappedError(BootstrapError):
    """Raised when the principal already administers a tenant."""

    def __init__(self, principal_id: str, tenant_id: str | None = None):
        super().__init__("This account has already completed onboarding.")
        self.principal_id = principal_id
        self.tenant_id = tenant_id


class BootstrapInProgressError(BootstrapError):
    """Raised when a bootstrap for the same principal is already running."""

    def __init__(self, principal_id: str):
        super().__init__("Onboarding is already in progress for this account.")
        self.principal_id = principal_id


class InvalidTransitionError(Exception):
    """Raised when a trigger is fired that the current state does not accept."""

    def __init__(self, state: str, trigger: str):
        super().__init__(f"Trigger '{trigger}' is not valid in state '{state}'")
        self.state = state
        self.trigger = trigger
