"""Session guard: no bootstrap without an authenticated principal."""

from __future__ import annotations

from onboarding.application.observability import BootstrapProbe, DefaultBootstrapProbe
from onboarding.domain.exceptions import UnauthenticatedError, UnknownBackendError
from shared_kernel.backend import AuthProvider, BackendError, Principal


class SessionGuard:
    """Resolves the principal before any write is attempted."""

    def __init__(self, auth_provider: AuthProvider, probe: BootstrapProbe | None = None):
        self._auth_provider = auth_provider
        self._probe = probe or DefaultBootstrapProbe()

    async def require_principal(self) -> Principal:
        """Return the current principal.

        Raises:
            UnauthenticatedError: If there is no authenticated session
            UnknownBackendError: If the auth service itself fails
        """
        try:
            principal = await self._auth_provider.current_principal()
        except BackendError as e:
            raise UnknownBackendError(e) from e

        if principal is None:
            self._probe.session_rejected()
            raise UnauthenticatedError()

        return principal
