"""GoTrue implementation of the AuthProvider protocol."""

from __future__ import annotations

import httpx

from infrastructure.backend.errors import parse_backend_error, transport_error
from infrastructure.backend.observability import (
    BackendClientProbe,
    DefaultBackendClientProbe,
)
from infrastructure.settings import SupabaseSettings
from shared_kernel.backend import Principal, PrincipalId

_REJECTED_STATUSES = frozenset({401, 403})


class SupabaseAuthProvider:
    """Resolves the principal behind a Supabase access token."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        settings: SupabaseSettings,
        access_token: str | None = None,
        probe: BackendClientProbe | None = None,
    ):
        self._client = client
        self._settings = settings
        self._access_token = access_token
        self._probe = probe or DefaultBackendClientProbe()

    async def current_principal(self) -> Principal | None:
        """Look up the user owning the access token.

        Returns:
            The Principal, or None when there is no token or the auth
            service rejects it (expired, revoked, malformed)

        Raises:
            BackendError: For any other auth service failure
        """
        if not self._access_token:
            self._probe.session_missing()
            return None

        try:
            response = await self._client.get(
                f"{self._settings.auth_url}/user",
                headers={
                    "apikey": self._settings.anon_key.get_secret_value(),
                    "Authorization": f"Bearer {self._access_token}",
                },
                timeout=self._settings.timeout_seconds,
            )
        except httpx.HTTPError as e:
            error = transport_error(e)
            self._probe.request_unreachable("GET", "user", error)
            raise error from e

        if response.status_code in _REJECTED_STATUSES:
            self._probe.session_rejected(response.status_code)
            return None

        if not response.is_success:
            error = parse_backend_error(response)
            self._probe.request_rejected("GET", "user", error)
            raise error

        user = response.json()
        return Principal(
            id=PrincipalId.from_string(str(user["id"])),
            email=user.get("email"),
        )
