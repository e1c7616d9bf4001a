"""Start-up check deciding which setup step a principal still needs."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from onboarding.application.error_classification import (
    ErrorKind,
    classify_backend_error,
    to_bootstrap_error,
)
from onboarding.application.observability import BootstrapProbe, DefaultBootstrapProbe
from onboarding.domain.aggregates import AdminProfile
from onboarding.domain.exceptions import UnknownBackendError
from onboarding.ports.schema import (
    PROFILES_TABLE,
    TENANTS_READINESS_COLUMNS,
    TENANTS_TABLE,
    profile_from_row,
)
from shared_kernel.backend import AuthProvider, BackendError, DataStore


class SetupStatus(StrEnum):
    """Where a principal stands in the setup flow."""

    UNAUTHENTICATED = "unauthenticated"
    BACKEND_SETUP_REQUIRED = "backend_setup_required"
    ONBOARDING_REQUIRED = "onboarding_required"
    READY = "ready"


@dataclass(frozen=True)
class SetupStatusReport:
    """Result of a setup status check; ``profile`` is set when ready."""

    status: SetupStatus
    profile: AdminProfile | None = None


class SetupStatusService:
    """Detects missing backend setup and unfinished onboarding.

    A principal whose tenant was created but whose profile insert failed
    shows up as ``onboarding_required`` and re-enters the bootstrap flow.
    """

    def __init__(
        self,
        auth_provider: AuthProvider,
        data_store: DataStore,
        probe: BootstrapProbe | None = None,
    ):
        self._auth_provider = auth_provider
        self._data_store = data_store
        self._probe = probe or DefaultBootstrapProbe()

    async def check(self) -> SetupStatusReport:
        """Report the setup status of the current principal.

        Raises:
            BootstrapError: If the backend fails for a reason other than a
                schema that is not (yet) installed
        """
        report = await self._check()
        self._probe.setup_status_checked(report.status.value)
        return report

    async def _check(self) -> SetupStatusReport:
        try:
            principal = await self._auth_provider.current_principal()
        except BackendError as e:
            raise UnknownBackendError(e) from e

        if principal is None:
            return SetupStatusReport(status=SetupStatus.UNAUTHENTICATED)

        try:
            await self._data_store.select(
                TENANTS_TABLE, TENANTS_READINESS_COLUMNS, limit=0
            )
            result = await self._data_store.select(
                PROFILES_TABLE, filters={"id": principal.id.value}, limit=1
            )
        except BackendError as e:
            if classify_backend_error(e) is ErrorKind.TRANSIENT_SCHEMA:
                return SetupStatusReport(status=SetupStatus.BACKEND_SETUP_REQUIRED)
            raise to_bootstrap_error(e) from e

        if not result.rows:
            return SetupStatusReport(status=SetupStatus.ONBOARDING_REQUIRED)

        return SetupStatusReport(
            status=SetupStatus.READY,
            profile=profile_from_row(result.rows[0]),
        )
