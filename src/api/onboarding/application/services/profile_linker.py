"""Creates the administrative profile of the bootstrapping principal."""

from __future__ import annotations

from onboarding.application.error_classification import to_bootstrap_error
from onboarding.application.observability import BootstrapProbe, DefaultBootstrapProbe
from onboarding.domain.aggregates import AdminProfile, Tenant
from onboarding.domain.exceptions import TransientSchemaError, UnknownBackendError
from onboarding.domain.value_objects import PrincipalId
from onboarding.ports.schema import PROFILES_TABLE, profile_row
from shared_kernel.backend import BackendError, DataStore


class ProfileLinker:
    """Links the principal to a freshly created tenant.

    There is no retry here. When linking fails the tenant already exists
    without a profile; the start-up status check reports that principal as
    still needing onboarding.
    """

    def __init__(self, data_store: DataStore, probe: BootstrapProbe | None = None):
        self._data_store = data_store
        self._probe = probe or DefaultBootstrapProbe()

    async def link(
        self, tenant: Tenant, principal_id: PrincipalId, full_name: str
    ) -> AdminProfile:
        """Insert the top-privilege profile for ``principal_id`` in ``tenant``.

        Raises:
            PermissionDeniedError: If an access policy rejects the insert
            UnknownBackendError: For any other backend failure
        """
        profile = AdminProfile.for_bootstrap(
            principal_id=principal_id,
            tenant_id=tenant.id,
            full_name=full_name,
        )

        try:
            await self._data_store.insert(PROFILES_TABLE, profile_row(profile))
        except BackendError as e:
            self._probe.profile_link_failed(tenant.id.value, e.code, e.message)
            error = to_bootstrap_error(e)
            if isinstance(error, TransientSchemaError):
                error = UnknownBackendError(e)
            raise error from e

        self._probe.profile_linked(tenant.id.value, profile.role.value)
        return profile
