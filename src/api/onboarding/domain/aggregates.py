"""Tenant and AdminProfile entities."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from onboarding.domain.value_objects import PrincipalId, ProfileRole, TenantId


@dataclass(frozen=True)
class Tenant:
    """A church: the isolation boundary for all other data.

    Tenants are created once per successful bootstrap. The identifier and
    creation timestamp are assigned by the backend.

    Attributes:
        id: Backend-generated identifier
        name: Display name entered by the operator
        created_by: Principal that provisioned the tenant
        created_at: Backend-assigned creation time, if returned
    """

    id: TenantId
    name: str
    created_by: PrincipalId
    created_at: datetime | None = None


@dataclass(frozen=True)
class AdminProfile:
    """Profile linking a principal to the tenant it administers.

    Profiles are one-to-one with principals: the profile id is the
    principal id.
    """

    id: PrincipalId
    tenant_id: TenantId
    full_name: str
    role: ProfileRole

    @classmethod
    def for_bootstrap(
        cls,
        principal_id: PrincipalId,
        tenant_id: TenantId,
        full_name: str,
    ) -> AdminProfile:
        """Profile for the principal that bootstrapped ``tenant_id``.

        The role is always the top-privilege marker.
        """
        return cls(
            id=principal_id,
            tenant_id=tenant_id,
            full_name=full_name,
            role=ProfileRole.top_privilege(),
        )
