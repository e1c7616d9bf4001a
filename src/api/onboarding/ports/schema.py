"""Backend table layout used by onboarding.

The hosted schema is shared with the rest of the product, so table and
column names are fixed here rather than configured.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from onboarding.domain.aggregates import AdminProfile, Tenant
from onboarding.domain.value_objects import PrincipalId, ProfileRole, TenantId

TENANTS_TABLE = "igrejas"
PROFILES_TABLE = "profiles"

# Columns probed at start-up to decide whether backend setup has run.
TENANTS_READINESS_COLUMNS = "id, created_by"


def _required_text(row: dict[str, Any], column: str) -> str:
    value = row.get(column)
    if value is None:
        raise ValueError(f"Row has no value for '{column}'")
    return str(value)


def tenant_insert_row(name: str, principal_id: PrincipalId) -> dict[str, Any]:
    """Row inserted to create a tenant; id and created_at come from the backend."""
    return {"nome": name, "created_by": principal_id.value}


def tenant_from_row(row: dict[str, Any]) -> Tenant:
    """Map a tenants row returned by the backend.

    Raises:
        ValueError: If the row has no id or creator
    """
    created_at = row.get("created_at")
    return Tenant(
        id=TenantId.from_string(_required_text(row, "id")),
        name=row.get("nome", ""),
        created_by=PrincipalId.from_string(_required_text(row, "created_by")),
        created_at=datetime.fromisoformat(created_at) if created_at else None,
    )


def profile_row(profile: AdminProfile) -> dict[str, Any]:
    """Row inserted to create a profile."""
    return {
        "id": profile.id.value,
        "igreja_id": profile.tenant_id.value,
        "full_name": profile.full_name,
        "role": profile.role.value,
    }


def profile_from_row(row: dict[str, Any]) -> AdminProfile:
    """Map a profiles row returned by the backend.

    Raises:
        ValueError: If the row has no id or tenant
    """
    return AdminProfile(
        id=PrincipalId.from_string(_required_text(row, "id")),
        tenant_id=TenantId.from_string(_required_text(row, "igreja_id")),
        full_name=row.get("full_name") or "",
        role=ProfileRole(row.get("role") or ProfileRole.MEMBER),
    )
