"""Value objects for the onboarding domain.

Value objects are immutable descriptors that provide type safety and
domain semantics for identifiers and domain concepts.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from shared_kernel.backend.types import PrincipalId

__all__ = ["PrincipalId", "ProfileRole", "TenantId"]


@dataclass(frozen=True)
class TenantId:
    """Identifier for a Tenant.

    Generated by the backend on insert and opaque to this service. Once
    assigned it scopes every other entity of the tenant.
    """

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def from_string(cls, value: str) -> TenantId:
        """Create TenantId from string value.

        Raises:
            ValueError: If value is empty
        """
        if not value or not value.strip():
            raise ValueError("Invalid TenantId: empty value")
        return cls(value=value)


class ProfileRole(StrEnum):
    """Role marker stored on a profile, highest privilege first."""

    SUPER_ADMIN = "super_admin"
    CHURCH_ADMIN = "church_admin"
    FINANCE_MANAGER = "finance_manager"
    MEMBER = "member"

    @classmethod
    def top_privilege(cls) -> ProfileRole:
        """Role granted to the principal who bootstraps a tenant."""
        return cls.SUPER_ADMIN
