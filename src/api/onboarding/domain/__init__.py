"""Domain layer for the onboarding context."""

from onboarding.domain.aggregates import AdminProfile, Tenant
from onboarding.domain.state_machine import (
    TRANSITIONS,
    BootstrapState,
    BootstrapStateMachine,
    BootstrapTrigger,
    Transition,
)
from onboarding.domain.value_objects import PrincipalId, ProfileRole, TenantId

__all__ = [
    "AdminProfile",
    "BootstrapState",
    "BootstrapStateMachine",
    "BootstrapTrigger",
    "PrincipalId",
    "ProfileRole",
    "TRANSITIONS",
    "Tenant",
    "TenantId",
    "Transition",
]
