"""Application services for the onboarding context."""

from onboarding.application.services.bootstrap_service import (
    BootstrapResult,
    BootstrapService,
)
from onboarding.application.services.profile_linker import ProfileLinker
from onboarding.application.services.session_guard import SessionGuard
from onboarding.application.services.setup_status_service import (
    SetupStatus,
    SetupStatusReport,
    SetupStatusService,
)
from onboarding.application.services.tenant_provisioner import (
    ProvisioningOutcome,
    TenantProvisioner,
)

__all__ = [
    "BootstrapResult",
    "BootstrapService",
    "ProfileLinker",
    "ProvisioningOutcome",
    "SessionGuard",
    "SetupStatus",
    "SetupStatusReport",
    "SetupStatusService",
    "TenantProvisioner",
]
