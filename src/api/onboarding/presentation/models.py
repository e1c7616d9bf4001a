"""Pydantic models for onboarding API requests and responses."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from onboarding.application.services import BootstrapResult, SetupStatusReport


class BootstrapRequest(BaseModel):
    """Request model for registering a church and its first administrator."""

    model_config = ConfigDict(str_strip_whitespace=True)

    church_name: str = Field(
        ..., description="Church (tenant) display name", min_length=1, max_length=255
    )
    full_name: str = Field(
        ..., description="Administrator full name", min_length=1, max_length=255
    )


class BootstrapResponse(BaseModel):
    """Response model for a completed bootstrap."""

    tenant_id: str = Field(..., description="Backend-generated tenant ID")
    tenant_name: str = Field(..., description="Tenant display name")
    profile_id: str = Field(..., description="Profile ID (the principal ID)")
    role: str = Field(..., description="Role granted to the administrator")
    attempts: int = Field(..., description="Tenant insert attempts made")
    completed: bool = Field(..., description="Whether completion was signalled")
    status_messages: list[str] = Field(
        default_factory=list, description="Progress messages in order"
    )

    @classmethod
    def from_result(
        cls,
        result: BootstrapResult,
        completed: bool,
        status_messages: list[str],
    ) -> BootstrapResponse:
        """Convert a BootstrapResult to an API response."""
        return cls(
            tenant_id=result.tenant.id.value,
            tenant_name=result.tenant.name,
            profile_id=result.profile.id.value,
            role=result.profile.role.value,
            attempts=result.attempts,
            completed=completed,
            status_messages=status_messages,
        )


class SetupStatusResponse(BaseModel):
    """Response model for the setup status of the current principal."""

    status: str = Field(..., description="Setup status")
    tenant_id: str | None = Field(default=None, description="Tenant when ready")
    role: str | None = Field(default=None, description="Profile role when ready")

    @classmethod
    def from_report(cls, report: SetupStatusReport) -> SetupStatusResponse:
        """Convert a SetupStatusReport to an API response."""
        if report.profile is None:
            return cls(status=report.status.value)
        return cls(
            status=report.status.value,
            tenant_id=report.profile.tenant_id.value,
            role=report.profile.role.value,
        )
