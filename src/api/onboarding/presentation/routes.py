"""HTTP routes for tenant onboarding."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from onboarding.application.error_classification import describe_failure
from onboarding.application.services import BootstrapService, SetupStatusService
from onboarding.application.status import StatusRecorder
from onboarding.dependencies import get_bootstrap_service, get_setup_status_service
from onboarding.domain.exceptions import (
    AlreadyBootstrappedError,
    BootstrapError,
    BootstrapInProgressError,
    PermissionDeniedError,
    ProvisioningTimeoutError,
    UnauthenticatedError,
)
from onboarding.presentation.models import (
    BootstrapRequest,
    BootstrapResponse,
    SetupStatusResponse,
)

router = APIRouter(
    prefix="/onboarding",
    tags=["onboarding"],
)


def _status_code_for(error: BootstrapError) -> int:
    match error:
        case UnauthenticatedError():
            return status.HTTP_401_UNAUTHORIZED
        case PermissionDeniedError():
            return status.HTTP_403_FORBIDDEN
        case AlreadyBootstrappedError() | BootstrapInProgressError():
            return status.HTTP_409_CONFLICT
        case ProvisioningTimeoutError():
            return status.HTTP_503_SERVICE_UNAVAILABLE
        case _:
            return status.HTTP_502_BAD_GATEWAY


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
)
async def bootstrap_tenant(
    request: BootstrapRequest,
    service: Annotated[BootstrapService, Depends(get_bootstrap_service)],
) -> BootstrapResponse:
    """Register a church and make the caller its administrator.

    Runs the bootstrap procedure to completion, which may take several
    backoff intervals while a freshly installed schema propagates.

    Args:
        request: Church name and administrator full name
        service: Bootstrap service bound to the caller's session

    Returns:
        BootstrapResponse with the created tenant and profile

    Raises:
        HTTPException: 401 if there is no valid session
        HTTPException: 403 if an access policy rejected a write
        HTTPException: 409 if already onboarded or onboarding is running
        HTTPException: 502 for other backend failures
        HTTPException: 503 if the schema never became visible
    """
    recorder = StatusRecorder()
    completions: list[None] = []

    try:
        result = await service.run_bootstrap(
            tenant_display_name=request.church_name,
            operator_display_name=request.full_name,
            on_complete=lambda: completions.append(None),
            status=recorder,
        )
    except BootstrapError as e:
        raise HTTPException(
            status_code=_status_code_for(e),
            detail=describe_failure(e),
        ) from e

    return BootstrapResponse.from_result(
        result,
        completed=len(completions) == 1,
        status_messages=recorder.messages,
    )


@router.get("/status")
async def get_setup_status(
    service: Annotated[SetupStatusService, Depends(get_setup_status_service)],
) -> SetupStatusResponse:
    """Report which setup step the caller still needs.

    Returns:
        SetupStatusResponse (unauthenticated, backend_setup_required,
        onboarding_required or ready)

    Raises:
        HTTPException: 502 if the backend fails unexpectedly
    """
    try:
        report = await service.check()
    except BootstrapError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=describe_failure(e),
        ) from e

    return SetupStatusResponse.from_report(report)
