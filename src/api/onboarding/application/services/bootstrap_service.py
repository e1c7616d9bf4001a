"""Tenant bootstrap procedure.

Session guard -> tenant provisioning (retry loop) -> profile linking ->
completion signal. Each step depends on the previous one; the first fatal
error aborts the run and propagates as a BootstrapError.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from structlog.contextvars import bound_contextvars
from ulid import ULID

from onboarding.application import status as messages
from onboarding.application.error_classification import (
    ErrorKind,
    classify_backend_error,
    to_bootstrap_error,
)
from onboarding.application.observability import BootstrapProbe, DefaultBootstrapProbe
from onboarding.application.retry import RetryPolicy, Sleep
from onboarding.application.services.profile_linker import ProfileLinker
from onboarding.application.services.session_guard import SessionGuard
from onboarding.application.services.tenant_provisioner import TenantProvisioner
from onboarding.application.status import StatusSink, discard_status
from onboarding.application.submission_lock import SubmissionLock
from onboarding.domain.aggregates import AdminProfile, Tenant
from onboarding.domain.exceptions import (
    AlreadyBootstrappedError,
    BootstrapError,
    UnauthenticatedError,
)
from onboarding.domain.state_machine import (
    BootstrapState,
    BootstrapStateMachine,
    BootstrapTrigger,
    Transition,
)
from onboarding.domain.value_objects import PrincipalId
from onboarding.ports.schema import PROFILES_TABLE
from shared_kernel.backend import AuthProvider, BackendError, DataStore
from shared_kernel.observability_context import ObservationContext


@dataclass(frozen=True)
class BootstrapResult:
    """Outcome of a successful bootstrap run."""

    tenant: Tenant
    profile: AdminProfile
    attempts: int
    state: BootstrapState
    transitions: tuple[Transition, ...]


class BootstrapService:
    """Runs the tenant bootstrap procedure for the current principal.

    Collaborators are injected so tests can substitute doubles for the
    hosted backend and for the backoff sleep.
    """

    def __init__(
        self,
        auth_provider: AuthProvider,
        data_store: DataStore,
        retry_policy: RetryPolicy | None = None,
        sleep: Sleep | None = None,
        probe: BootstrapProbe | None = None,
        submission_lock: SubmissionLock | None = None,
        check_existing_profile: bool = True,
    ):
        """Initialize BootstrapService with dependencies.

        Args:
            auth_provider: Resolves the principal of the current session
            data_store: Table access used for the tenant and profile inserts
            retry_policy: Attempt ceiling and backoff for tenant provisioning
            sleep: Awaitable used for the backoff wait
            probe: Optional bootstrap probe for observability
            submission_lock: Registry of in-flight runs; share one instance
                between services to serialize runs per principal
            check_existing_profile: Reject principals that already have a
                profile before writing anything
        """
        self._auth_provider = auth_provider
        self._data_store = data_store
        self._retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep
        self._probe = probe or DefaultBootstrapProbe()
        self._submission_lock = submission_lock or SubmissionLock()
        self._check_existing_profile = check_existing_profile

    async def run_bootstrap(
        self,
        tenant_display_name: str,
        operator_display_name: str,
        on_complete: Callable[[], None],
        status: StatusSink | None = None,
    ) -> BootstrapResult:
        """Create the tenant and its admin profile, then signal completion.

        Args:
            tenant_display_name: Name of the church being registered
            operator_display_name: Full name stored on the admin profile
            on_complete: Called once, with no arguments, after both writes
            status: Sink for human-readable progress messages

        Returns:
            BootstrapResult describing the created rows

        Raises:
            UnauthenticatedError: If there is no authenticated principal
            AlreadyBootstrappedError: If the principal already has a profile
            BootstrapInProgressError: If a run for the principal is in flight
            ProvisioningTimeoutError: If the schema never became visible
            PermissionDeniedError: If an access policy rejects a write
            UnknownBackendError: For any other backend failure
        """
        context = ObservationContext(request_id=str(ULID()))

        # Backend adapter events pick up the run ids from these contextvars.
        with bound_contextvars(request_id=context.request_id):
            return await self._run(
                context,
                tenant_display_name,
                operator_display_name,
                on_complete,
                status or discard_status,
            )

    async def _run(
        self,
        context: ObservationContext,
        tenant_display_name: str,
        operator_display_name: str,
        on_complete: Callable[[], None],
        status: StatusSink,
    ) -> BootstrapResult:
        probe = self._probe.with_context(context)
        machine = BootstrapStateMachine(on_transition=probe.state_transitioned)

        try:
            status(messages.AUTHENTICATING)
            principal = await SessionGuard(self._auth_provider, probe).require_principal()

            context = context.with_user(principal.id.value)
            probe = self._probe.with_context(context)

            async with self._submission_lock.hold(principal.id):
                with bound_contextvars(user_id=principal.id.value):
                    if self._check_existing_profile:
                        await self._reject_if_bootstrapped(principal.id, probe)

                    machine.fire(BootstrapTrigger.SUBMIT)
                    probe.bootstrap_started(tenant_display_name)

                    provisioner = TenantProvisioner(
                        self._data_store,
                        retry_policy=self._retry_policy,
                        sleep=self._sleep,
                        probe=probe,
                    )
                    tenant = await provisioner.provision(
                        tenant_display_name, principal.id, machine, status
                    )

                    probe = self._probe.with_context(
                        context.with_tenant(tenant.id.value)
                    )
                    status(messages.CONFIGURING_PROFILE)
                    with bound_contextvars(tenant_id=tenant.id.value):
                        profile = await ProfileLinker(self._data_store, probe).link(
                            tenant, principal.id, operator_display_name
                        )
                    machine.fire(BootstrapTrigger.PROFILE_CREATED)

        except BootstrapError as e:
            trigger = (
                BootstrapTrigger.SESSION_REJECTED
                if isinstance(e, UnauthenticatedError)
                else BootstrapTrigger.FATAL_ERROR
            )
            if machine.can_fire(trigger):
                machine.fire(trigger)
            probe.bootstrap_failed(machine.state.value, type(e).__name__, e.message)
            raise

        attempts = machine.count(BootstrapTrigger.TRANSIENT_ERROR) + 1
        status(messages.DONE)
        on_complete()
        probe.bootstrap_completed(tenant.id.value, attempts)

        return BootstrapResult(
            tenant=tenant,
            profile=profile,
            attempts=attempts,
            state=machine.state,
            transitions=tuple(machine.history),
        )

    async def _reject_if_bootstrapped(
        self, principal_id: PrincipalId, probe: BootstrapProbe
    ) -> None:
        """Refuse to bootstrap a principal that already has a profile.

        A profiles table that is not yet visible cannot hold a profile, so
        a schema-propagation error here counts as "no profile".
        """
        try:
            result = await self._data_store.select(
                PROFILES_TABLE,
                "id, igreja_id",
                filters={"id": principal_id.value},
                limit=1,
            )
        except BackendError as e:
            if classify_backend_error(e) is ErrorKind.TRANSIENT_SCHEMA:
                return
            raise to_bootstrap_error(e) from e

        if result.rows:
            tenant_id = result.rows[0].get("igreja_id")
            probe.existing_profile_found(tenant_id)
            raise AlreadyBootstrappedError(principal_id.value, tenant_id)
