"""Tenant provisioning with bounded retries on schema-propagation errors."""

from __future__ import annotations

from dataclasses import dataclass

from onboarding.application.error_classification import (
    ErrorKind,
    classify_backend_error,
    to_bootstrap_error,
)
from onboarding.application.observability import BootstrapProbe, DefaultBootstrapProbe
from onboarding.application.retry import RetryPolicy, Sleep, default_sleep
from onboarding.application.status import (
    StatusSink,
    discard_status,
    provisioning_message,
)
from onboarding.domain.aggregates import Tenant
from onboarding.domain.exceptions import (
    BootstrapError,
    InvalidTransitionError,
    ProvisioningTimeoutError,
    UnknownBackendError,
)
from onboarding.domain.state_machine import (
    BootstrapState,
    BootstrapStateMachine,
    BootstrapTrigger,
)
from onboarding.domain.value_objects import PrincipalId
from onboarding.ports.schema import TENANTS_TABLE, tenant_from_row, tenant_insert_row
from shared_kernel.backend import BackendError, DataStore


@dataclass(frozen=True)
class ProvisioningOutcome:
    """Result of a single tenant insert attempt.

    Exactly one of ``tenant``, ``transient_error`` and ``fatal_error`` is set.
    """

    attempt: int
    tenant: Tenant | None = None
    transient_error: BackendError | None = None
    fatal_error: BootstrapError | None = None

    def trigger(self, policy: RetryPolicy) -> BootstrapTrigger:
        """The state machine trigger this outcome produces under ``policy``."""
        if self.tenant is not None:
            return BootstrapTrigger.TENANT_CREATED
        if self.transient_error is not None:
            if policy.allows_retry_after(self.attempt):
                return BootstrapTrigger.TRANSIENT_ERROR
            return BootstrapTrigger.ATTEMPTS_EXHAUSTED
        return BootstrapTrigger.FATAL_ERROR


class TenantProvisioner:
    """Creates exactly one tenant row, retrying while the schema catches up.

    Every attempt is a fresh insert; a failed insert leaves no row behind
    because a single insert statement is atomic on the backend.
    """

    def __init__(
        self,
        data_store: DataStore,
        retry_policy: RetryPolicy | None = None,
        sleep: Sleep | None = None,
        probe: BootstrapProbe | None = None,
    ):
        self._data_store = data_store
        self._retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep or default_sleep
        self._probe = probe or DefaultBootstrapProbe()

    async def attempt(
        self, name: str, principal_id: PrincipalId, attempt: int
    ) -> ProvisioningOutcome:
        """Make one insert attempt and classify its result."""
        self._probe.provisioning_attempt_started(
            attempt, self._retry_policy.max_attempts
        )

        try:
            row = await self._data_store.insert(
                TENANTS_TABLE, tenant_insert_row(name, principal_id)
            )
        except BackendError as e:
            if classify_backend_error(e) is ErrorKind.TRANSIENT_SCHEMA:
                self._probe.transient_schema_error(
                    attempt, self._retry_policy.max_attempts, e.code, e.message
                )
                return ProvisioningOutcome(attempt=attempt, transient_error=e)
            fatal_error = to_bootstrap_error(e)
            fatal_error.__cause__ = e
            return ProvisioningOutcome(attempt=attempt, fatal_error=fatal_error)

        try:
            tenant = tenant_from_row(row)
        except (KeyError, TypeError, ValueError) as e:
            error = BackendError(message=f"Tenant insert returned an unusable row: {e}")
            return ProvisioningOutcome(
                attempt=attempt, fatal_error=UnknownBackendError(error)
            )

        return ProvisioningOutcome(attempt=attempt, tenant=tenant)

    async def provision(
        self,
        name: str,
        principal_id: PrincipalId,
        machine: BootstrapStateMachine,
        status: StatusSink | None = None,
    ) -> Tenant:
        """Create the tenant, driving ``machine`` through each attempt.

        The machine must be in ``provisioning``; it leaves in ``linking`` on
        success and in ``failed`` otherwise.

        Args:
            name: Tenant display name (validated by the caller)
            principal_id: Principal recorded as the tenant creator
            machine: State machine of the current bootstrap run
            status: Sink for progress messages

        Returns:
            The created Tenant

        Raises:
            ProvisioningTimeoutError: If every attempt hit a transient error
            BootstrapError: For any non-transient failure
        """
        if machine.state is not BootstrapState.PROVISIONING:
            raise InvalidTransitionError(machine.state.value, "provision")

        status = status or discard_status
        max_attempts = self._retry_policy.max_attempts
        attempt = 0

        while machine.state is BootstrapState.PROVISIONING:
            attempt += 1
            status(provisioning_message(attempt, max_attempts))

            outcome = await self.attempt(name, principal_id, attempt)
            trigger = outcome.trigger(self._retry_policy)
            machine.fire(trigger)

            match trigger:
                case BootstrapTrigger.TENANT_CREATED:
                    assert outcome.tenant is not None
                    self._probe.tenant_created(
                        outcome.tenant.id.value, outcome.tenant.name, attempt
                    )
                    return outcome.tenant

                case BootstrapTrigger.TRANSIENT_ERROR:
                    await self._sleep(self._retry_policy.backoff_seconds)

                case BootstrapTrigger.ATTEMPTS_EXHAUSTED:
                    assert outcome.transient_error is not None
                    self._probe.provisioning_timed_out(
                        attempt,
                        outcome.transient_error.code,
                        outcome.transient_error.message,
                    )
                    raise ProvisioningTimeoutError(attempt, outcome.transient_error)

                case _:
                    assert outcome.fatal_error is not None
                    raise outcome.fatal_error

        raise InvalidTransitionError(machine.state.value, "provision")
