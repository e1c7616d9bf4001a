"""Protocol for bootstrap procedure observability.

Defines the interface for domain probes that capture the domain events of
a tenant bootstrap run: session checks, provisioning attempts, profile
linking and the final outcome.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from onboarding.domain.state_machine import Transition
    from shared_kernel.observability_context import ObservationContext


class BootstrapProbe(Protocol):
    """Domain probe for the tenant bootstrap procedure."""

    def bootstrap_started(self, tenant_name: str) -> None:
        """Record that a bootstrap run passed the session guard."""
        ...

    def session_rejected(self) -> None:
        """Record that no authenticated principal was found."""
        ...

    def existing_profile_found(self, tenant_id: str | None) -> None:
        """Record that the principal already has a profile."""
        ...

    def provisioning_attempt_started(self, attempt: int, max_attempts: int) -> None:
        """Record that a tenant insert attempt is about to be made."""
        ...

    def transient_schema_error(
        self, attempt: int, max_attempts: int, code: str | None, message: str
    ) -> None:
        """Record that a tenant insert hit a schema-propagation error."""
        ...

    def tenant_created(self, tenant_id: str, name: str, attempts: int) -> None:
        """Record that the tenant row was created."""
        ...

    def provisioning_timed_out(
        self, attempts: int, code: str | None, message: str
    ) -> None:
        """Record that the retry budget was exhausted."""
        ...

    def profile_linked(self, tenant_id: str, role: str) -> None:
        """Record that the admin profile was created."""
        ...

    def profile_link_failed(
        self, tenant_id: str, code: str | None, message: str
    ) -> None:
        """Record that the admin profile could not be created."""
        ...

    def bootstrap_completed(self, tenant_id: str, attempts: int) -> None:
        """Record that the bootstrap run succeeded."""
        ...

    def bootstrap_failed(self, state: str, error_type: str, message: str) -> None:
        """Record that the bootstrap run ended in failure."""
        ...

    def state_transitioned(self, transition: Transition) -> None:
        """Record a move of the bootstrap state machine."""
        ...

    def setup_status_checked(self, status: str) -> None:
        """Record the outcome of a setup status check."""
        ...

    def with_context(self, context: ObservationContext) -> BootstrapProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultBootstrapProbe:
    """Default implementation of BootstrapProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultBootstrapProbe:
        """Create a new probe with observation context bound."""
        return DefaultBootstrapProbe(logger=self._logger, context=context)

    def bootstrap_started(self, tenant_name: str) -> None:
        """Record that a bootstrap run passed the session guard."""
        self._logger.info(
            "bootstrap_started",
            tenant_name=tenant_name,
            **self._get_context_kwargs(),
        )

    def session_rejected(self) -> None:
        """Record that no authenticated principal was found."""
        self._logger.info("bootstrap_session_rejected", **self._get_context_kwargs())

    def existing_profile_found(self, tenant_id: str | None) -> None:
        """Record that the principal already has a profile."""
        self._logger.info(
            "bootstrap_existing_profile_found",
            existing_tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def provisioning_attempt_started(self, attempt: int, max_attempts: int) -> None:
        """Record that a tenant insert attempt is about to be made."""
        self._logger.debug(
            "tenant_provisioning_attempt_started",
            attempt=attempt,
            max_attempts=max_attempts,
            **self._get_context_kwargs(),
        )

    def transient_schema_error(
        self, attempt: int, max_attempts: int, code: str | None, message: str
    ) -> None:
        """Record that a tenant insert hit a schema-propagation error."""
        self._logger.warning(
            "tenant_provisioning_schema_not_ready",
            attempt=attempt,
            max_attempts=max_attempts,
            code=code,
            error=message,
            **self._get_context_kwargs(),
        )

    def tenant_created(self, tenant_id: str, name: str, attempts: int) -> None:
        """Record that the tenant row was created."""
        self._logger.info(
            "tenant_created",
            created_tenant_id=tenant_id,
            name=name,
            attempts=attempts,
            **self._get_context_kwargs(),
        )

    def provisioning_timed_out(
        self, attempts: int, code: str | None, message: str
    ) -> None:
        """Record that the retry budget was exhausted."""
        self._logger.error(
            "tenant_provisioning_timed_out",
            attempts=attempts,
            code=code,
            error=message,
            **self._get_context_kwargs(),
        )

    def profile_linked(self, tenant_id: str, role: str) -> None:
        """Record that the admin profile was created."""
        self._logger.info(
            "admin_profile_linked",
            linked_tenant_id=tenant_id,
            role=role,
            **self._get_context_kwargs(),
        )

    def profile_link_failed(
        self, tenant_id: str, code: str | None, message: str
    ) -> None:
        """Record that the admin profile could not be created."""
        self._logger.error(
            "admin_profile_link_failed",
            linked_tenant_id=tenant_id,
            code=code,
            error=message,
            **self._get_context_kwargs(),
        )

    def bootstrap_completed(self, tenant_id: str, attempts: int) -> None:
        """Record that the bootstrap run succeeded."""
        self._logger.info(
            "bootstrap_completed",
            created_tenant_id=tenant_id,
            attempts=attempts,
            **self._get_context_kwargs(),
        )

    def bootstrap_failed(self, state: str, error_type: str, message: str) -> None:
        """Record that the bootstrap run ended in failure."""
        self._logger.error(
            "bootstrap_failed",
            state=state,
            error_type=error_type,
            error=message,
            **self._get_context_kwargs(),
        )

    def state_transitioned(self, transition: Transition) -> None:
        """Record a move of the bootstrap state machine."""
        self._logger.debug(
            "bootstrap_state_transitioned",
            source=transition.source.value,
            trigger=transition.trigger.value,
            target=transition.target.value,
            **self._get_context_kwargs(),
        )

    def setup_status_checked(self, status: str) -> None:
        """Record the outcome of a setup status check."""
        self._logger.info(
            "setup_status_checked",
            status=status,
            **self._get_context_kwargs(),
        )
