"""Domain probe for backend client observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.backend import BackendError
    from shared_kernel.observability_context import ObservationContext


class BackendClientProbe(Protocol):
    """Domain probe for calls made to the hosted backend."""

    def request_rejected(
        self, operation: str, resource: str, error: BackendError
    ) -> None:
        """Record that the backend answered with an error."""
        ...

    def request_unreachable(
        self, operation: str, resource: str, error: BackendError
    ) -> None:
        """Record that the backend could not be reached."""
        ...

    def session_missing(self) -> None:
        """Record that no access token accompanied the request."""
        ...

    def session_rejected(self, status_code: int) -> None:
        """Record that the auth service rejected the access token."""
        ...

    def with_context(self, context: ObservationContext) -> BackendClientProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultBackendClientProbe:
    """Default implementation of BackendClientProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultBackendClientProbe:
        """Create a new probe with observation context bound."""
        return DefaultBackendClientProbe(logger=self._logger, context=context)

    def request_rejected(
        self, operation: str, resource: str, error: BackendError
    ) -> None:
        """Record that the backend answered with an error."""
        self._logger.warning(
            "backend_request_rejected",
            operation=operation,
            resource=resource,
            code=error.code,
            error=error.message,
            status_code=error.status_code,
            **self._get_context_kwargs(),
        )

    def request_unreachable(
        self, operation: str, resource: str, error: BackendError
    ) -> None:
        """Record that the backend could not be reached."""
        self._logger.error(
            "backend_request_unreachable",
            operation=operation,
            resource=resource,
            error=error.message,
            **self._get_context_kwargs(),
        )

    def session_missing(self) -> None:
        """Record that no access token accompanied the request."""
        self._logger.debug("backend_session_missing", **self._get_context_kwargs())

    def session_rejected(self, status_code: int) -> None:
        """Record that the auth service rejected the access token."""
        self._logger.info(
            "backend_session_rejected",
            status_code=status_code,
            **self._get_context_kwargs(),
        )
