"""At most one in-flight bootstrap per principal."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from onboarding.domain.exceptions import BootstrapInProgressError
from onboarding.domain.value_objects import PrincipalId


class SubmissionLock:
    """Registry of principals with a bootstrap currently running.

    A second submission for the same principal is rejected rather than
    queued. The check and the registration happen without an intervening
    await, so no two tasks on the event loop can both pass the check.
    """

    def __init__(self) -> None:
        self._in_flight: set[str] = set()

    def is_held(self, principal_id: PrincipalId) -> bool:
        """Whether a bootstrap for ``principal_id`` is running."""
        return principal_id.value in self._in_flight

    @asynccontextmanager
    async def hold(self, principal_id: PrincipalId) -> AsyncIterator[None]:
        """Hold the lock for ``principal_id`` for the duration of the block.

        Raises:
            BootstrapInProgressError: If the principal already holds it
        """
        key = principal_id.value
        if key in self._in_flight:
            raise BootstrapInProgressError(key)

        self._in_flight.add(key)
        try:
            yield
        finally:
            self._in_flight.discard(key)
