"""Retry policy for tenant provisioning."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from infrastructure.settings import BootstrapSettings

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retries with a fixed wait between attempts.

    A run makes at most ``max_attempts`` attempts and waits
    ``backoff_seconds`` only between two attempts, never after the last.
    """

    max_attempts: int = 15
    backoff_seconds: float = 3.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.backoff_seconds < 0:
            raise ValueError(
                f"backoff_seconds must be >= 0, got {self.backoff_seconds}"
            )

    @classmethod
    def from_settings(cls, settings: BootstrapSettings) -> RetryPolicy:
        """Build the policy from bootstrap settings."""
        return cls(
            max_attempts=settings.max_attempts,
            backoff_seconds=settings.backoff_seconds,
        )

    def allows_retry_after(self, attempt: int) -> bool:
        """Whether another attempt may follow attempt number ``attempt``."""
        return attempt < self.max_attempts


async def default_sleep(seconds: float) -> None:
    """Suspend the current task for ``seconds``."""
    await asyncio.sleep(seconds)
