"""Progress messages reported to the caller during a bootstrap run."""

from __future__ import annotations

from collections.abc import Callable

StatusSink = Callable[[str], None]

AUTHENTICATING = "Authenticating..."
CREATING_TENANT = "Creating your church..."
CONFIGURING_PROFILE = "Configuring profile..."
DONE = "Done!"


def provisioning_message(attempt: int, max_attempts: int) -> str:
    """Message for a tenant insert attempt."""
    if attempt == 1:
        return CREATING_TENANT
    return f"Synchronizing database (attempt {attempt} of {max_attempts})..."


def discard_status(message: str) -> None:
    """Sink used when the caller does not want progress messages."""


class StatusRecorder:
    """Sink that keeps every message, for callers that report them later."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def __call__(self, message: str) -> None:
        self.messages.append(message)
