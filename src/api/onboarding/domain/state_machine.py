"""Bootstrap state machine.

The procedure moves through a fixed set of states. Every legal move is a
row of TRANSITIONS; anything else is a programming error.

    idle --submit--> provisioning --tenant_created--> linking --profile_created--> done
                      |    ^
                      +----+ transient_error
    idle / provisioning / linking --fatal_error--> failed
    idle --session_rejected--> failed
    provisioning --attempts_exhausted--> failed
    failed --reset--> idle
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum

from onboarding.domain.exceptions import InvalidTransitionError


class BootstrapState(StrEnum):
    """States of a bootstrap run."""

    IDLE = "idle"
    PROVISIONING = "provisioning"
    LINKING = "linking"
    DONE = "done"
    FAILED = "failed"


class BootstrapTrigger(StrEnum):
    """Conditions that move a bootstrap run between states."""

    SUBMIT = "submit"
    SESSION_REJECTED = "session_rejected"
    TRANSIENT_ERROR = "transient_error"
    TENANT_CREATED = "tenant_created"
    FATAL_ERROR = "fatal_error"
    ATTEMPTS_EXHAUSTED = "attempts_exhausted"
    PROFILE_CREATED = "profile_created"
    RESET = "reset"


TRANSITIONS: dict[tuple[BootstrapState, BootstrapTrigger], BootstrapState] = {
    (BootstrapState.IDLE, BootstrapTrigger.SUBMIT): BootstrapState.PROVISIONING,
    (BootstrapState.IDLE, BootstrapTrigger.SESSION_REJECTED): BootstrapState.FAILED,
    (BootstrapState.IDLE, BootstrapTrigger.FATAL_ERROR): BootstrapState.FAILED,
    (
        BootstrapState.PROVISIONING,
        BootstrapTrigger.TRANSIENT_ERROR,
    ): BootstrapState.PROVISIONING,
    (BootstrapState.PROVISIONING, BootstrapTrigger.TENANT_CREATED): BootstrapState.LINKING,
    (BootstrapState.PROVISIONING, BootstrapTrigger.FATAL_ERROR): BootstrapState.FAILED,
    (
        BootstrapState.PROVISIONING,
        BootstrapTrigger.ATTEMPTS_EXHAUSTED,
    ): BootstrapState.FAILED,
    (BootstrapState.LINKING, BootstrapTrigger.PROFILE_CREATED): BootstrapState.DONE,
    (BootstrapState.LINKING, BootstrapTrigger.FATAL_ERROR): BootstrapState.FAILED,
    (BootstrapState.FAILED, BootstrapTrigger.RESET): BootstrapState.IDLE,
}

TERMINAL_STATES = frozenset({BootstrapState.DONE, BootstrapState.FAILED})


@dataclass(frozen=True)
class Transition:
    """A recorded move of the state machine."""

    source: BootstrapState
    trigger: BootstrapTrigger
    target: BootstrapState


@dataclass
class BootstrapStateMachine:
    """Tracks the state of one bootstrap run.

    ``failed`` is terminal for the run; firing ``reset`` returns the
    machine to ``idle`` so the operator can resubmit. ``on_transition``
    is called after every successful fire.
    """

    state: BootstrapState = BootstrapState.IDLE
    history: list[Transition] = field(default_factory=list)
    on_transition: Callable[[Transition], None] | None = field(
        default=None, repr=False, compare=False
    )

    @property
    def is_terminal(self) -> bool:
        """Whether the run has finished (successfully or not)."""
        return self.state in TERMINAL_STATES

    def can_fire(self, trigger: BootstrapTrigger) -> bool:
        """Whether ``trigger`` is accepted in the current state."""
        return (self.state, trigger) in TRANSITIONS

    def fire(self, trigger: BootstrapTrigger) -> Transition:
        """Apply ``trigger`` and return the recorded transition.

        Raises:
            InvalidTransitionError: If the current state does not accept trigger
        """
        target = TRANSITIONS.get((self.state, trigger))
        if target is None:
            raise InvalidTransitionError(self.state.value, trigger.value)

        transition = Transition(source=self.state, trigger=trigger, target=target)
        self.state = target
        self.history.append(transition)
        if self.on_transition is not None:
            self.on_transition(transition)
        return transition

    def count(self, trigger: BootstrapTrigger) -> int:
        """Number of times ``trigger`` has been fired."""
        return sum(1 for transition in self.history if transition.trigger == trigger)
