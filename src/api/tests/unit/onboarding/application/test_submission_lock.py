"""Unit tests for SubmissionLock."""

import pytest

from onboarding.application.submission_lock import SubmissionLock
from onboarding.domain.exceptions import BootstrapInProgressError
from onboarding.domain.value_objects import PrincipalId

ALICE = PrincipalId(value="alice")
BOB = PrincipalId(value="bob")


@pytest.mark.asyncio
class TestSubmissionLock:
    """Tests for per-principal in-flight tracking."""

    async def test_held_only_inside_block(self):
        """The lock is released when the block exits."""
        lock = SubmissionLock()

        async with lock.hold(ALICE):
            assert lock.is_held(ALICE) is True

        assert lock.is_held(ALICE) is False

    async def test_second_hold_for_same_principal_is_rejected(self):
        """A concurrent submission for the same principal fails fast."""
        lock = SubmissionLock()

        async with lock.hold(ALICE):
            with pytest.raises(BootstrapInProgressError) as exc_info:
                async with lock.hold(ALICE):
                    pass

        assert exc_info.value.principal_id == "alice"

    async def test_different_principals_do_not_block(self):
        """Runs for different principals proceed independently."""
        lock = SubmissionLock()

        async with lock.hold(ALICE):
            async with lock.hold(BOB):
                assert lock.is_held(BOB) is True

    async def test_released_after_exception(self):
        """Errors inside the block still release the lock."""
        lock = SubmissionLock()

        with pytest.raises(RuntimeError):
            async with lock.hold(ALICE):
                raise RuntimeError("boom")

        assert lock.is_held(ALICE) is False
