"""Unit tests for RetryPolicy and status messages."""

from unittest.mock import AsyncMock, patch

import pytest

from infrastructure.settings import BootstrapSettings
from onboarding.application.retry import RetryPolicy, default_sleep
from onboarding.application.status import (
    CREATING_TENANT,
    StatusRecorder,
    provisioning_message,
)


class TestRetryPolicy:
    """Tests for RetryPolicy."""

    def test_defaults(self):
        """Fifteen attempts, three seconds apart."""
        policy = RetryPolicy()
        assert policy.max_attempts == 15
        assert policy.backoff_seconds == 3.0

    def test_rejects_zero_attempts(self):
        """At least one attempt is required."""
        with pytest.raises(ValueError, match="max_attempts"):
            RetryPolicy(max_attempts=0)

    def test_rejects_negative_backoff(self):
        """Backoff cannot be negative."""
        with pytest.raises(ValueError, match="backoff_seconds"):
            RetryPolicy(backoff_seconds=-0.5)

    def test_no_retry_after_last_attempt(self):
        """Retries are allowed only before the ceiling is reached."""
        policy = RetryPolicy(max_attempts=3)

        assert policy.allows_retry_after(1) is True
        assert policy.allows_retry_after(2) is True
        assert policy.allows_retry_after(3) is False

    def test_from_settings(self):
        """Policy mirrors the configured values."""
        settings = BootstrapSettings(max_attempts=4, backoff_seconds=0.5)

        policy = RetryPolicy.from_settings(settings)

        assert policy == RetryPolicy(max_attempts=4, backoff_seconds=0.5)

    @pytest.mark.asyncio
    async def test_default_sleep_uses_asyncio(self):
        """The production sleep delegates to asyncio.sleep."""
        with patch("onboarding.application.retry.asyncio.sleep", new=AsyncMock()) as mock:
            await default_sleep(3.0)

        mock.assert_awaited_once_with(3.0)


class TestStatusMessages:
    """Tests for progress messages."""

    def test_first_attempt_message(self):
        """The first attempt reads as plain tenant creation."""
        assert provisioning_message(1, 15) == CREATING_TENANT

    def test_retry_message_shows_progress(self):
        """Later attempts show the attempt number and the ceiling."""
        assert (
            provisioning_message(3, 15)
            == "Synchronizing database (attempt 3 of 15)..."
        )

    def test_recorder_keeps_messages_in_order(self):
        """StatusRecorder accumulates every message."""
        recorder = StatusRecorder()

        recorder("one")
        recorder("two")

        assert recorder.messages == ["one", "two"]
