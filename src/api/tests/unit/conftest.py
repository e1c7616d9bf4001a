"""Unit test fixtures with mocked dependencies."""

import pytest

from infrastructure.settings import SupabaseSettings


@pytest.fixture
def supabase_settings() -> SupabaseSettings:
    """Provide test backend settings."""
    return SupabaseSettings(
        url="https://test-project.supabase.co",
        anon_key="test-anon-key",
        timeout_seconds=5.0,
    )
