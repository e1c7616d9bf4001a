"""Unit tests for the tenant bootstrap procedure."""

from unittest.mock import Mock

import pytest

from onboarding.application.services import BootstrapService
from onboarding.application.status import StatusRecorder
from onboarding.application.submission_lock import SubmissionLock
from onboarding.domain.exceptions import (
    AlreadyBootstrappedError,
    BootstrapInProgressError,
    PermissionDeniedError,
    ProvisioningTimeoutError,
    UnauthenticatedError,
    UnknownBackendError,
)
from onboarding.domain.state_machine import BootstrapState
from onboarding.domain.value_objects import ProfileRole
from onboarding.ports.schema import PROFILES_TABLE, TENANTS_TABLE
from shared_kernel.backend import BackendError


@pytest.fixture
def service(auth_provider, data_store, retry_policy, sleep, mock_probe):
    return BootstrapService(
        auth_provider=auth_provider,
        data_store=data_store,
        retry_policy=retry_policy,
        sleep=sleep,
        probe=mock_probe,
    )


@pytest.mark.asyncio
class TestSuccessfulBootstrap:
    """Tests for runs that complete."""

    async def test_creates_one_tenant_and_one_profile(
        self, service, data_store, principal
    ):
        """A successful run writes one tenant and one profile, then signals once."""
        on_complete = Mock()

        result = await service.run_bootstrap(
            "Comunidade Vida Nova", "Pr. João Silva", on_complete
        )

        [tenant_row] = data_store.rows(TENANTS_TABLE)
        [profile_row] = data_store.rows(PROFILES_TABLE)
        assert profile_row["igreja_id"] == tenant_row["id"]
        assert profile_row["id"] == principal.id.value
        assert tenant_row["created_by"] == principal.id.value
        on_complete.assert_called_once_with()
        assert result.state is BootstrapState.DONE
        assert result.attempts == 1
        assert result.tenant.id.value == tenant_row["id"]

    async def test_schema_propagation_scenario(
        self, service, data_store, sleep, undefined_column
    ):
        """Two undefined-column failures, then success on the third insert."""
        data_store.fail_inserts(TENANTS_TABLE, undefined_column, undefined_column)
        on_complete = Mock()

        result = await service.run_bootstrap(
            "Comunidade Vida Nova", "Pr. João Silva", on_complete
        )

        assert data_store.insert_count(TENANTS_TABLE) == 3
        assert sleep.waits == [3.0, 3.0]
        [tenant_row] = data_store.rows(TENANTS_TABLE)
        assert tenant_row["nome"] == "Comunidade Vida Nova"
        [profile_row] = data_store.rows(PROFILES_TABLE)
        assert profile_row["role"] == ProfileRole.top_privilege().value
        assert profile_row["full_name"] == "Pr. João Silva"
        on_complete.assert_called_once_with()
        assert result.attempts == 3

    async def test_success_on_attempt_k_stops_the_loop(
        self, service, data_store, undefined_table
    ):
        """Success on attempt k means exactly k tenant inserts."""
        data_store.fail_inserts(TENANTS_TABLE, undefined_table, undefined_table, undefined_table)

        await service.run_bootstrap("Igreja", "Maria", Mock())

        assert data_store.insert_count(TENANTS_TABLE) == 4
        assert len(data_store.rows(TENANTS_TABLE)) == 1

    async def test_status_messages_in_order(self, service, data_store, undefined_column):
        """Progress messages follow the steps of the run."""
        data_store.fail_inserts(TENANTS_TABLE, undefined_column)
        status = StatusRecorder()

        await service.run_bootstrap("Igreja", "Maria", Mock(), status=status)

        assert status.messages == [
            "Authenticating...",
            "Creating your church...",
            "Synchronizing database (attempt 2 of 5)...",
            "Configuring profile...",
            "Done!",
        ]

    async def test_completion_runs_after_both_writes(self, service, data_store):
        """The callback observes the tenant and profile already persisted."""
        seen = []

        def on_complete():
            seen.append(
                (len(data_store.rows(TENANTS_TABLE)), len(data_store.rows(PROFILES_TABLE)))
            )

        await service.run_bootstrap("Igreja", "Maria", on_complete)

        assert seen == [(1, 1)]

    async def test_probe_events(self, service, mock_probe):
        """The run is reported to the probe with its outcome."""
        result = await service.run_bootstrap("Igreja", "Maria", Mock())

        mock_probe.bootstrap_started.assert_called_once_with("Igreja")
        mock_probe.bootstrap_completed.assert_called_once_with(
            result.tenant.id.value, 1
        )
        mock_probe.bootstrap_failed.assert_not_called()
        assert mock_probe.state_transitioned.call_count == len(result.transitions)

    async def test_lock_released_after_run(
        self, auth_provider, data_store, sleep, principal
    ):
        """The principal's submission slot is freed when the run ends."""
        lock = SubmissionLock()
        service = BootstrapService(
            auth_provider, data_store, sleep=sleep, submission_lock=lock
        )

        await service.run_bootstrap("Igreja", "Maria", Mock())

        assert lock.is_held(principal.id) is False


@pytest.mark.asyncio
class TestFailedBootstrap:
    """Tests for runs that end in an error."""

    async def test_unauthenticated_makes_no_writes(
        self, anonymous_auth_provider, data_store, sleep, mock_probe
    ):
        """Without a principal nothing is written and the callback is not called."""
        service = BootstrapService(
            anonymous_auth_provider, data_store, sleep=sleep, probe=mock_probe
        )
        on_complete = Mock()

        with pytest.raises(UnauthenticatedError):
            await service.run_bootstrap("Igreja", "Maria", on_complete)

        assert data_store.insert_calls == []
        assert data_store.select_calls == []
        on_complete.assert_not_called()
        mock_probe.bootstrap_failed.assert_called_once_with(
            "failed", "UnauthenticatedError", UnauthenticatedError().message
        )

    async def test_exhaustion_times_out_with_no_rows(
        self, service, data_store, sleep, undefined_table
    ):
        """M transient failures: M inserts, M-1 waits, no tenant, no profile."""
        data_store.fail_inserts(TENANTS_TABLE, *[undefined_table] * 5)
        on_complete = Mock()

        with pytest.raises(ProvisioningTimeoutError) as exc_info:
            await service.run_bootstrap("Igreja", "Maria", on_complete)

        assert exc_info.value.attempts == 5
        assert data_store.insert_count(TENANTS_TABLE) == 5
        assert sleep.waits == [3.0] * 4
        assert data_store.rows(TENANTS_TABLE) == []
        assert data_store.insert_count(PROFILES_TABLE) == 0
        on_complete.assert_not_called()

    async def test_profile_permission_error_leaves_tenant_without_profile(
        self, service, data_store, rls_violation
    ):
        """A rejected profile insert keeps the tenant and reports the setup fix."""
        data_store.fail_inserts(PROFILES_TABLE, rls_violation)
        on_complete = Mock()

        with pytest.raises(PermissionDeniedError) as exc_info:
            await service.run_bootstrap("Igreja", "Maria", on_complete)

        assert len(data_store.rows(TENANTS_TABLE)) == 1
        assert data_store.rows(PROFILES_TABLE) == []
        assert "Re-run the backend setup" in exc_info.value.message
        on_complete.assert_not_called()

    async def test_tenant_permission_error_is_not_retried(self, service, data_store, sleep):
        """Policy rejections on the tenant insert abort at once."""
        data_store.fail_inserts(
            TENANTS_TABLE,
            BackendError(
                code="42501",
                message='new row violates row-level security policy for table "igrejas"',
            ),
        )

        with pytest.raises(PermissionDeniedError):
            await service.run_bootstrap("Igreja", "Maria", Mock())

        assert data_store.insert_count(TENANTS_TABLE) == 1
        assert sleep.waits == []

    async def test_failure_reported_to_probe(self, service, data_store, mock_probe):
        """Failed runs end in the failed state on the probe."""
        data_store.fail_inserts(
            TENANTS_TABLE, BackendError(code="23505", message="duplicate key value")
        )

        with pytest.raises(UnknownBackendError):
            await service.run_bootstrap("Igreja", "Maria", Mock())

        mock_probe.bootstrap_failed.assert_called_once_with(
            "failed", "UnknownBackendError", "duplicate key value"
        )
        mock_probe.bootstrap_completed.assert_not_called()


@pytest.mark.asyncio
class TestRepeatedBootstrap:
    """Tests for principals that already bootstrapped or are bootstrapping."""

    async def test_existing_profile_is_rejected_before_writing(
        self, service, data_store, principal, mock_probe
    ):
        """A second bootstrap for the same principal writes nothing."""
        await service.run_bootstrap("Igreja", "Maria", Mock())
        tenant_id = data_store.rows(TENANTS_TABLE)[0]["id"]
        on_complete = Mock()

        with pytest.raises(AlreadyBootstrappedError) as exc_info:
            await service.run_bootstrap("Outra Igreja", "Maria", on_complete)

        assert exc_info.value.tenant_id == tenant_id
        assert len(data_store.rows(TENANTS_TABLE)) == 1
        assert len(data_store.rows(PROFILES_TABLE)) == 1
        on_complete.assert_not_called()
        mock_probe.existing_profile_found.assert_called_once_with(tenant_id)

    async def test_missing_profiles_table_counts_as_no_profile(
        self, service, data_store, undefined_table
    ):
        """A profiles table that is not yet visible does not block bootstrap."""
        data_store.fail_selects(PROFILES_TABLE, undefined_table)

        result = await service.run_bootstrap("Igreja", "Maria", Mock())

        assert result.state is BootstrapState.DONE

    async def test_pre_check_permission_error_aborts(
        self, service, data_store, rls_violation
    ):
        """Other failures of the pre-check abort the run."""
        data_store.fail_selects(PROFILES_TABLE, rls_violation)

        with pytest.raises(PermissionDeniedError):
            await service.run_bootstrap("Igreja", "Maria", Mock())

        assert data_store.insert_calls == []

    async def test_pre_check_can_be_disabled(
        self, auth_provider, data_store, sleep, mock_probe
    ):
        """With the check off, no profile lookup is made."""
        service = BootstrapService(
            auth_provider,
            data_store,
            sleep=sleep,
            probe=mock_probe,
            check_existing_profile=False,
        )

        await service.run_bootstrap("Igreja", "Maria", Mock())

        assert data_store.select_calls == []

    async def test_concurrent_submission_is_rejected(
        self, auth_provider, data_store, sleep, principal, mock_probe
    ):
        """A run for a principal already in flight fails without writing."""
        lock = SubmissionLock()
        service = BootstrapService(
            auth_provider,
            data_store,
            sleep=sleep,
            probe=mock_probe,
            submission_lock=lock,
        )

        async with lock.hold(principal.id):
            with pytest.raises(BootstrapInProgressError):
                await service.run_bootstrap("Igreja", "Maria", Mock())

        assert data_store.insert_calls == []
