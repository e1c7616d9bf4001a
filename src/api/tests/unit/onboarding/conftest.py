"""Fixtures for onboarding tests: in-memory doubles for the hosted backend."""

from __future__ import annotations

from collections import defaultdict, deque
from datetime import UTC, datetime
from typing import Any
from unittest.mock import Mock
from uuid import uuid4

import pytest

from onboarding.application.observability import BootstrapProbe
from onboarding.application.retry import RetryPolicy
from shared_kernel.backend import BackendError, Principal, PrincipalId, SelectResult

PRINCIPAL_ID = "5f0c7a9e-3d1b-4c8e-9a41-2b7d6e8f1c30"


@pytest.fixture
def undefined_column() -> BackendError:
    """Error PostgREST returns while a new column is not yet visible."""
    return BackendError(
        code="42703",
        message='column "created_by" of relation "igrejas" does not exist',
        status_code=400,
    )


@pytest.fixture
def undefined_table() -> BackendError:
    """Error PostgREST returns while a new table is not yet visible."""
    return BackendError(
        code="42P01",
        message='relation "public.igrejas" does not exist',
        status_code=404,
    )


@pytest.fixture
def rls_violation() -> BackendError:
    """Error PostgREST returns when an access policy rejects an insert."""
    return BackendError(
        code="42501",
        message='new row violates row-level security policy for table "profiles"',
        status_code=403,
    )


class FakeDataStore:
    """In-memory DataStore that can be told to fail upcoming calls."""

    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self.insert_calls: list[tuple[str, dict[str, Any]]] = []
        self.select_calls: list[tuple[str, dict[str, Any]]] = []
        self._insert_failures: dict[str, deque[BackendError]] = defaultdict(deque)
        self._select_failures: dict[str, deque[BackendError]] = defaultdict(deque)

    def fail_inserts(self, table: str, *errors: BackendError) -> None:
        """Make the next inserts into ``table`` raise ``errors`` in order."""
        self._insert_failures[table].extend(errors)

    def fail_selects(self, table: str, *errors: BackendError) -> None:
        """Make the next selects from ``table`` raise ``errors`` in order."""
        self._select_failures[table].extend(errors)

    def rows(self, table: str) -> list[dict[str, Any]]:
        """Rows currently persisted in ``table``."""
        return list(self.tables[table])

    def insert_count(self, table: str) -> int:
        """Number of insert calls made against ``table``."""
        return sum(1 for name, _ in self.insert_calls if name == table)

    def _matching(self, table: str, filters: Any) -> list[dict[str, Any]]:
        return [
            row
            for row in self.tables[table]
            if all(row.get(column) == value for column, value in (filters or {}).items())
        ]

    async def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        self.insert_calls.append((table, dict(row)))
        if self._insert_failures[table]:
            raise self._insert_failures[table].popleft()

        created = {"id": str(uuid4()), **row}
        created.setdefault("created_at", datetime.now(UTC).isoformat())
        self.tables[table].append(created)
        return dict(created)

    async def select(
        self,
        table: str,
        columns: str = "*",
        filters: Any = None,
        limit: int | None = None,
        count: bool = False,
    ) -> SelectResult:
        self.select_calls.append((table, dict(filters or {})))
        if self._select_failures[table]:
            raise self._select_failures[table].popleft()

        rows = self._matching(table, filters)
        total = len(rows)
        if limit is not None:
            rows = rows[:limit]
        return SelectResult(
            rows=[dict(row) for row in rows],
            count=total if count else None,
        )

    async def update(
        self, table: str, values: dict[str, Any], filters: Any
    ) -> list[dict[str, Any]]:
        rows = self._matching(table, filters)
        for row in rows:
            row.update(values)
        return [dict(row) for row in rows]

    async def delete(self, table: str, filters: Any) -> list[dict[str, Any]]:
        rows = self._matching(table, filters)
        self.tables[table] = [row for row in self.tables[table] if row not in rows]
        return [dict(row) for row in rows]


class FakeAuthProvider:
    """AuthProvider returning a fixed principal (or none)."""

    def __init__(self, principal: Principal | None) -> None:
        self.principal = principal
        self.calls = 0

    async def current_principal(self) -> Principal | None:
        self.calls += 1
        return self.principal


class RecordingSleep:
    """Sleep double that returns immediately and records each wait."""

    def __init__(self) -> None:
        self.waits: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.waits.append(seconds)


@pytest.fixture
def principal() -> Principal:
    """The authenticated operator."""
    return Principal(id=PrincipalId(value=PRINCIPAL_ID), email="joao@vidanova.org")


@pytest.fixture
def auth_provider(principal: Principal) -> FakeAuthProvider:
    """Auth provider with an authenticated session."""
    return FakeAuthProvider(principal)


@pytest.fixture
def anonymous_auth_provider() -> FakeAuthProvider:
    """Auth provider without a session."""
    return FakeAuthProvider(None)


@pytest.fixture
def data_store() -> FakeDataStore:
    """Empty in-memory data store."""
    return FakeDataStore()


@pytest.fixture
def sleep() -> RecordingSleep:
    """Sleep double recording backoff waits."""
    return RecordingSleep()


@pytest.fixture
def retry_policy() -> RetryPolicy:
    """Small retry budget so exhaustion tests stay short."""
    return RetryPolicy(max_attempts=5, backoff_seconds=3.0)


@pytest.fixture
def mock_probe() -> Mock:
    """Mock BootstrapProbe whose with_context returns itself."""
    probe = Mock(spec=BootstrapProbe)
    probe.with_context.return_value = probe
    return probe
