"""Protocols for the backend collaborators.

Implementations talk to the hosted backend; tests substitute in-memory
doubles. A single shared client is never imported as a process-wide
singleton: callers receive these collaborators by injection.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from shared_kernel.backend.types import Filters, Principal, Row, SelectResult


@runtime_checkable
class AuthProvider(Protocol):
    """Issues sessions and resolves the current principal."""

    async def current_principal(self) -> Principal | None:
        """Return the principal of the current session.

        Returns:
            The authenticated Principal, or None if there is no valid session

        Raises:
            BackendError: If the auth service fails for another reason
        """
        ...


@runtime_checkable
class DataStore(Protocol):
    """Table-scoped access to the tenant-isolated data store.

    Row-level security on the backend enforces tenant isolation; callers
    only supply the table name and row data.
    """

    async def insert(self, table: str, row: Row) -> Row:
        """Insert one row and return it as created by the backend.

        A single insert is atomic: when it raises, no row was created.

        Raises:
            BackendError: If the backend rejects the insert
        """
        ...

    async def select(
        self,
        table: str,
        columns: str = "*",
        filters: Filters | None = None,
        limit: int | None = None,
        count: bool = False,
    ) -> SelectResult:
        """Select rows matching column-equality filters.

        Raises:
            BackendError: If the backend rejects the query
        """
        ...

    async def update(self, table: str, values: Row, filters: Filters) -> list[Row]:
        """Update rows matching filters and return them.

        Raises:
            BackendError: If the backend rejects the update
        """
        ...

    async def delete(self, table: str, filters: Filters) -> list[Row]:
        """Delete rows matching filters and return them.

        Raises:
            BackendError: If the backend rejects the delete
        """
        ...
