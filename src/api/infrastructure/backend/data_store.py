"""PostgREST implementation of the DataStore protocol."""

from __future__ import annotations

from typing import Any

import httpx

from infrastructure.backend.errors import parse_backend_error, transport_error
from infrastructure.backend.observability import (
    BackendClientProbe,
    DefaultBackendClientProbe,
)
from infrastructure.settings import SupabaseSettings
from shared_kernel.backend import BackendError, Filters, Row, SelectResult


def _encode_filter_value(value: Any) -> str:
    if value is None:
        return "is.null"
    if isinstance(value, bool):
        return f"eq.{str(value).lower()}"
    return f"eq.{value}"


def _parse_content_range(header: str | None) -> int | None:
    """Extract the total from a ``Content-Range: 0-24/3573`` header."""
    if not header or "/" not in header:
        return None
    total = header.rsplit("/", 1)[1]
    return int(total) if total.isdigit() else None


class SupabaseDataStore:
    """Table access through the PostgREST API of a Supabase project.

    Requests carry the caller's access token so row-level security
    policies see the authenticated principal. Without a token the anon
    key is used as the bearer, which RLS treats as an anonymous caller.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        settings: SupabaseSettings,
        access_token: str | None = None,
        probe: BackendClientProbe | None = None,
    ):
        self._client = client
        self._settings = settings
        self._access_token = access_token
        self._probe = probe or DefaultBackendClientProbe()

    @property
    def _request_headers(self) -> dict[str, str]:
        anon_key = self._settings.anon_key.get_secret_value()
        bearer = self._access_token or anon_key
        return {
            "apikey": anon_key,
            "Authorization": f"Bearer {bearer}",
        }

    def _table_url(self, table: str) -> str:
        return f"{self._settings.rest_url}/{table}"

    @staticmethod
    def _filter_params(filters: Filters | None) -> dict[str, str]:
        if not filters:
            return {}
        return {column: _encode_filter_value(value) for column, value in filters.items()}

    async def _send(
        self,
        method: str,
        table: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
        prefer: str | None = None,
    ) -> httpx.Response:
        headers = self._request_headers
        if prefer:
            headers["Prefer"] = prefer

        try:
            response = await self._client.request(
                method,
                self._table_url(table),
                params=params,
                json=json,
                headers=headers,
                timeout=self._settings.timeout_seconds,
            )
        except httpx.HTTPError as e:
            error = transport_error(e)
            self._probe.request_unreachable(method, table, error)
            raise error from e

        if not response.is_success:
            error = parse_backend_error(response)
            self._probe.request_rejected(method, table, error)
            raise error

        return response

    async def insert(self, table: str, row: Row) -> Row:
        """Insert one row and return the row as stored.

        Raises:
            BackendError: If the insert is rejected or returns no row
        """
        response = await self._send(
            "POST", table, json=[row], prefer="return=representation"
        )
        rows = response.json()
        if not isinstance(rows, list) or len(rows) != 1:
            raise BackendError(
                message="JSON object requested, multiple (or no) rows returned",
                code="PGRST116",
                status_code=response.status_code,
            )
        return rows[0]

    async def select(
        self,
        table: str,
        columns: str = "*",
        filters: Filters | None = None,
        limit: int | None = None,
        count: bool = False,
    ) -> SelectResult:
        """Select rows; ``count=True`` also returns the exact total."""
        params = {"select": columns, **self._filter_params(filters)}
        if limit is not None:
            params["limit"] = str(limit)

        response = await self._send(
            "GET", table, params=params, prefer="count=exact" if count else None
        )
        return SelectResult(
            rows=response.json(),
            count=(
                _parse_content_range(response.headers.get("content-range"))
                if count
                else None
            ),
        )

    async def update(self, table: str, values: Row, filters: Filters) -> list[Row]:
        """Update rows matching filters and return them."""
        response = await self._send(
            "PATCH",
            table,
            params=self._filter_params(filters),
            json=values,
            prefer="return=representation",
        )
        return response.json()

    async def delete(self, table: str, filters: Filters) -> list[Row]:
        """Delete rows matching filters and return them."""
        response = await self._send(
            "DELETE",
            table,
            params=self._filter_params(filters),
            prefer="return=representation",
        )
        return response.json()
