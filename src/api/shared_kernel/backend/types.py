"""Value types shared by backend collaborators."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

Row = dict[str, Any]
Filters = Mapping[str, Any]


@dataclass(frozen=True)
class PrincipalId:
    """Identifier of an authenticated principal.

    Issued by the auth provider (a UUID for Supabase); treated as opaque.
    """

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def from_string(cls, value: str) -> PrincipalId:
        """Create PrincipalId from string value.

        Raises:
            ValueError: If value is empty
        """
        if not value or not value.strip():
            raise ValueError("Invalid PrincipalId: empty value")
        return cls(value=value)


@dataclass(frozen=True)
class Principal:
    """The authenticated actor behind the current session."""

    id: PrincipalId
    email: str | None = None


@dataclass(frozen=True)
class SelectResult:
    """Rows returned by a select, with the exact count when requested."""

    rows: list[Row] = field(default_factory=list)
    count: int | None = None
