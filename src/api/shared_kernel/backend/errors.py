"""Exceptions raised by backend collaborators."""

from __future__ import annotations


class BackendError(Exception):
    """Raised when the hosted backend rejects a request.

    Mirrors the error envelope returned by PostgREST and GoTrue. The
    ``code`` is either a Postgres SQLSTATE (e.g. ``42P01``) or a PostgREST
    code (e.g. ``PGRST205``); it is ``None`` for transport failures.

    Attributes:
        code: Backend error code, if any
        message: Human-readable backend message
        details: Optional backend details
        hint: Optional backend hint
        status_code: HTTP status of the failed response, if any
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: str | None = None,
        hint: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details
        self.hint = hint
        self.status_code = status_code

    def __repr__(self) -> str:
        return (
            f"BackendError(code={self.code!r}, message={self.message!r}, "
            f"status_code={self.status_code!r})"
        )
