"""Translation of backend HTTP error responses into BackendError."""

from __future__ import annotations

from typing import Any

import httpx

from shared_kernel.backend import BackendError

# GoTrue and PostgREST disagree on where the human-readable text lives.
_MESSAGE_KEYS = ("message", "msg", "error_description", "error")


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def parse_backend_error(response: httpx.Response) -> BackendError:
    """Build a BackendError from a failed PostgREST or GoTrue response.

    Args:
        response: A response whose status is not 2xx

    Returns:
        BackendError carrying the backend code, message, details and hint
    """
    try:
        body = response.json()
    except ValueError:
        body = None

    if not isinstance(body, dict):
        text = response.text.strip() or response.reason_phrase
        return BackendError(
            message=text or f"HTTP {response.status_code}",
            status_code=response.status_code,
        )

    message = next(
        (str(body[key]) for key in _MESSAGE_KEYS if body.get(key)),
        response.reason_phrase or f"HTTP {response.status_code}",
    )
    code = body.get("code", body.get("error_code"))

    return BackendError(
        message=message,
        code=_as_text(code),
        details=_as_text(body.get("details")),
        hint=_as_text(body.get("hint")),
        status_code=response.status_code,
    )


def transport_error(error: httpx.HTTPError) -> BackendError:
    """Wrap a transport failure (timeout, refused connection, ...)."""
    return BackendError(message=str(error) or type(error).__name__)
