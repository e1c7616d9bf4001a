"""Classification of backend errors for the bootstrap procedure.

Transient schema-propagation errors are recognised from an explicit
allow-list of codes and anchored message patterns. A free-text search
over arbitrary messages would retry unrelated failures.
"""

from __future__ import annotations

import re
from enum import StrEnum

from onboarding.domain.exceptions import (
    BootstrapError,
    PermissionDeniedError,
    ProvisioningTimeoutError,
    TransientSchemaError,
    UnknownBackendError,
)
from shared_kernel.backend import BackendError


class ErrorKind(StrEnum):
    """How a backend error should be treated."""

    TRANSIENT_SCHEMA = "transient_schema"
    PERMISSION_DENIED = "permission_denied"
    UNKNOWN = "unknown"


UNDEFINED_TABLE = "42P01"
UNDEFINED_COLUMN = "42703"
INSUFFICIENT_PRIVILEGE = "42501"

TRANSIENT_SCHEMA_CODES = frozenset(
    {
        UNDEFINED_TABLE,
        UNDEFINED_COLUMN,
        "PGRST002",  # schema cache being reloaded
        "PGRST200",  # relationship not in schema cache
        "PGRST204",  # column not in schema cache
        "PGRST205",  # table not in schema cache
    }
)

TRANSIENT_SCHEMA_MESSAGES = (
    re.compile(r"^Could not query the database for the schema cache\. Retrying\.$"),
    re.compile(r"^Could not find the table '[^']+' in the schema cache$"),
    re.compile(r"^Could not find the '[^']+' column of '[^']+' in the schema cache$"),
    re.compile(
        r"^Could not find a relationship between '[^']+' and '[^']+' "
        r"in the schema cache$"
    ),
)

PERMISSION_DENIED_CODES = frozenset({INSUFFICIENT_PRIVILEGE})

PERMISSION_DENIED_MESSAGES = (
    re.compile(r'^new row violates row-level security policy( for table "[^"]+")?$'),
)


def _matches_any(patterns: tuple[re.Pattern[str], ...], message: str) -> bool:
    return any(pattern.match(message) for pattern in patterns)


def classify_backend_error(error: BackendError) -> ErrorKind:
    """Classify a backend error by code first, then by known message.

    Args:
        error: The error returned by the backend

    Returns:
        The ErrorKind that decides retry versus abort
    """
    if error.code in TRANSIENT_SCHEMA_CODES:
        return ErrorKind.TRANSIENT_SCHEMA
    if error.code in PERMISSION_DENIED_CODES:
        return ErrorKind.PERMISSION_DENIED

    message = error.message.strip()
    if _matches_any(TRANSIENT_SCHEMA_MESSAGES, message):
        return ErrorKind.TRANSIENT_SCHEMA
    if _matches_any(PERMISSION_DENIED_MESSAGES, message):
        return ErrorKind.PERMISSION_DENIED

    return ErrorKind.UNKNOWN


def to_bootstrap_error(error: BackendError) -> BootstrapError:
    """Map a backend error onto the bootstrap error taxonomy."""
    match classify_backend_error(error):
        case ErrorKind.TRANSIENT_SCHEMA:
            return TransientSchemaError(error)
        case ErrorKind.PERMISSION_DENIED:
            return PermissionDeniedError(error)
        case _:
            return UnknownBackendError(error)


def describe_failure(error: BootstrapError) -> str:
    """Operator-facing text for a bootstrap failure.

    A timeout caused by a missing column means setup never added it, so
    the operator is pointed at the setup script instead of the raw code.
    """
    if (
        isinstance(error, ProvisioningTimeoutError)
        and error.last_error.code == UNDEFINED_COLUMN
    ):
        return (
            "Schema error: a required column is missing "
            f"({error.last_error.message}). Re-run the backend setup script."
        )
    return error.message
