"""Shape rules for append-only, temporally versioned rows.

Only static checks live here. Every state transition (create, close and
insert, soft delete) belongs to the lifecycle manager in
``funeral_core.services.versioning``.
"""

from __future__ import annotations

import enum
from datetime import datetime

from funeral_core.errors import DomainValidationError

# The only columns a persisted row may ever change, and only once, on close.
CLOSING_FIELDS = frozenset({"valid_to", "is_current"})


class RecordState(str, enum.Enum):
    ACTIVE_CURRENT = "ACTIVE_CURRENT"
    CLOSED_HISTORICAL = "CLOSED_HISTORICAL"
    DELETED_TERMINAL = "DELETED_TERMINAL"


def check_record_shape(
    *,
    version: int,
    valid_from: datetime | None,
    valid_to: datetime | None,
    is_current: bool,
) -> None:
    """Validate the static invariants of a single version row."""
    if version is None or version < 1:
        raise DomainValidationError(f"version must be >= 1, got {version}")
    if valid_from is not None and valid_to is not None and not valid_from < valid_to:
        raise DomainValidationError(
            f"valid_from ({valid_from}) must precede valid_to ({valid_to})"
        )
    if is_current != (valid_to is None):
        raise DomainValidationError(
            "is_current must be true exactly when the validity interval is open"
        )


def record_state(row, has_successor: bool) -> RecordState:
    """Classify a row. A closed row with no successor is a soft-deleted terminal row.

    Read-side only: used when auditing a loaded chain. Writes never consult it.
    """
    if row.is_current:
        return RecordState.ACTIVE_CURRENT
    if has_successor:
        return RecordState.CLOSED_HISTORICAL
    return RecordState.DELETED_TERMINAL


def check_chain(rows) -> None:
    """Validate a full version chain for one business key, ordered by version.

    Raises DomainValidationError on gaps, overlaps or more than one current row.
    The database constraints enforce the same rules on write; this is for
    auditing chains that have already been loaded.
    """
    current_count = 0
    previous = None
    for expected_version, row in enumerate(rows, start=1):
        check_record_shape(
            version=row.version,
            valid_from=row.valid_from,
            valid_to=row.valid_to,
            is_current=row.is_current,
        )
        if row.version != expected_version:
            raise DomainValidationError(
                f"version sequence broken at {row.version}, expected {expected_version}"
            )
        if previous is not None:
            if previous.is_current:
                raise DomainValidationError(
                    f"version {previous.version} is current but has a successor"
                )
            if previous.valid_to != row.valid_from:
                raise DomainValidationError(
                    f"versions {previous.version} and {row.version} do not abut"
                )
        if row.is_current:
            current_count += 1
        previous = row
    if current_count > 1:
        raise DomainValidationError("more than one current version")
