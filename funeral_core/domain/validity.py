from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

# Smallest step the stored timestamps can represent.
CLOCK_RESOLUTION = timedelta(microseconds=1)


def utcnow() -> datetime:
    """Current time as a naive UTC datetime, the form every row stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_storage_time(value: datetime) -> datetime:
    """Normalize a caller-supplied timestamp to naive UTC.

    Aware datetimes are converted to UTC; naive ones are assumed to be UTC.
    """
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def transition_time(now: datetime, current_valid_from: datetime) -> datetime:
    """Instant at which a current version is closed and its successor opened.

    Must be strictly after the closed row's valid_from so that the closed
    interval is never empty, even when the clock has not advanced.
    """
    if now <= current_valid_from:
        return current_valid_from + CLOCK_RESOLUTION
    return now


@dataclass(frozen=True, slots=True)
class ValidityInterval:
    """Defines which version row was truth "as of" a given instant.

    Semantics (intentionally centralized):
    - A row covers as_of if valid_from <= as_of
    - AND (valid_to is None OR valid_to > as_of)

    Note: valid_from is inclusive, valid_to is exclusive. At the exact instant
    of a transition the successor is the one that matches.
    """

    as_of: datetime

    def contains(self, *, valid_from: datetime, valid_to: datetime | None) -> bool:
        return (valid_from <= self.as_of) and (valid_to is None or valid_to > self.as_of)

    def sqlalchemy_contains_predicate(self, *, from_col, to_col):
        """Build a SQLAlchemy predicate implementing the containment rule.

        Kept here so repositories can translate the rule into SQL without
        redefining the boundary conditions.
        """
        from sqlalchemy import and_, or_

        return and_(
            from_col <= self.as_of,
            or_(
                to_col.is_(None),
                to_col > self.as_of,
            ),
        )
