from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Index,
    Integer,
    String,
    UniqueConstraint,
    event,
    inspect,
    text,
)
from sqlalchemy.orm import declared_attr

from funeral_core.domain.versioned_record import CLOSING_FIELDS
from funeral_core.errors import ImmutableVersionError


class VersionedMixin:
    """Columns and constraints shared by every append-only versioned table.

    Subclasses list their entity-specific columns in ``__payload_fields__``.
    """

    __payload_fields__: tuple[str, ...] = ()

    id = Column(Integer, primary_key=True, index=True)
    business_key = Column(String(64), nullable=False)
    tenant_id = Column(String(64), nullable=False)
    version = Column(Integer, nullable=False)
    valid_from = Column(DateTime, nullable=False)
    valid_to = Column(DateTime, nullable=True)
    is_current = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False)
    created_by = Column(String(255), nullable=False)
    updated_by = Column(String(255), nullable=True)

    @declared_attr
    def __table_args__(cls):
        name = cls.__tablename__
        return (
            UniqueConstraint("business_key", "version", name=f"uq_{name}_business_key_version"),
            CheckConstraint("version >= 1", name=f"ck_{name}_version_positive"),
            CheckConstraint(
                "valid_to IS NULL OR valid_from < valid_to",
                name=f"ck_{name}_valid_interval",
            ),
            CheckConstraint(
                "is_current = (valid_to IS NULL)",
                name=f"ck_{name}_current_iff_open",
            ),
            Index(f"ix_{name}_business_key_is_current", "business_key", "is_current"),
            Index(f"ix_{name}_tenant_id_is_current", "tenant_id", "is_current"),
            # At most one open version per business key
            Index(
                f"uq_{name}_business_key_current",
                "business_key",
                unique=True,
                sqlite_where=text("is_current"),
                postgresql_where=text("is_current"),
            ),
        )

    def payload(self) -> dict:
        return {field: getattr(self, field) for field in self.__payload_fields__}

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} {self.business_key} v{self.version}"
            f"{' current' if self.is_current else ''}>"
        )


@event.listens_for(VersionedMixin, "before_update", propagate=True)
def _reject_in_place_changes(mapper, connection, target):
    """Persisted version rows may only be closed, and closing goes through the
    repository's compare-and-swap update, never through the unit of work."""
    state = inspect(target)
    changed = [
        attr.key
        for attr in state.attrs
        if attr.key not in CLOSING_FIELDS and attr.history.has_changes()
    ]
    if changed:
        raise ImmutableVersionError(
            f"{type(target).__name__} {target.business_key} v{target.version} is immutable; "
            f"attempted to change {', '.join(sorted(changed))}"
        )
