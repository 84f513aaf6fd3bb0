"""Data access for append-only versioned tables.

Pure data access: no validation and no transaction boundaries. The lifecycle
manager decides when to commit or roll back.
"""

from datetime import datetime
from typing import Generic, TypeVar

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from funeral_core.domain.validity import ValidityInterval
from funeral_core.domain.versioned_record import check_record_shape

ModelT = TypeVar("ModelT")


class VersionedRepository(Generic[ModelT]):
    def __init__(self, model: type[ModelT]):
        self.model = model

    # ------------------------------------------------------------------
    # Current state
    # ------------------------------------------------------------------

    def get_current(self, db: Session, business_key: str) -> ModelT | None:
        """Get the open version for a business key."""
        Model = self.model
        return (
            db.query(Model)
            .filter(Model.business_key == business_key, Model.is_current.is_(True))
            .first()
        )

    def get_by_id(self, db: Session, row_id: int) -> ModelT | None:
        """Get a specific version row by its own id, current or not."""
        return db.query(self.model).filter(self.model.id == row_id).first()

    def find_current_paginated(
        self,
        db: Session,
        tenant_id: str,
        *criteria,
        page: int = 1,
        page_size: int = 100,
    ) -> tuple[list[ModelT], int]:
        """
        Get current rows of one tenant with pagination and optional filters.

        Args:
            tenant_id: Tenant whose rows are scanned
            *criteria: Extra SQLAlchemy filter expressions on the model
            page: Page number (1-indexed)
            page_size: Number of items per page

        Returns:
            Tuple of (list of current rows, total count)
        """
        Model = self.model
        query = db.query(Model).filter(
            Model.tenant_id == tenant_id,
            Model.is_current.is_(True),
        )
        if criteria:
            query = query.filter(*criteria)

        total = query.count()
        skip = (page - 1) * page_size
        rows = (
            query.order_by(Model.valid_from.desc(), Model.id.desc())
            .offset(skip)
            .limit(page_size)
            .all()
        )
        return rows, total

    def find_all_current(self, db: Session) -> list[ModelT]:
        """Get every open version across all tenants."""
        Model = self.model
        return (
            db.query(Model)
            .filter(Model.is_current.is_(True))
            .order_by(Model.tenant_id, Model.business_key)
            .all()
        )

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def get_history(self, db: Session, business_key: str) -> list[ModelT]:
        """Get all versions of a business key, oldest first."""
        Model = self.model
        return (
            db.query(Model)
            .filter(Model.business_key == business_key)
            .order_by(Model.version.asc())
            .all()
        )

    def get_as_of(self, db: Session, business_key: str, as_of: datetime) -> ModelT | None:
        """Get the version whose [valid_from, valid_to) interval contains as_of."""
        Model = self.model
        interval = ValidityInterval(as_of=as_of)
        return (
            db.query(Model)
            .filter(
                Model.business_key == business_key,
                interval.sqlalchemy_contains_predicate(
                    from_col=Model.valid_from,
                    to_col=Model.valid_to,
                ),
            )
            .order_by(Model.version.desc())
            .first()
        )

    def get_latest_version(self, db: Session, business_key: str) -> int | None:
        """Get the highest version number ever written for a business key."""
        return (
            db.query(func.max(self.model.version))
            .filter(self.model.business_key == business_key)
            .scalar()
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def add_version(
        self,
        db: Session,
        *,
        business_key: str,
        tenant_id: str,
        version: int,
        valid_from: datetime,
        created_at: datetime,
        created_by: str,
        updated_by: str | None,
        payload: dict,
    ) -> ModelT:
        """Stage a new open version row. Flushes so constraint violations surface here."""
        check_record_shape(version=version, valid_from=valid_from, valid_to=None, is_current=True)
        row = self.model(
            business_key=business_key,
            tenant_id=tenant_id,
            version=version,
            valid_from=valid_from,
            valid_to=None,
            is_current=True,
            created_at=created_at,
            created_by=created_by,
            updated_by=updated_by,
            **payload,
        )
        db.add(row)
        db.flush()
        return row

    def close_current(
        self,
        db: Session,
        business_key: str,
        expected_version: int,
        closed_at: datetime,
    ) -> bool:
        """Compare-and-swap close of the open version.

        Only succeeds when the open version is still ``expected_version``.
        Returns False when another writer got there first.
        """
        Model = self.model
        result = db.execute(
            update(Model)
            .where(
                Model.business_key == business_key,
                Model.version == expected_version,
                Model.is_current.is_(True),
            )
            .values(valid_to=closed_at, is_current=False)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
