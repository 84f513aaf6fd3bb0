"""Version lifecycle for append-only records.

Every write follows the same shape: load the current version, validate,
then either insert version 1, or close the current version and insert its
successor in a single transaction. Closing uses a compare-and-swap on
``(business_key, expected_version)`` so two writers racing on the same key
can never both succeed.
"""

import logging
import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Generic, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from funeral_core.core.config import settings
from funeral_core.domain.validity import to_storage_time, transition_time, utcnow
from funeral_core.errors import (
    ConflictError,
    DomainValidationError,
    DuplicateResourceError,
    NotFoundError,
    PersistenceError,
    RecordDeletedError,
)
from funeral_core.repositories.versioned import VersionedRepository

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")

Validator = Callable[[dict], None]


@contextmanager
def persistence_guard(db: Session, action: str) -> Iterator[None]:
    """Translate storage failures into PersistenceError, leaving nothing applied."""
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Storage failure while trying to %s: %s", action, e)
        raise PersistenceError(f"Failed to {action}") from e


class VersionLifecycleManager(Generic[ModelT]):
    """Creates, versions and soft deletes records of one entity type.

    ``validator`` receives the complete payload about to be written and
    raises DomainValidationError. It is the only entity-specific rule the
    manager knows about.
    """

    def __init__(
        self,
        repo: VersionedRepository[ModelT],
        validator: Validator | None = None,
        *,
        entity_name: str,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.repo = repo
        self.model = repo.model
        self.validator = validator
        self.entity_name = entity_name
        self.clock = clock

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_initial(
        self,
        db: Session,
        tenant_id: str,
        payload: dict,
        actor: str,
        business_key: str | None = None,
    ) -> ModelT:
        """Create version 1 of a new record.

        - Assigns a business key when none is given
        - Fails if the key already has a current version
        - Fails if the key belongs to a soft-deleted record (deleted records are terminal)
        """
        self._check_fields(payload)
        self._validate(payload)
        business_key = business_key or str(uuid.uuid4())

        with persistence_guard(db, f"create {self.entity_name}"):
            latest = self.repo.get_latest_version(db, business_key)
            if latest is not None:
                if self.repo.get_current(db, business_key) is not None:
                    raise DuplicateResourceError(
                        f"{self.entity_name} {business_key} already exists"
                    )
                raise RecordDeletedError(
                    f"{self.entity_name} {business_key} was deleted and cannot be recreated"
                )

            now = self.clock()
            try:
                row = self.repo.add_version(
                    db,
                    business_key=business_key,
                    tenant_id=tenant_id,
                    version=1,
                    valid_from=now,
                    created_at=now,
                    created_by=actor,
                    updated_by=actor,
                    payload=payload,
                )
                db.commit()
            except IntegrityError as e:
                db.rollback()
                # A concurrent create_initial may have inserted the same key first
                if self.repo.get_latest_version(db, business_key) is not None:
                    raise DuplicateResourceError(
                        f"{self.entity_name} {business_key} already exists"
                    ) from e
                logger.error("Failed to insert %s %s: %s", self.entity_name, business_key, e)
                raise PersistenceError(f"Failed to create {self.entity_name}") from e
            db.refresh(row)

        logger.info("Created %s %s v1 for tenant %s", self.entity_name, business_key, tenant_id)
        return row

    def create_new_version(
        self,
        db: Session,
        business_key: str,
        patch: dict,
        actor: str,
        expected_version: int | None = None,
    ) -> ModelT:
        """
        Close the current version and open its successor with ``patch`` merged in.

        Only keys present in ``patch`` change; an explicit None clears a nullable
        field. Raises NotFoundError when there is no current version and
        ConflictError when another writer closed it first (or when the current
        version differs from ``expected_version``).
        """
        self._check_fields(patch)

        with persistence_guard(db, f"version {self.entity_name}"):
            current = self.repo.get_current(db, business_key)
            if current is None:
                raise NotFoundError(f"{self.entity_name} {business_key} not found")
            if expected_version is not None and current.version != expected_version:
                raise ConflictError(
                    f"{self.entity_name} {business_key} is at version {current.version}, "
                    f"expected {expected_version}",
                    business_key=business_key,
                    expected_version=expected_version,
                )

            payload = current.payload()
            payload.update(patch)
            self._validate(payload)

            # Snapshot everything needed from the current row before the close
            # statement makes its in-session state stale.
            base_version = current.version
            tenant_id = current.tenant_id
            created_at = current.created_at
            created_by = current.created_by
            now = transition_time(self.clock(), current.valid_from)

            self._close(db, business_key, base_version, now)
            try:
                successor = self.repo.add_version(
                    db,
                    business_key=business_key,
                    tenant_id=tenant_id,
                    version=base_version + 1,
                    valid_from=now,
                    created_at=created_at,
                    created_by=created_by,
                    updated_by=actor,
                    payload=payload,
                )
                db.commit()
            except IntegrityError as e:
                db.rollback()
                self._log_conflict(business_key, base_version)
                raise ConflictError(
                    f"{self.entity_name} {business_key} was modified concurrently",
                    business_key=business_key,
                    expected_version=base_version,
                ) from e
            db.refresh(successor)

        logger.info(
            "Versioned %s %s v%d -> v%d by %s",
            self.entity_name,
            business_key,
            base_version,
            base_version + 1,
            actor,
        )
        return successor

    def soft_delete(
        self,
        db: Session,
        business_key: str,
        actor: str,
        expected_version: int | None = None,
    ) -> None:
        """Close the current version without opening a successor."""
        with persistence_guard(db, f"delete {self.entity_name}"):
            current = self.repo.get_current(db, business_key)
            if current is None:
                raise NotFoundError(f"{self.entity_name} {business_key} not found")
            if expected_version is not None and current.version != expected_version:
                raise ConflictError(
                    f"{self.entity_name} {business_key} is at version {current.version}, "
                    f"expected {expected_version}",
                    business_key=business_key,
                    expected_version=expected_version,
                )

            version = current.version
            now = transition_time(self.clock(), current.valid_from)
            self._close(db, business_key, version, now)
            db.commit()

        logger.info("Deleted %s %s at v%d by %s", self.entity_name, business_key, version, actor)

    def update_with_retry(
        self,
        db: Session,
        business_key: str,
        derive_patch: Callable[[ModelT], dict],
        actor: str,
        attempts: int | None = None,
    ) -> ModelT:
        """Apply a patch derived from the current version, reloading after conflicts.

        ``derive_patch`` is called again on every attempt with the freshly
        loaded current version, so a retry never reuses a stale expected
        version. The last ConflictError is re-raised once attempts run out.
        """
        if attempts is None:
            attempts = settings.conflict_retry_attempts
        if attempts < 1:
            raise DomainValidationError(f"attempts must be at least 1, got {attempts}")
        attempt = 1
        while True:
            db.expire_all()
            current = self.get_current(db, business_key)
            patch = derive_patch(current)
            try:
                return self.create_new_version(
                    db,
                    business_key,
                    patch,
                    actor,
                    expected_version=current.version,
                )
            except ConflictError:
                if attempt >= attempts:
                    raise
                logger.info(
                    "Retrying %s %s after conflict (attempt %d of %d)",
                    self.entity_name,
                    business_key,
                    attempt,
                    attempts,
                )
                attempt += 1

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def find_current(self, db: Session, business_key: str) -> ModelT | None:
        with persistence_guard(db, f"load {self.entity_name}"):
            return self.repo.get_current(db, business_key)

    def get_current(self, db: Session, business_key: str) -> ModelT:
        row = self.find_current(db, business_key)
        if row is None:
            raise NotFoundError(f"{self.entity_name} {business_key} not found")
        return row

    def get_by_id(self, db: Session, row_id: int) -> ModelT:
        with persistence_guard(db, f"load {self.entity_name} version"):
            row = self.repo.get_by_id(db, row_id)
        if row is None:
            raise NotFoundError(f"{self.entity_name} version {row_id} not found")
        return row

    def list_current(
        self,
        db: Session,
        tenant_id: str,
        *criteria,
        page: int = 1,
        page_size: int = 100,
    ) -> tuple[list[ModelT], int]:
        with persistence_guard(db, f"list {self.entity_name}"):
            return self.repo.find_current_paginated(
                db, tenant_id, *criteria, page=page, page_size=page_size
            )

    def get_history(self, db: Session, business_key: str) -> list[ModelT]:
        with persistence_guard(db, f"load {self.entity_name} history"):
            rows = self.repo.get_history(db, business_key)
        if not rows:
            raise NotFoundError(f"{self.entity_name} {business_key} not found")
        return rows

    def find_as_of(self, db: Session, business_key: str, as_of: datetime) -> ModelT | None:
        with persistence_guard(db, f"load {self.entity_name} as of {as_of}"):
            return self.repo.get_as_of(db, business_key, to_storage_time(as_of))

    def get_as_of(self, db: Session, business_key: str, as_of: datetime) -> ModelT:
        row = self.find_as_of(db, business_key, as_of)
        if row is None:
            raise NotFoundError(
                f"{self.entity_name} {business_key} had no version at {as_of.isoformat()}"
            )
        return row

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _close(self, db: Session, business_key: str, version: int, closed_at: datetime) -> None:
        if not self.repo.close_current(db, business_key, version, closed_at):
            db.rollback()
            self._log_conflict(business_key, version)
            raise ConflictError(
                f"{self.entity_name} {business_key} v{version} is no longer current",
                business_key=business_key,
                expected_version=version,
            )

    def _log_conflict(self, business_key: str, version: int) -> None:
        logger.warning(
            "Conflict on %s %s: v%d was closed by another writer",
            self.entity_name,
            business_key,
            version,
        )

    def _check_fields(self, data: dict) -> None:
        unknown = set(data) - set(self.model.__payload_fields__)
        if unknown:
            raise DomainValidationError(
                f"Unknown {self.entity_name} fields: {', '.join(sorted(unknown))}"
            )

    def _validate(self, payload: dict) -> None:
        if self.validator is not None:
            self.validator(payload)
