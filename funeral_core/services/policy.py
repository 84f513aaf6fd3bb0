"""Per-tenant policy resolution.

A policy is just another versioned record whose business key is the tenant
id. Resolution never fails: a tenant that never configured a category is
governed by the default preset, handed out as a transient, never persisted
instance so consumers do not need to null-check.

Once configured, a policy is never closed without a successor: tenants
return to preset values through reset_to_preset.
"""

import logging
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any, Generic, TypeVar

from sqlalchemy.orm import Session

from funeral_core.core.config import settings
from funeral_core.db.models.policy import ContactManagementPolicy, PaymentManagementPolicy
from funeral_core.domain.policy_presets import (
    CONTACT_MANAGEMENT_PRESETS,
    PAYMENT_MANAGEMENT_PRESETS,
    get_preset,
)
from funeral_core.domain.validators import (
    validate_contact_management_policy,
    validate_payment_management_policy,
)
from funeral_core.domain.validity import utcnow
from funeral_core.errors import DomainValidationError, NotFoundError
from funeral_core.repositories.versioned import VersionedRepository
from funeral_core.services.versioning import VersionLifecycleManager, persistence_guard

logger = logging.getLogger(__name__)

PolicyT = TypeVar("PolicyT")


class PolicyResolutionEngine(Generic[PolicyT]):
    def __init__(
        self,
        model: type[PolicyT],
        presets: Mapping[str, Mapping[str, Any]],
        validator: Callable[[dict], None],
        *,
        category: str,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.model = model
        self.presets = presets
        self.category = category
        self.repo = VersionedRepository(model)
        self.lifecycle = VersionLifecycleManager(
            self.repo,
            validator,
            entity_name=f"{category} policy",
            clock=clock,
        )

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def default_policy(self, tenant_id: str, preset: str | None = None) -> PolicyT:
        """Build the transient preset policy for a tenant. Never added to a session."""
        name = (preset or settings.default_policy_preset).upper()
        return self.model(
            business_key=tenant_id,
            tenant_id=tenant_id,
            is_current=True,
            reason=f"Default {name} preset",
            **get_preset(self.presets, name),
        )

    def find_current_policy(self, db: Session, tenant_id: str) -> PolicyT:
        """Return the tenant's current policy, or the default preset."""
        policy = self.lifecycle.find_current(db, tenant_id)
        if policy is None:
            logger.debug("No %s policy for tenant %s, using default", self.category, tenant_id)
            return self.default_policy(tenant_id)
        return policy

    def resolve_parameter(self, db: Session, tenant_id: str, name: str) -> Any:
        """Read a single parameter off the resolved policy."""
        if name not in self.model.__parameter_fields__:
            raise DomainValidationError(f"Unknown {self.category} policy parameter '{name}'")
        return getattr(self.find_current_policy(db, tenant_id), name)

    def find_policy_as_of(self, db: Session, tenant_id: str, as_of: datetime) -> PolicyT:
        """Return the policy that governed decisions at ``as_of``.

        Falls back to the default preset for instants before the first
        configuration.
        """
        policy = self.lifecycle.find_as_of(db, tenant_id, as_of)
        if policy is None:
            return self.default_policy(tenant_id)
        return policy

    def get_history(self, db: Session, tenant_id: str) -> list[PolicyT]:
        return self.lifecycle.get_history(db, tenant_id)

    def list_current_policies(self, db: Session) -> list[PolicyT]:
        """Current policy of every tenant that configured this category."""
        with persistence_guard(db, f"list {self.category} policies"):
            return self.repo.find_all_current(db)

    def list_presets(self) -> dict[str, dict]:
        return {name: dict(params) for name, params in self.presets.items()}

    # ------------------------------------------------------------------
    # Changes. Every change is a new audited version.
    # ------------------------------------------------------------------

    def configure(
        self,
        db: Session,
        tenant_id: str,
        actor: str,
        parameters: dict | None = None,
        reason: str | None = None,
        preset: str | None = None,
    ) -> PolicyT:
        """Create the tenant's first policy version from a preset plus overrides."""
        self._check_parameters(parameters or {})
        name = (preset or settings.default_policy_preset).upper()
        payload = get_preset(self.presets, name)
        payload.update(parameters or {})
        payload["reason"] = reason or f"Initial configuration from {name} preset"
        return self.lifecycle.create_initial(db, tenant_id, payload, actor, business_key=tenant_id)

    def update_policy(
        self,
        db: Session,
        tenant_id: str,
        actor: str,
        parameters: dict,
        reason: str,
        expected_version: int | None = None,
    ) -> PolicyT:
        """Version the tenant's policy. A reason is mandatory for every change."""
        self._check_parameters(parameters)
        patch = dict(parameters)
        patch["reason"] = self._require_reason(reason)
        return self.lifecycle.create_new_version(
            db, tenant_id, patch, actor, expected_version=expected_version
        )

    def reset_to_preset(
        self,
        db: Session,
        tenant_id: str,
        actor: str,
        preset: str,
        reason: str | None = None,
        expected_version: int | None = None,
    ) -> PolicyT:
        """Version the tenant's policy with every parameter taken from a preset."""
        patch = get_preset(self.presets, preset)
        patch["reason"] = reason or f"Reset to {preset.upper()} preset"
        return self.lifecycle.create_new_version(
            db, tenant_id, patch, actor, expected_version=expected_version
        )

    def _check_parameters(self, parameters: dict) -> None:
        unknown = set(parameters) - set(self.model.__parameter_fields__)
        if unknown:
            raise DomainValidationError(
                f"Unknown {self.category} policy parameters: {', '.join(sorted(unknown))}"
            )

    @staticmethod
    def _require_reason(reason: str | None) -> str:
        if reason is None or not reason.strip():
            raise DomainValidationError("A reason is required for every policy change")
        return reason.strip()


contact_management_policies = PolicyResolutionEngine(
    ContactManagementPolicy,
    CONTACT_MANAGEMENT_PRESETS,
    validate_contact_management_policy,
    category="contact-management",
)

payment_management_policies = PolicyResolutionEngine(
    PaymentManagementPolicy,
    PAYMENT_MANAGEMENT_PRESETS,
    validate_payment_management_policy,
    category="payment-management",
)

POLICY_ENGINES = {
    engine.category: engine
    for engine in (contact_management_policies, payment_management_policies)
}


def get_policy_engine(category: str) -> PolicyResolutionEngine:
    engine = POLICY_ENGINES.get(category)
    if engine is None:
        raise NotFoundError(f"Unknown policy category '{category}'")
    return engine
