from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from funeral_core.api.deps import get_actor, get_db
from funeral_core.errors import DomainValidationError
from funeral_core.schemas.policy import (
    ContactManagementParameters,
    ContactManagementPolicy,
    ParameterValue,
    PaymentManagementParameters,
    PaymentManagementPolicy,
    PolicyConfigure,
    PolicyReset,
    PolicyUpdate,
)
from funeral_core.services.policy import (
    PolicyResolutionEngine,
    contact_management_policies,
    payment_management_policies,
)


def _parse_parameters(schema: type[BaseModel], raw: dict) -> dict:
    """Validate raw parameter overrides against the category's schema."""
    try:
        return schema.model_validate(raw).model_dump(exclude_unset=True)
    except ValidationError as e:
        raise DomainValidationError(f"Invalid policy parameters: {e}") from e


def build_policy_router(
    engine: PolicyResolutionEngine,
    schema: type[BaseModel],
    parameters_schema: type[BaseModel],
) -> APIRouter:
    """Build the routes for one policy category under /tenants/{tenant_id}/policies/."""
    router = APIRouter(
        prefix=f"/tenants/{{tenant_id}}/policies/{engine.category}",
        tags=["policies"],
    )

    @router.get("", response_model=schema)
    def get_current_policy(tenant_id: str, db: Session = Depends(get_db)):
        """
        Get the tenant's current policy. Never 404: unconfigured tenants get
        the default preset with is_default set.
        """
        return schema.model_validate(engine.find_current_policy(db, tenant_id))

    @router.post("", response_model=schema, status_code=status.HTTP_201_CREATED)
    def configure_policy(
        tenant_id: str,
        body: PolicyConfigure,
        db: Session = Depends(get_db),
        actor: str = Depends(get_actor),
    ):
        """Configure the tenant's first policy version from a preset plus overrides."""
        policy = engine.configure(
            db,
            tenant_id,
            actor,
            parameters=_parse_parameters(parameters_schema, body.parameters),
            reason=body.reason,
            preset=body.preset,
        )
        return schema.model_validate(policy)

    @router.put("", response_model=schema)
    def update_policy(
        tenant_id: str,
        body: PolicyUpdate,
        db: Session = Depends(get_db),
        actor: str = Depends(get_actor),
    ):
        """Record a new policy version. Every change needs a reason."""
        policy = engine.update_policy(
            db,
            tenant_id,
            actor,
            parameters=_parse_parameters(parameters_schema, body.parameters),
            reason=body.reason,
            expected_version=body.expected_version,
        )
        return schema.model_validate(policy)

    @router.post("/reset", response_model=schema)
    def reset_policy(
        tenant_id: str,
        body: PolicyReset,
        db: Session = Depends(get_db),
        actor: str = Depends(get_actor),
    ):
        """Record a new policy version carrying every value of a preset."""
        policy = engine.reset_to_preset(
            db,
            tenant_id,
            actor,
            preset=body.preset,
            reason=body.reason,
            expected_version=body.expected_version,
        )
        return schema.model_validate(policy)

    @router.get("/history", response_model=list[schema])
    def get_policy_history(tenant_id: str, db: Session = Depends(get_db)):
        return [schema.model_validate(policy) for policy in engine.get_history(db, tenant_id)]

    @router.get("/as-of", response_model=schema)
    def get_policy_as_of(
        tenant_id: str,
        at: datetime = Query(..., description="Instant to reconstruct (ISO 8601)"),
        db: Session = Depends(get_db),
    ):
        """Get the policy that governed decisions at the given instant."""
        return schema.model_validate(engine.find_policy_as_of(db, tenant_id, at))

    @router.get("/parameters/{name}", response_model=ParameterValue)
    def get_policy_parameter(tenant_id: str, name: str, db: Session = Depends(get_db)):
        policy = engine.find_current_policy(db, tenant_id)
        return ParameterValue(
            tenant_id=tenant_id,
            name=name,
            value=engine.resolve_parameter(db, tenant_id, name),
            is_default=policy.is_default,
        )

    return router


contact_management_router = build_policy_router(
    contact_management_policies, ContactManagementPolicy, ContactManagementParameters
)
payment_management_router = build_policy_router(
    payment_management_policies, PaymentManagementPolicy, PaymentManagementParameters
)

presets_router = APIRouter(prefix="/policies/presets", tags=["policies"])


@presets_router.get("/contact-management", response_model=dict[str, dict])
def get_contact_management_presets():
    return contact_management_policies.list_presets()


@presets_router.get("/payment-management", response_model=dict[str, dict])
def get_payment_management_presets():
    return payment_management_policies.list_presets()
