from sqlalchemy.orm import Session

from funeral_core.db.models.contract import Contract as ContractModel
from funeral_core.domain.validators import validate_contract
from funeral_core.errors import ConflictError, DomainValidationError
from funeral_core.repositories.contract import contract_repo
from funeral_core.services.case import cases
from funeral_core.services.versioning import VersionLifecycleManager

contracts = VersionLifecycleManager(contract_repo, validate_contract, entity_name="Contract")


def _check_case(db: Session, tenant_id: str, case_business_key: str) -> None:
    """Validate the case exists, is current and belongs to the same tenant."""
    case = cases.get_current(db, case_business_key)
    if case.tenant_id != tenant_id:
        raise DomainValidationError(
            f"Case {case_business_key} does not belong to tenant {tenant_id}"
        )


def create_contract(
    db: Session,
    tenant_id: str,
    actor: str,
    case_business_key: str,
    status: str = "draft",
    total_amount: int = 0,
    terms: str | None = None,
    business_key: str | None = None,
) -> ContractModel:
    """
    Create a new contract with business logic validation.

    - Validates the case exists and belongs to the tenant
    """
    _check_case(db, tenant_id, case_business_key)
    payload = {
        "case_business_key": case_business_key,
        "status": status,
        "total_amount": total_amount,
        "terms": terms,
    }
    return contracts.create_initial(db, tenant_id, payload, actor, business_key=business_key)


def update_contract(
    db: Session,
    business_key: str,
    actor: str,
    expected_version: int | None = None,
    **update_fields,
) -> ContractModel:
    """
    Record a new version of a contract.

    - Validates the case exists if case_business_key is being changed
    - Signed and cancelled contracts accept no further changes
    - The write is pinned to the version whose status was checked, so a
      concurrent signing turns into a ConflictError instead of being overwritten
    """
    existing = contracts.get_current(db, business_key)
    if expected_version is not None and existing.version != expected_version:
        raise ConflictError(
            f"Contract {business_key} is at version {existing.version}, expected {expected_version}",
            business_key=business_key,
            expected_version=expected_version,
        )
    if existing.status in ("fully_signed", "cancelled") and update_fields:
        raise DomainValidationError(
            f"Contract {business_key} is {existing.status} and cannot be changed"
        )
    if update_fields.get("case_business_key") is not None:
        _check_case(db, existing.tenant_id, update_fields["case_business_key"])

    return contracts.create_new_version(
        db, business_key, update_fields, actor, expected_version=existing.version
    )


def delete_contract(
    db: Session, business_key: str, actor: str, expected_version: int | None = None
) -> None:
    contracts.soft_delete(db, business_key, actor, expected_version=expected_version)


def list_contracts(
    db: Session,
    tenant_id: str,
    page: int = 1,
    page_size: int = 100,
    case_business_key: str | None = None,
    status: str | None = None,
) -> tuple[list[ContractModel], int]:
    criteria = []
    if case_business_key is not None:
        criteria.append(ContractModel.case_business_key == case_business_key)
    if status is not None:
        criteria.append(ContractModel.status == status)
    return contracts.list_current(db, tenant_id, *criteria, page=page, page_size=page_size)
