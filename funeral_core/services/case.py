from datetime import date

from sqlalchemy.orm import Session

from funeral_core.db.models.case import Case as CaseModel
from funeral_core.domain.validators import validate_case
from funeral_core.repositories.case import case_repo
from funeral_core.services.versioning import VersionLifecycleManager

cases = VersionLifecycleManager(case_repo, validate_case, entity_name="Case")


def create_case(
    db: Session,
    tenant_id: str,
    actor: str,
    decedent_name: str,
    case_type: str = "at_need",
    status: str = "inquiry",
    service_date: date | None = None,
    amount: int = 0,
    business_key: str | None = None,
) -> CaseModel:
    """Open a new case at version 1."""
    payload = {
        "decedent_name": decedent_name.strip() if decedent_name else decedent_name,
        "case_type": case_type,
        "status": status,
        "service_date": service_date,
        "amount": amount,
    }
    return cases.create_initial(db, tenant_id, payload, actor, business_key=business_key)


def update_case(
    db: Session,
    business_key: str,
    actor: str,
    expected_version: int | None = None,
    **update_fields,
) -> CaseModel:
    """
    Record a new version of a case.

    Only fields explicitly provided in update_fields change.
    To clear a field (set to None), explicitly include it with None value.
    """
    if isinstance(update_fields.get("decedent_name"), str):
        update_fields["decedent_name"] = update_fields["decedent_name"].strip()
    return cases.create_new_version(
        db, business_key, update_fields, actor, expected_version=expected_version
    )


def delete_case(
    db: Session, business_key: str, actor: str, expected_version: int | None = None
) -> None:
    cases.soft_delete(db, business_key, actor, expected_version=expected_version)


def list_cases(
    db: Session,
    tenant_id: str,
    page: int = 1,
    page_size: int = 100,
    status: str | None = None,
    case_type: str | None = None,
) -> tuple[list[CaseModel], int]:
    """List current cases of a tenant, optionally filtered by status and case type."""
    criteria = []
    if status is not None:
        criteria.append(CaseModel.status == status)
    if case_type is not None:
        criteria.append(CaseModel.case_type == case_type)
    return cases.list_current(db, tenant_id, *criteria, page=page, page_size=page_size)
