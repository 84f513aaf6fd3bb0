from datetime import datetime

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from funeral_core.api.deps import get_actor, get_db
from funeral_core.schemas.case import Case, CaseCreate, CaseStatus, CaseType, CaseUpdate
from funeral_core.schemas.pagination import PaginatedResponse
from funeral_core.services.case import cases, create_case, delete_case, list_cases, update_case

router = APIRouter(prefix="/cases", tags=["cases"])


@router.post("", response_model=Case, status_code=status.HTTP_201_CREATED)
def create_new_case(
    case_data: CaseCreate,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    """
    Open a new case at version 1.
    """
    case = create_case(db, actor=actor, **case_data.model_dump())
    return Case.model_validate(case)


@router.get("", response_model=PaginatedResponse[Case])
def get_current_cases(
    tenant_id: str = Query(..., min_length=1, description="Funeral home whose cases are listed"),
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(100, ge=1, le=1000, description="Number of items per page"),
    case_status: CaseStatus | None = Query(None, alias="status", description="Filter by status"),
    case_type: CaseType | None = Query(None, description="Filter by case type"),
    db: Session = Depends(get_db),
):
    """
    List the current version of every case of a tenant. Historical versions are never listed.
    """
    items, total = list_cases(
        db,
        tenant_id,
        page=page,
        page_size=page_size,
        status=case_status,
        case_type=case_type,
    )
    return PaginatedResponse(
        items=[Case.model_validate(case) for case in items],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/versions/{version_id}", response_model=Case)
def get_case_version(version_id: int, db: Session = Depends(get_db)):
    """Get one specific version row, current or historical."""
    return Case.model_validate(cases.get_by_id(db, version_id))


@router.get("/{business_key}", response_model=Case)
def get_case(business_key: str, db: Session = Depends(get_db)):
    """Get the current version of a case."""
    return Case.model_validate(cases.get_current(db, business_key))


@router.get("/{business_key}/history", response_model=list[Case])
def get_case_history(business_key: str, db: Session = Depends(get_db)):
    """Get every version of a case, oldest first, including a deleted case's last version."""
    return [Case.model_validate(case) for case in cases.get_history(db, business_key)]


@router.get("/{business_key}/as-of", response_model=Case)
def get_case_as_of(
    business_key: str,
    at: datetime = Query(..., description="Instant to reconstruct (ISO 8601)"),
    db: Session = Depends(get_db),
):
    """Get the version of a case that was current at the given instant."""
    return Case.model_validate(cases.get_as_of(db, business_key, at))


@router.put("/{business_key}", response_model=Case)
def update_case_by_key(
    business_key: str,
    case_data: CaseUpdate,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    """
    Record a new version of a case.

    Fields not included in the request are carried over from the current version.
    Send expected_version to fail with 409 if someone else changed the case first.
    """
    update_data = case_data.model_dump(exclude_unset=True)
    expected_version = update_data.pop("expected_version", None)
    case = update_case(
        db, business_key, actor=actor, expected_version=expected_version, **update_data
    )
    return Case.model_validate(case)


@router.delete("/{business_key}", status_code=status.HTTP_204_NO_CONTENT)
def delete_case_by_key(
    business_key: str,
    expected_version: int | None = Query(None, ge=1),
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    """Soft delete a case. Its history is kept."""
    delete_case(db, business_key, actor=actor, expected_version=expected_version)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
