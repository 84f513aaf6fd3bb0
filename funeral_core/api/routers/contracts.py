from datetime import datetime

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from funeral_core.api.deps import get_actor, get_db
from funeral_core.schemas.contract import (
    Contract,
    ContractCreate,
    ContractStatus,
    ContractUpdate,
)
from funeral_core.schemas.pagination import PaginatedResponse
from funeral_core.services.contract import (
    contracts,
    create_contract,
    delete_contract,
    list_contracts,
    update_contract,
)

router = APIRouter(prefix="/contracts", tags=["contracts"])


@router.post("", response_model=Contract, status_code=status.HTTP_201_CREATED)
def create_new_contract(
    contract_data: ContractCreate,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    """
    Create a new contract for an existing case of the same tenant.
    """
    contract = create_contract(db, actor=actor, **contract_data.model_dump())
    return Contract.model_validate(contract)


@router.get("", response_model=PaginatedResponse[Contract])
def get_current_contracts(
    tenant_id: str = Query(..., min_length=1),
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(100, ge=1, le=1000, description="Number of items per page"),
    case: str | None = Query(None, description="Filter contracts by case business key"),
    contract_status: ContractStatus | None = Query(None, alias="status"),
    db: Session = Depends(get_db),
):
    items, total = list_contracts(
        db,
        tenant_id,
        page=page,
        page_size=page_size,
        case_business_key=case,
        status=contract_status,
    )
    return PaginatedResponse(
        items=[Contract.model_validate(contract) for contract in items],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/versions/{version_id}", response_model=Contract)
def get_contract_version(version_id: int, db: Session = Depends(get_db)):
    return Contract.model_validate(contracts.get_by_id(db, version_id))


@router.get("/{business_key}", response_model=Contract)
def get_contract(business_key: str, db: Session = Depends(get_db)):
    return Contract.model_validate(contracts.get_current(db, business_key))


@router.get("/{business_key}/history", response_model=list[Contract])
def get_contract_history(business_key: str, db: Session = Depends(get_db)):
    return [
        Contract.model_validate(contract)
        for contract in contracts.get_history(db, business_key)
    ]


@router.get("/{business_key}/as-of", response_model=Contract)
def get_contract_as_of(
    business_key: str,
    at: datetime = Query(..., description="Instant to reconstruct (ISO 8601)"),
    db: Session = Depends(get_db),
):
    return Contract.model_validate(contracts.get_as_of(db, business_key, at))


@router.put("/{business_key}", response_model=Contract)
def update_contract_by_key(
    business_key: str,
    contract_data: ContractUpdate,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    """
    Record a new version of a contract.

    Signed and cancelled contracts reject further changes.
    """
    update_data = contract_data.model_dump(exclude_unset=True)
    expected_version = update_data.pop("expected_version", None)
    contract = update_contract(
        db, business_key, actor=actor, expected_version=expected_version, **update_data
    )
    return Contract.model_validate(contract)


@router.delete("/{business_key}", status_code=status.HTTP_204_NO_CONTENT)
def delete_contract_by_key(
    business_key: str,
    expected_version: int | None = Query(None, ge=1),
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    delete_contract(db, business_key, actor=actor, expected_version=expected_version)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
