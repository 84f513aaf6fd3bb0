from typing import Literal

from pydantic import BaseModel, Field

from funeral_core.schemas.versioned import VersionedRecord, VersionedUpdate

ContractStatus = Literal["draft", "pending_signature", "fully_signed", "cancelled"]


class Contract(VersionedRecord):
    case_business_key: str
    status: ContractStatus
    total_amount: int
    terms: str | None = None


class ContractCreate(BaseModel):
    tenant_id: str = Field(..., min_length=1, max_length=64)
    business_key: str | None = Field(None, min_length=1, max_length=64)
    case_business_key: str = Field(..., min_length=1, max_length=64)
    status: ContractStatus = "draft"
    total_amount: int = Field(0, ge=0, description="Total in cents")
    terms: str | None = None


class ContractUpdate(VersionedUpdate):
    case_business_key: str | None = Field(None, min_length=1, max_length=64)
    status: ContractStatus | None = None
    total_amount: int | None = Field(None, ge=0, description="Total in cents")
    terms: str | None = None
