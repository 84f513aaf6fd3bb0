from datetime import date
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from funeral_core.schemas.versioned import VersionedRecord, VersionedUpdate

CaseType = Literal["at_need", "pre_need", "inquiry"]
CaseStatus = Literal["inquiry", "active", "completed", "archived"]


class Case(VersionedRecord):
    decedent_name: str
    case_type: CaseType
    status: CaseStatus
    service_date: date | None = None
    amount: int


class CaseCreate(BaseModel):
    tenant_id: str = Field(..., min_length=1, max_length=64)
    business_key: str | None = Field(None, min_length=1, max_length=64)
    decedent_name: str = Field(..., min_length=1, max_length=255)
    case_type: CaseType = "at_need"
    status: CaseStatus = "inquiry"
    service_date: date | None = None
    amount: int = Field(0, ge=0, description="Amount in cents")

    @field_validator("decedent_name")
    @classmethod
    def validate_decedent_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("decedent_name cannot be blank")
        return v.strip()


class CaseUpdate(VersionedUpdate):
    decedent_name: str | None = Field(None, min_length=1, max_length=255)
    case_type: CaseType | None = None
    status: CaseStatus | None = None
    service_date: date | None = None
    amount: int | None = Field(None, ge=0, description="Amount in cents")
