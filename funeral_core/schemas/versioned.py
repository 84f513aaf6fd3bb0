from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class VersionedRecord(BaseModel):
    """Audit columns every versioned entity exposes."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    business_key: str
    tenant_id: str
    version: int = Field(..., ge=1)
    valid_from: datetime
    valid_to: datetime | None = None
    is_current: bool
    created_at: datetime
    created_by: str
    updated_by: str | None = None


class VersionedUpdate(BaseModel):
    """Optional compare-and-swap guard sent along with any update."""

    expected_version: int | None = Field(
        None, ge=1, description="Fail with 409 unless this is still the current version"
    )
