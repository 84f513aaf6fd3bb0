from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class PolicyRecord(BaseModel):
    """Resolved policy. Audit fields are null when ``is_default`` is true."""

    model_config = ConfigDict(from_attributes=True)

    id: int | None = None
    business_key: str
    tenant_id: str
    version: int | None = None
    valid_from: datetime | None = None
    valid_to: datetime | None = None
    is_current: bool
    created_at: datetime | None = None
    created_by: str | None = None
    updated_by: str | None = None
    reason: str | None = None
    is_default: bool


class ContactManagementParameters(BaseModel):
    model_config = ConfigDict(extra="forbid")

    min_duplicate_similarity_threshold: int | None = Field(None, ge=0, le=100)
    name_weight: int | None = Field(None, ge=0, le=100)
    email_weight: int | None = Field(None, ge=0, le=100)
    phone_weight: int | None = Field(None, ge=0, le=100)
    merge_field_precedence: Literal["newest", "mostRecent", "preferNonNull"] | None = None
    is_merge_approval_required: bool | None = None
    merge_retention_days: int | None = Field(None, ge=0)
    merge_family_relationships_automatic: bool | None = None
    ignore_duplicates_older_than_days: int | None = Field(None, ge=0)
    ignore_merged_contacts_in_search: bool | None = None
    max_duplicates_per_search: int | None = Field(None, ge=1)


class PaymentManagementParameters(BaseModel):
    model_config = ConfigDict(extra="forbid")

    require_approval_above_amount: int | None = Field(None, ge=0)
    auto_approve_up_to_amount: int | None = Field(None, ge=0)
    max_check_age_days: int | None = Field(None, ge=0)
    allow_refunds: bool | None = None
    max_refund_days: int | None = Field(None, ge=0)
    refund_approval_threshold: int | None = Field(None, ge=0)
    max_ach_retries: int | None = Field(None, ge=0)
    mark_overdue_after_days: int | None = Field(None, ge=0)
    interest_rate: float | None = Field(None, ge=0, le=0.3)


class ContactManagementPolicy(PolicyRecord):
    min_duplicate_similarity_threshold: int
    name_weight: int
    email_weight: int
    phone_weight: int
    merge_field_precedence: str
    is_merge_approval_required: bool
    merge_retention_days: int
    merge_family_relationships_automatic: bool
    ignore_duplicates_older_than_days: int
    ignore_merged_contacts_in_search: bool
    max_duplicates_per_search: int


class PaymentManagementPolicy(PolicyRecord):
    require_approval_above_amount: int
    auto_approve_up_to_amount: int
    max_check_age_days: int
    allow_refunds: bool
    max_refund_days: int
    refund_approval_threshold: int
    max_ach_retries: int
    mark_overdue_after_days: int
    interest_rate: float


class PolicyConfigure(BaseModel):
    """First configuration of a tenant's policy: a preset plus overrides."""

    preset: str | None = Field(None, description="STANDARD, STRICT or PERMISSIVE")
    parameters: dict = Field(default_factory=dict)
    reason: str | None = Field(None, max_length=2000)


class PolicyUpdate(BaseModel):
    parameters: dict = Field(default_factory=dict)
    reason: str = Field(..., min_length=1, max_length=2000)
    expected_version: int | None = Field(None, ge=1)

    @model_validator(mode="after")
    def validate_parameters_present(self):
        """An update must change at least one parameter."""
        if not self.parameters:
            raise ValueError("parameters cannot be empty")
        return self


class PolicyReset(BaseModel):
    preset: str = Field(..., min_length=1)
    reason: str | None = Field(None, max_length=2000)
    expected_version: int | None = Field(None, ge=1)


class ParameterValue(BaseModel):
    tenant_id: str
    name: str
    value: int | float | bool | str
    is_default: bool
