from sqlalchemy import Boolean, Column, Float, Integer, String, Text

from funeral_core.db.base import Base
from funeral_core.db.models.versioned import VersionedMixin


class PolicyMixin(VersionedMixin):
    """A tenant-scoped versioned configuration record.

    The business key is the tenant id: one version chain per tenant and
    policy category.
    """

    __parameter_fields__: tuple[str, ...] = ()

    reason = Column(Text, nullable=True)

    @property
    def is_default(self) -> bool:
        """True for the built-in preset handed out to unconfigured tenants."""
        return self.id is None

    def parameters(self) -> dict:
        return {field: getattr(self, field) for field in self.__parameter_fields__}


class ContactManagementPolicy(PolicyMixin, Base):
    __tablename__ = "contact_management_policies"
    __parameter_fields__ = (
        "min_duplicate_similarity_threshold",
        "name_weight",
        "email_weight",
        "phone_weight",
        "merge_field_precedence",
        "is_merge_approval_required",
        "merge_retention_days",
        "merge_family_relationships_automatic",
        "ignore_duplicates_older_than_days",
        "ignore_merged_contacts_in_search",
        "max_duplicates_per_search",
    )
    __payload_fields__ = __parameter_fields__ + ("reason",)

    # Duplicate detection
    min_duplicate_similarity_threshold = Column(Integer, nullable=False)
    name_weight = Column(Integer, nullable=False)
    email_weight = Column(Integer, nullable=False)
    phone_weight = Column(Integer, nullable=False)

    # Merge
    merge_field_precedence = Column(String(32), nullable=False)
    is_merge_approval_required = Column(Boolean, nullable=False)
    merge_retention_days = Column(Integer, nullable=False)
    merge_family_relationships_automatic = Column(Boolean, nullable=False)

    # Deduplication
    ignore_duplicates_older_than_days = Column(Integer, nullable=False)
    ignore_merged_contacts_in_search = Column(Boolean, nullable=False)
    max_duplicates_per_search = Column(Integer, nullable=False)


class PaymentManagementPolicy(PolicyMixin, Base):
    __tablename__ = "payment_management_policies"
    __parameter_fields__ = (
        "require_approval_above_amount",
        "auto_approve_up_to_amount",
        "max_check_age_days",
        "allow_refunds",
        "max_refund_days",
        "refund_approval_threshold",
        "max_ach_retries",
        "mark_overdue_after_days",
        "interest_rate",
    )
    __payload_fields__ = __parameter_fields__ + ("reason",)

    # Approval thresholds, whole currency units
    require_approval_above_amount = Column(Integer, nullable=False)
    auto_approve_up_to_amount = Column(Integer, nullable=False)

    max_check_age_days = Column(Integer, nullable=False)

    # Refunds
    allow_refunds = Column(Boolean, nullable=False)
    max_refund_days = Column(Integer, nullable=False)
    refund_approval_threshold = Column(Integer, nullable=False)

    max_ach_retries = Column(Integer, nullable=False)
    mark_overdue_after_days = Column(Integer, nullable=False)
    # Annual rate applied to overdue balances
    interest_rate = Column(Float, nullable=False)
