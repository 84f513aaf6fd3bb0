"""Built-in policy presets.

Every tenant that has never configured a policy category is governed by one
of these (STANDARD unless configured otherwise), so consumers always get a
well-defined value.

- STANDARD: balanced defaults for a typical funeral home
- STRICT: conservative, approval-heavy
- PERMISSIVE: aggressive automation, few approvals
"""

from __future__ import annotations

from types import MappingProxyType

from funeral_core.errors import DomainValidationError

STANDARD = "STANDARD"
STRICT = "STRICT"
PERMISSIVE = "PERMISSIVE"

CONTACT_MANAGEMENT_PRESETS = MappingProxyType(
    {
        STANDARD: MappingProxyType(
            {
                "min_duplicate_similarity_threshold": 75,
                "name_weight": 40,
                "email_weight": 30,
                "phone_weight": 30,
                "merge_field_precedence": "mostRecent",
                "is_merge_approval_required": False,
                "merge_retention_days": 365,
                "merge_family_relationships_automatic": True,
                "ignore_duplicates_older_than_days": 730,
                "ignore_merged_contacts_in_search": True,
                "max_duplicates_per_search": 50,
            }
        ),
        STRICT: MappingProxyType(
            {
                "min_duplicate_similarity_threshold": 85,
                "name_weight": 50,
                "email_weight": 30,
                "phone_weight": 20,
                "merge_field_precedence": "newest",
                "is_merge_approval_required": True,
                # ~7 years, legal retention
                "merge_retention_days": 2555,
                "merge_family_relationships_automatic": False,
                "ignore_duplicates_older_than_days": 365,
                "ignore_merged_contacts_in_search": True,
                "max_duplicates_per_search": 10,
            }
        ),
        PERMISSIVE: MappingProxyType(
            {
                "min_duplicate_similarity_threshold": 60,
                "name_weight": 34,
                "email_weight": 33,
                "phone_weight": 33,
                "merge_field_precedence": "preferNonNull",
                "is_merge_approval_required": False,
                "merge_retention_days": 90,
                "merge_family_relationships_automatic": True,
                "ignore_duplicates_older_than_days": 1825,
                "ignore_merged_contacts_in_search": False,
                "max_duplicates_per_search": 100,
            }
        ),
    }
)

PAYMENT_MANAGEMENT_PRESETS = MappingProxyType(
    {
        STANDARD: MappingProxyType(
            {
                "require_approval_above_amount": 500,
                "auto_approve_up_to_amount": 5000,
                "max_check_age_days": 180,
                "allow_refunds": True,
                "max_refund_days": 30,
                "refund_approval_threshold": 500,
                "max_ach_retries": 3,
                "mark_overdue_after_days": 30,
                "interest_rate": 0.015,
            }
        ),
        STRICT: MappingProxyType(
            {
                "require_approval_above_amount": 100,
                "auto_approve_up_to_amount": 500,
                "max_check_age_days": 90,
                "allow_refunds": True,
                "max_refund_days": 14,
                "refund_approval_threshold": 100,
                "max_ach_retries": 1,
                "mark_overdue_after_days": 0,
                "interest_rate": 0.015,
            }
        ),
        PERMISSIVE: MappingProxyType(
            {
                "require_approval_above_amount": 2000,
                "auto_approve_up_to_amount": 10000,
                "max_check_age_days": 365,
                "allow_refunds": True,
                "max_refund_days": 90,
                "refund_approval_threshold": 10000,
                "max_ach_retries": 5,
                "mark_overdue_after_days": 60,
                "interest_rate": 0.0,
            }
        ),
    }
)


def get_preset(presets, name: str) -> dict:
    """Return a mutable copy of the named preset's parameters."""
    key = (name or "").strip().upper()
    if key not in presets:
        raise DomainValidationError(
            f"Unknown policy preset '{name}'. Available: {', '.join(presets)}"
        )
    return dict(presets[key])
