"""Entity-specific payload validators.

Each validator receives the full payload of the version about to be written
(after a patch has been merged) and raises DomainValidationError.
"""

from __future__ import annotations

from funeral_core.errors import DomainValidationError

CASE_TYPES = ("at_need", "pre_need", "inquiry")
CASE_STATUSES = ("inquiry", "active", "completed", "archived")
CONTRACT_STATUSES = ("draft", "pending_signature", "fully_signed", "cancelled")
MERGE_FIELD_PRECEDENCES = ("newest", "mostRecent", "preferNonNull")

MAX_NOTE_LENGTH = 10_000
MAX_INTEREST_RATE = 0.3


def _require_text(payload: dict, field: str) -> None:
    value = payload.get(field)
    if value is None or not str(value).strip():
        raise DomainValidationError(f"{field} is required")


def _require_choice(payload: dict, field: str, choices: tuple[str, ...]) -> None:
    if payload.get(field) not in choices:
        raise DomainValidationError(
            f"{field} must be one of {', '.join(choices)}, got {payload.get(field)!r}"
        )


def _require_non_negative(payload: dict, *fields: str) -> None:
    for field in fields:
        value = payload.get(field)
        if value is None or value < 0:
            raise DomainValidationError(f"{field} must be zero or greater")


def validate_case(payload: dict) -> None:
    _require_text(payload, "decedent_name")
    _require_choice(payload, "case_type", CASE_TYPES)
    _require_choice(payload, "status", CASE_STATUSES)
    _require_non_negative(payload, "amount")


def validate_contract(payload: dict) -> None:
    _require_text(payload, "case_business_key")
    _require_choice(payload, "status", CONTRACT_STATUSES)
    _require_non_negative(payload, "total_amount")


def validate_note(payload: dict) -> None:
    _require_text(payload, "case_business_key")
    _require_text(payload, "content")
    if len(payload["content"]) > MAX_NOTE_LENGTH:
        raise DomainValidationError(
            f"content cannot exceed {MAX_NOTE_LENGTH} characters"
        )


def validate_contact_management_policy(payload: dict) -> None:
    threshold = payload.get("min_duplicate_similarity_threshold")
    if threshold is None or not 0 <= threshold <= 100:
        raise DomainValidationError(
            "min_duplicate_similarity_threshold must be between 0 and 100"
        )
    _require_non_negative(payload, "name_weight", "email_weight", "phone_weight")
    total = payload["name_weight"] + payload["email_weight"] + payload["phone_weight"]
    if total != 100:
        raise DomainValidationError(
            f"Duplicate matching weights must sum to 100, got {total}"
        )
    _require_choice(payload, "merge_field_precedence", MERGE_FIELD_PRECEDENCES)
    _require_non_negative(
        payload,
        "merge_retention_days",
        "ignore_duplicates_older_than_days",
    )
    if payload.get("max_duplicates_per_search") is None or payload["max_duplicates_per_search"] < 1:
        raise DomainValidationError("max_duplicates_per_search must be at least 1")


def validate_payment_management_policy(payload: dict) -> None:
    _require_non_negative(
        payload,
        "require_approval_above_amount",
        "auto_approve_up_to_amount",
        "max_check_age_days",
        "max_refund_days",
        "refund_approval_threshold",
        "max_ach_retries",
        "mark_overdue_after_days",
    )
    rate = payload.get("interest_rate")
    if rate is None or not 0 <= rate <= MAX_INTEREST_RATE:
        raise DomainValidationError(
            f"interest_rate must be between 0 and {MAX_INTEREST_RATE}"
        )
