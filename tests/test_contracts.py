import pytest

from funeral_core.errors import ConflictError, DomainValidationError
from funeral_core.services.contract import contracts, create_contract, update_contract

TENANT = "fh-42"


@pytest.fixture(scope="function")
def draft_contract(db, case):
    return create_contract(
        db,
        tenant_id=TENANT,
        actor="director",
        case_business_key=case.business_key,
        status="pending_signature",
        total_amount=8500,
        business_key="ct-1",
    )


# ============================================================================
# FREEZE RULE
# ============================================================================


def test_signed_contract_rejects_changes(db, draft_contract):
    update_contract(db, "ct-1", "director", status="fully_signed")

    with pytest.raises(DomainValidationError, match="fully_signed"):
        update_contract(db, "ct-1", "director", total_amount=999)


def test_signing_between_check_and_write_is_not_overwritten(
    db, session_factory, draft_contract, monkeypatch
):
    """Another writer signs the contract right after the freeze check read it."""
    original_get_current = contracts.get_current
    signed = []

    def get_current_then_sign(session, business_key):
        row = original_get_current(session, business_key)
        if not signed:
            signed.append(True)
            other = session_factory()
            try:
                contracts.create_new_version(other, business_key, {"status": "fully_signed"}, "family")
            finally:
                other.close()
        return row

    monkeypatch.setattr(contracts, "get_current", get_current_then_sign)

    with pytest.raises(ConflictError):
        update_contract(db, "ct-1", "director", total_amount=999)

    db.expire_all()
    current = contracts.repo.get_current(db, "ct-1")
    assert current.version == 2
    assert current.status == "fully_signed"
    assert current.total_amount == 8500


def test_stale_expected_version_is_rejected_before_freeze_check(db, draft_contract):
    update_contract(db, "ct-1", "director", total_amount=9000)

    with pytest.raises(ConflictError) as exc_info:
        update_contract(db, "ct-1", "director", expected_version=1, total_amount=1)

    assert exc_info.value.expected_version == 1
    assert contracts.get_current(db, "ct-1").total_amount == 9000
