from datetime import datetime, timedelta, timezone

import pytest

from funeral_core.domain.validators import validate_case
from funeral_core.domain.versioned_record import check_chain
from funeral_core.errors import NotFoundError
from funeral_core.repositories.case import case_repo
from funeral_core.services.case import list_cases
from funeral_core.services.versioning import VersionLifecycleManager

TENANT = "fh-42"
OTHER_TENANT = "fh-7"

T1 = datetime(2026, 3, 1, 9, 0, 0)
T2 = datetime(2026, 3, 1, 10, 0, 0)
T3 = datetime(2026, 3, 1, 11, 0, 0)


def _payload(**overrides) -> dict:
    payload = {
        "decedent_name": "Margaret Hale",
        "case_type": "at_need",
        "status": "active",
        "service_date": None,
        "amount": 100,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def manager(clock):
    return VersionLifecycleManager(case_repo, validate_case, entity_name="Case", clock=clock)


@pytest.fixture
def three_versions(db, manager, clock):
    """case-1 with versions opened at T1, T2 and T3."""
    clock.now = T1
    manager.create_initial(db, TENANT, _payload(), "director", business_key="case-1")
    clock.now = T2
    manager.create_new_version(db, "case-1", {"amount": 200}, "director")
    clock.now = T3
    manager.create_new_version(db, "case-1", {"amount": 300}, "director")
    return "case-1"


# ============================================================================
# HISTORY
# ============================================================================


def test_history_is_ascending_and_contiguous(db, manager, three_versions):
    history = manager.get_history(db, three_versions)

    assert [row.version for row in history] == [1, 2, 3]
    assert [row.amount for row in history] == [100, 200, 300]
    assert history[0].valid_to == T2
    assert history[1].valid_from == T2
    assert history[1].valid_to == T3
    assert history[2].valid_to is None
    check_chain(history)


def test_history_of_unknown_key_raises_not_found(db, manager):
    with pytest.raises(NotFoundError):
        manager.get_history(db, "missing")


def test_history_survives_delete(db, manager, clock, three_versions):
    clock.now = T3 + timedelta(hours=1)
    manager.soft_delete(db, three_versions, "director")

    history = manager.get_history(db, three_versions)
    assert len(history) == 3
    assert all(not row.is_current for row in history)
    assert history[-1].valid_to == T3 + timedelta(hours=1)


# ============================================================================
# AS-OF
# ============================================================================


def test_as_of_inside_an_interval(db, manager, three_versions):
    row = manager.get_as_of(db, three_versions, T1 + timedelta(minutes=30))
    assert row.version == 1


def test_as_of_at_transition_instant_returns_successor(db, manager, three_versions):
    assert manager.get_as_of(db, three_versions, T2).version == 2
    assert manager.get_as_of(db, three_versions, T2 - timedelta(microseconds=1)).version == 1


def test_as_of_after_last_transition_returns_current(db, manager, three_versions):
    row = manager.get_as_of(db, three_versions, T3 + timedelta(days=30))
    assert row.version == 3
    assert row.is_current is True


def test_as_of_before_first_version(db, manager, three_versions):
    before = T1 - timedelta(seconds=1)
    assert manager.find_as_of(db, three_versions, before) is None
    with pytest.raises(NotFoundError):
        manager.get_as_of(db, three_versions, before)


def test_as_of_after_delete_finds_nothing(db, manager, clock, three_versions):
    deleted_at = T3 + timedelta(hours=1)
    clock.now = deleted_at
    manager.soft_delete(db, three_versions, "director")

    assert manager.find_as_of(db, three_versions, deleted_at) is None
    assert manager.find_as_of(db, three_versions, deleted_at - timedelta(microseconds=1)).version == 3


def test_as_of_accepts_aware_timestamps(db, manager, three_versions):
    # 11:30 in UTC+2 is 09:30 UTC
    aware = datetime(2026, 3, 1, 11, 30, tzinfo=timezone(timedelta(hours=2)))
    assert manager.get_as_of(db, three_versions, aware).version == 1


# ============================================================================
# CURRENT STATE
# ============================================================================


def test_find_current_is_repeatable(db, manager, three_versions):
    first = manager.find_current(db, three_versions)
    second = manager.find_current(db, three_versions)

    assert first.id == second.id
    assert first.version == 3
    assert manager.get_history(db, three_versions)[-1].id == first.id


def test_find_current_of_unknown_key_is_none(db, manager):
    assert manager.find_current(db, "missing") is None
    with pytest.raises(NotFoundError):
        manager.get_current(db, "missing")


def test_get_by_id_returns_historical_row(db, manager, three_versions):
    first = manager.get_history(db, three_versions)[0]

    row = manager.get_by_id(db, first.id)
    assert row.version == 1
    assert row.is_current is False
    assert row.amount == 100


def test_get_by_id_unknown_raises_not_found(db, manager):
    with pytest.raises(NotFoundError):
        manager.get_by_id(db, 999_999)


# ============================================================================
# LISTING
# ============================================================================


def test_list_current_returns_one_row_per_key(db, manager, three_versions):
    manager.create_initial(db, TENANT, _payload(decedent_name="Arthur Pym"), "director")

    rows, total = manager.list_current(db, TENANT)

    assert total == 2
    assert all(row.is_current for row in rows)
    assert three_versions in {row.business_key for row in rows}
    assert [row.version for row in rows if row.business_key == three_versions] == [3]


def test_list_current_is_tenant_scoped(db, manager, three_versions):
    manager.create_initial(db, OTHER_TENANT, _payload(), "other", business_key="case-other")

    rows, total = manager.list_current(db, OTHER_TENANT)
    assert total == 1
    assert rows[0].business_key == "case-other"

    rows, total = manager.list_current(db, TENANT)
    assert total == 1
    assert rows[0].business_key == three_versions


def test_list_current_excludes_deleted(db, manager, three_versions):
    manager.soft_delete(db, three_versions, "director")

    rows, total = manager.list_current(db, TENANT)
    assert rows == []
    assert total == 0


def test_list_current_pagination(db, manager, clock):
    for i in range(5):
        clock.advance(minutes=1)
        manager.create_initial(db, TENANT, _payload(amount=i), "director", business_key=f"case-{i}")

    page_one, total = manager.list_current(db, TENANT, page=1, page_size=2)
    page_three, _ = manager.list_current(db, TENANT, page=3, page_size=2)

    assert total == 5
    # Newest first
    assert [row.business_key for row in page_one] == ["case-4", "case-3"]
    assert [row.business_key for row in page_three] == ["case-0"]


def test_list_cases_filters(db, manager):
    manager.create_initial(db, TENANT, _payload(status="inquiry", case_type="pre_need"), "director")
    manager.create_initial(db, TENANT, _payload(status="active"), "director")

    rows, total = list_cases(db, TENANT, status="inquiry")
    assert total == 1
    assert rows[0].case_type == "pre_need"

    rows, total = list_cases(db, TENANT, case_type="at_need")
    assert total == 1
    assert rows[0].status == "active"
