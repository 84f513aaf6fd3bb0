from datetime import timedelta

from fastapi import status

TENANT = "fh-42"
OTHER_TENANT = "fh-7"


def _create(client, headers, **overrides):
    body = {
        "tenant_id": TENANT,
        "decedent_name": "Arthur Pym",
        "case_type": "pre_need",
        "status": "inquiry",
        "amount": 250,
    }
    body.update(overrides)
    return client.post("/api/v1/cases", json=body, headers=headers)


# ============================================================================
# POST /cases
# ============================================================================


def test_create_case(client, actor_headers):
    response = _create(client, actor_headers, business_key="case-77")

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["business_key"] == "case-77"
    assert data["tenant_id"] == TENANT
    assert data["version"] == 1
    assert data["is_current"] is True
    assert data["valid_to"] is None
    assert data["created_by"] == "director@fh-42.example.com"
    assert data["updated_by"] == "director@fh-42.example.com"
    assert data["decedent_name"] == "Arthur Pym"


def test_create_case_assigns_business_key(client, actor_headers):
    response = _create(client, actor_headers)

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["business_key"]


def test_create_case_without_actor_header_uses_system(client):
    response = _create(client, {})

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["created_by"] == "system"


def test_create_case_duplicate_key(client, actor_headers, case):
    response = _create(client, actor_headers, business_key=case.business_key)

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["code"] == "DUPLICATE_RESOURCE"


def test_create_case_rejects_unknown_status(client, actor_headers):
    response = _create(client, actor_headers, status="closed")

    assert response.status_code == 422


def test_create_case_rejects_blank_name(client, actor_headers):
    response = _create(client, actor_headers, decedent_name="   ")

    assert response.status_code == 422


def test_recreate_deleted_case_is_rejected(client, actor_headers, case):
    client.delete(f"/api/v1/cases/{case.business_key}", headers=actor_headers)

    response = _create(client, actor_headers, business_key=case.business_key)

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["code"] == "RECORD_DELETED"


# ============================================================================
# GET /cases
# ============================================================================


def test_get_current_case(client, case):
    response = client.get(f"/api/v1/cases/{case.business_key}")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["version"] == 1
    assert response.json()["amount"] == 100


def test_get_missing_case(client):
    response = client.get("/api/v1/cases/nope")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["code"] == "NOT_FOUND"


def test_list_cases_requires_tenant(client):
    response = client.get("/api/v1/cases")

    assert response.status_code == 422


def test_list_cases_only_current_versions(client, actor_headers, case):
    client.put(f"/api/v1/cases/{case.business_key}", json={"amount": 150}, headers=actor_headers)
    _create(client, actor_headers, tenant_id=OTHER_TENANT)

    response = client.get("/api/v1/cases", params={"tenant_id": TENANT})

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["total"] == 1
    assert data["page"] == 1
    assert [item["version"] for item in data["items"]] == [2]


def test_list_cases_filter_by_status(client, actor_headers, case):
    _create(client, actor_headers)

    response = client.get("/api/v1/cases", params={"tenant_id": TENANT, "status": "inquiry"})

    data = response.json()
    assert data["total"] == 1
    assert data["items"][0]["status"] == "inquiry"


# ============================================================================
# PUT /cases/{key}
# ============================================================================


def test_update_case_creates_new_version(client, actor_headers, case):
    response = client.put(
        f"/api/v1/cases/{case.business_key}",
        json={"status": "completed", "expected_version": 1},
        headers={"X-Actor-Id": "arranger@fh-42.example.com"},
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["version"] == 2
    assert data["status"] == "completed"
    # Untouched fields are carried over
    assert data["amount"] == 100
    assert data["created_by"] == "director@fh-42.example.com"
    assert data["updated_by"] == "arranger@fh-42.example.com"


def test_update_case_can_clear_service_date(client, actor_headers):
    created = _create(client, actor_headers, service_date="2026-03-10").json()

    response = client.put(
        f"/api/v1/cases/{created['business_key']}",
        json={"service_date": None},
        headers=actor_headers,
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["service_date"] is None


def test_update_case_stale_version(client, actor_headers, case):
    client.put(f"/api/v1/cases/{case.business_key}", json={"amount": 150}, headers=actor_headers)

    response = client.put(
        f"/api/v1/cases/{case.business_key}",
        json={"amount": 175, "expected_version": 1},
        headers=actor_headers,
    )

    assert response.status_code == status.HTTP_409_CONFLICT
    data = response.json()
    assert data["code"] == "CONFLICT"
    assert data["business_key"] == case.business_key
    assert data["expected_version"] == 1


def test_update_missing_case(client, actor_headers):
    response = client.put("/api/v1/cases/nope", json={"amount": 1}, headers=actor_headers)

    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_update_case_ignores_audit_fields(client, actor_headers, case):
    response = client.put(
        f"/api/v1/cases/{case.business_key}",
        json={"amount": 1, "version": 9},
        headers=actor_headers,
    )

    # Unknown body fields are ignored by the schema, never written
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["version"] == 2


# ============================================================================
# DELETE, HISTORY, AS-OF
# ============================================================================


def test_delete_case(client, actor_headers, case):
    response = client.delete(f"/api/v1/cases/{case.business_key}", headers=actor_headers)
    assert response.status_code == status.HTTP_204_NO_CONTENT

    assert client.get(f"/api/v1/cases/{case.business_key}").status_code == 404
    again = client.delete(f"/api/v1/cases/{case.business_key}", headers=actor_headers)
    assert again.status_code == status.HTTP_404_NOT_FOUND


def test_delete_case_stale_version(client, actor_headers, case):
    client.put(f"/api/v1/cases/{case.business_key}", json={"amount": 150}, headers=actor_headers)

    response = client.delete(
        f"/api/v1/cases/{case.business_key}",
        params={"expected_version": 1},
        headers=actor_headers,
    )

    assert response.status_code == status.HTTP_409_CONFLICT
    assert client.get(f"/api/v1/cases/{case.business_key}").json()["version"] == 2


def test_history_includes_deleted_versions(client, actor_headers, case):
    client.put(f"/api/v1/cases/{case.business_key}", json={"amount": 150}, headers=actor_headers)
    client.delete(f"/api/v1/cases/{case.business_key}", headers=actor_headers)

    response = client.get(f"/api/v1/cases/{case.business_key}/history")

    assert response.status_code == status.HTTP_200_OK
    history = response.json()
    assert [row["version"] for row in history] == [1, 2]
    assert all(row["is_current"] is False for row in history)
    assert history[0]["valid_to"] is not None


def test_history_of_unknown_case(client):
    assert client.get("/api/v1/cases/nope/history").status_code == 404


def test_as_of(client, actor_headers, case):
    second = client.put(
        f"/api/v1/cases/{case.business_key}", json={"amount": 150}, headers=actor_headers
    ).json()

    at_transition = client.get(
        f"/api/v1/cases/{case.business_key}/as-of", params={"at": second["valid_from"]}
    )
    assert at_transition.status_code == status.HTTP_200_OK
    assert at_transition.json()["version"] == 2

    before_creation = client.get(
        f"/api/v1/cases/{case.business_key}/as-of",
        params={"at": (case.valid_from - timedelta(days=1)).isoformat()},
    )
    assert before_creation.status_code == status.HTTP_404_NOT_FOUND


def test_get_specific_version(client, actor_headers, case):
    first_id = case.id
    client.put(f"/api/v1/cases/{case.business_key}", json={"amount": 150}, headers=actor_headers)

    response = client.get(f"/api/v1/cases/versions/{first_id}")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["version"] == 1
    assert response.json()["is_current"] is False
    assert client.get("/api/v1/cases/versions/999999").status_code == 404


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
