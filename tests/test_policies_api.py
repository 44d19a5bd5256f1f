from tests.conftest import ADMIN_ID, EMPLOYEE_ID, HR_ID


def test_list_policies(client, auth_headers, annual_policy, sick_policy):
    response = client.get("/api/policies", headers=auth_headers(EMPLOYEE_ID))
    assert response.status_code == 200
    assert [p["policy_name"] for p in response.json()] == ["Annual Leave", "Sick Leave"]


def test_get_policy(client, auth_headers, annual_policy):
    headers = auth_headers(EMPLOYEE_ID)
    response = client.get(f"/api/policies/{annual_policy.id}", headers=headers)
    assert response.status_code == 200
    assert response.json()["max_days_per_year"] == 21
    assert response.json()["carry_forward"] is True

    assert client.get("/api/policies/999", headers=headers).status_code == 404


def test_policies_require_authentication(client):
    assert client.get("/api/policies").status_code == 401


def test_admin_creates_policy(client, auth_headers):
    response = client.post(
        "/api/policies",
        headers=auth_headers(ADMIN_ID, roles=["admin"]),
        json={"policy_name": "Maternity Leave", "leave_type": "maternity", "max_days_per_year": 90},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["leave_type"] == "maternity"
    assert data["carry_forward"] is False


def test_duplicate_policy_name_is_400(client, auth_headers, annual_policy):
    response = client.post(
        "/api/policies",
        headers=auth_headers(ADMIN_ID, roles=["admin"]),
        json={"policy_name": "Annual Leave", "leave_type": "annual", "max_days_per_year": 25},
    )
    assert response.status_code == 400


def test_invalid_policy_payload_is_400(client, auth_headers):
    response = client.post(
        "/api/policies",
        headers=auth_headers(ADMIN_ID, roles=["admin"]),
        json={"policy_name": "Bonus", "leave_type": "sabbatical", "max_days_per_year": -1},
    )
    assert response.status_code == 400


def test_hr_cannot_create_policy(client, auth_headers):
    response = client.post(
        "/api/policies",
        headers=auth_headers(HR_ID, roles=["hr"]),
        json={"policy_name": "Study Leave", "leave_type": "other", "max_days_per_year": 5},
    )
    assert response.status_code == 403
