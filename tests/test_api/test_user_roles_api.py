"""Scope assignment endpoints."""


def test_list_user_roles(client, auth):
    response = client.get("/user-roles", params={"user_id": 3}, headers=auth(1))
    assert response.status_code == 200
    assert [(r["scope"], r["region_id"]) for r in response.json()] == [("region", 1)]


def test_assign_role_requires_superadmin(client, auth):
    payload = {"user_id": 8, "scope": "region", "region_id": 2}
    assert client.post("/user-roles", json=payload, headers=auth(2)).status_code == 403


def test_assign_role_takes_effect(client, auth):
    payload = {"user_id": 8, "scope": "region", "region_id": 2}
    response = client.post("/user-roles", json=payload, headers=auth(1))
    assert response.status_code == 201
    assert response.json()["scope"] == "region"

    members = client.get("/members", headers=auth(8)).json()
    assert [m["id"] for m in members] == [3]


def test_reassignment_replaces_the_active_scope(client, auth):
    payload = {"user_id": 3, "scope": "university", "university_id": 3}
    assert client.post("/user-roles", json=payload, headers=auth(1)).status_code == 201

    body = client.get("/me/scope", headers=auth(3)).json()
    assert body["scope"] == "university"
    assert body["university"]["name"] == "Harbour University"


def test_assign_role_unknown_unit(client, auth):
    payload = {"user_id": 8, "scope": "smallgroup", "small_group_id": 99}
    response = client.post("/user-roles", json=payload, headers=auth(1))
    assert response.status_code == 400


def test_assign_role_unknown_user(client, auth):
    payload = {"user_id": 404, "scope": "national"}
    assert client.post("/user-roles", json=payload, headers=auth(1)).status_code == 400


def test_assign_role_validates_scope_ids(client, auth):
    payload = {"user_id": 8, "scope": "university"}
    assert client.post("/user-roles", json=payload, headers=auth(1)).status_code == 422
