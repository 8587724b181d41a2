"""Members endpoints under different scopes."""


def _new_member(**overrides):
    payload = {"first_name": "New", "second_name": "Member", "type": "Student", "gender": "Female"}
    payload.update(overrides)
    return payload


def _ids(response):
    assert response.status_code == 200
    return sorted(item["id"] for item in response.json())


def test_list_members_by_scope(client, auth):
    assert _ids(client.get("/members", headers=auth(1))) == [1, 2, 3, 4, 5]
    assert _ids(client.get("/members", headers=auth(3))) == [1, 2, 4, 5]
    assert _ids(client.get("/members", headers=auth(4))) == [1, 5]
    assert _ids(client.get("/members", headers=auth(5))) == [1]
    assert _ids(client.get("/members", headers=auth(6))) == [4]


def test_query_filters_cannot_widen_scope(client, auth):
    assert _ids(client.get("/members", params={"region_id": 2}, headers=auth(4))) == []
    assert _ids(client.get("/members", params={"type": "STAFF"}, headers=auth(3))) == [5]


def test_get_member_out_of_scope_is_forbidden(client, auth):
    response = client.get("/members/3", headers=auth(3))
    assert response.status_code == 403
    assert response.json()["detail"]["reason"] == "scope_mismatch"


def test_get_missing_member_is_not_found(client, auth):
    assert client.get("/members/404", headers=auth(1)).status_code == 404


def test_create_member_completes_parent_ids(client, auth):
    response = client.post("/members", json=_new_member(small_group_id=1, email=""), headers=auth(5))
    assert response.status_code == 201
    body = response.json()
    assert (body["region_id"], body["university_id"], body["small_group_id"]) == (1, 1, 1)
    assert body["type"] == "student"
    assert body["gender"] == "female"
    assert body["email"] is None

    # The region user above sees the new member in listings.
    assert body["id"] in _ids(client.get("/members", headers=auth(3)))


def test_create_member_outside_scope(client, auth):
    response = client.post("/members", json=_new_member(region_id=2), headers=auth(3))
    assert response.status_code == 403
    assert response.json()["detail"]["reason"] == "scope_mismatch"


def test_create_member_forbidden_field(client, auth):
    response = client.post("/members", json=_new_member(university_id=1, alumni_group_id=1), headers=auth(4))
    assert response.status_code == 403
    assert response.json()["detail"]["reason"] == "forbidden_field_assignment"


def test_create_member_inconsistent_chain(client, auth):
    response = client.post("/members", json=_new_member(region_id=1, university_id=3), headers=auth(3))
    assert response.status_code == 403
    assert response.json()["detail"]["reason"] == "inconsistent_coordinate_chain"


def test_create_member_duplicate_email(client, auth):
    response = client.post("/members", json=_new_member(region_id=1, email="grace@example.org"), headers=auth(3))
    assert response.status_code == 409


def test_create_member_invalid_payload(client, auth):
    response = client.post("/members", json=_new_member(type="wizard", region_id=1), headers=auth(3))
    assert response.status_code == 422


def test_update_member(client, auth):
    payload = _new_member(first_name="Grace", second_name="Otieno", small_group_id=1, status="graduate")
    response = client.put("/members/1", json=payload, headers=auth(4))
    assert response.status_code == 200
    assert response.json()["status"] == "graduate"
    assert response.json()["university_id"] == 1


def test_update_member_cannot_move_it_out_of_scope(client, auth):
    response = client.put("/members/1", json=_new_member(small_group_id=2), headers=auth(4))
    assert response.status_code == 403
    assert response.json()["detail"]["reason"] == "scope_mismatch"


def test_delete_member(client, auth):
    assert client.delete("/members/2", headers=auth(4)).status_code == 403
    assert client.delete("/members/2", headers=auth(3)).status_code == 200
    assert client.get("/members/2", headers=auth(1)).status_code == 404


def test_alumni_scope_updates_member_with_stored_university(client, auth):
    created = client.post(
        "/members",
        json=_new_member(type="alumni", region_id=1, university_id=1, alumni_group_id=1),
        headers=auth(1),
    )
    assert created.status_code == 201
    member_id = created.json()["id"]

    response = client.put(
        f"/members/{member_id}",
        json=_new_member(type="alumni", status="alumni", region_id=1, alumni_group_id=1),
        headers=auth(6),
    )
    assert response.status_code == 200
    assert response.json()["university_id"] is None
    assert response.json()["alumni_group_id"] == 1


def test_alumni_scope_cannot_keep_university_on_update(client, auth):
    created = client.post(
        "/members",
        json=_new_member(type="alumni", region_id=1, university_id=1, alumni_group_id=1),
        headers=auth(1),
    )
    member_id = created.json()["id"]

    response = client.put(
        f"/members/{member_id}",
        json=_new_member(type="alumni", region_id=1, university_id=1, alumni_group_id=1),
        headers=auth(6),
    )
    assert response.status_code == 403
    assert response.json()["detail"]["reason"] == "forbidden_field_assignment"
