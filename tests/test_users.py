import datetime

from conftest import auth_headers, make_scan, make_user


def test_regular_user_cannot_manage_users(client, alice):
    response = client.get("/api/users", headers=auth_headers(alice))

    assert response.status_code == 403
    assert response.json()["message"] == "You do not have permission to perform this action"


def test_list_users_with_search_and_pagination(client, admin, alice, bob):
    headers = auth_headers(admin)

    everyone = client.get("/api/users", params={"limit": 2}, headers=headers).json()
    found = client.get("/api/users", params={"search": "ALI"}, headers=headers).json()

    assert everyone["pagination"]["total_items"] == 3
    assert everyone["pagination"]["total_pages"] == 2
    assert everyone["pagination"]["has_next"] is True
    assert len(everyone["users"]) == 2
    assert [u["username"] for u in found["users"]] == ["alice"]
    assert "hashed_password" not in found["users"][0]


def test_user_stats(client, db_session, admin, alice):
    make_user(db_session, "idle", status="inactive")
    old = make_user(db_session, "veteran")
    old.created_at = datetime.datetime.utcnow() - datetime.timedelta(days=90)
    db_session.commit()

    stats = client.get("/api/users/stats", headers=auth_headers(admin)).json()["stats"]

    assert stats == {
        "total_users": 4,
        "active_users": 3,
        "inactive_users": 1,
        "admin_users": 1,
        "regular_users": 3,
        "recent_registrations": 3,
    }


def test_create_user(client, admin, alice):
    headers = auth_headers(admin)

    created = client.post("/api/users", headers=headers, json={
        "username": "dave", "email": "dave@example.com", "password": "secret123", "role": "administrator",
    })
    duplicate = client.post("/api/users", headers=headers, json={
        "username": "alice", "email": "fresh@example.com", "password": "secret123",
    })
    bad_role = client.post("/api/users", headers=headers, json={
        "username": "erin", "email": "erin@example.com", "password": "secret123", "role": "root",
    })

    assert created.status_code == 201
    assert created.json()["user"]["role"] == "administrator"
    assert created.json()["user"]["status"] == "active"
    assert duplicate.status_code == 400
    assert bad_role.status_code == 400


def test_get_user_includes_five_recent_scans(client, db_session, admin, alice):
    now = datetime.datetime.utcnow()
    for i in range(7):
        make_scan(db_session, alice, acunetix_scan_id=f"acx-{i}", created_at=now - datetime.timedelta(minutes=i))

    response = client.get(f"/api/users/{alice.id}", headers=auth_headers(admin))

    assert response.status_code == 200
    scans = response.json()["user"]["scans"]
    assert len(scans) == 5
    assert response.json()["user"]["username"] == "alice"


def test_get_missing_user(client, admin):
    response = client.get("/api/users/does-not-exist", headers=auth_headers(admin))

    assert response.status_code == 404
    assert response.json()["message"] == "User not found"


def test_update_user(client, admin, alice):
    response = client.put(f"/api/users/{alice.id}", headers=auth_headers(admin),
                          json={"status": "inactive", "role": "administrator"})

    assert response.status_code == 200
    assert response.json()["user"]["status"] == "inactive"
    assert response.json()["user"]["role"] == "administrator"


def test_admin_cannot_change_own_role(client, admin):
    response = client.put(f"/api/users/{admin.id}", headers=auth_headers(admin), json={"role": "user"})

    assert response.status_code == 400
    assert response.json()["message"] == "Cannot change your own role"


def test_delete_user_rules(client, db_session, admin, alice, bob):
    make_scan(db_session, bob)
    alice_id = alice.id
    headers = auth_headers(admin)

    self_delete = client.delete(f"/api/users/{admin.id}", headers=headers)
    with_scans = client.delete(f"/api/users/{bob.id}", headers=headers)
    missing = client.delete("/api/users/nobody", headers=headers)
    deleted = client.delete(f"/api/users/{alice_id}", headers=headers)

    assert self_delete.status_code == 400
    assert self_delete.json()["message"] == "Cannot delete your own account"
    assert with_scans.status_code == 400
    assert missing.status_code == 404
    assert deleted.status_code == 200
    assert client.get(f"/api/users/{alice_id}", headers=headers).status_code == 404


def test_reset_password(client, admin, alice):
    response = client.put(f"/api/users/{alice.id}/reset-password", headers=auth_headers(admin),
                          json={"new_password": "brand-new-pass"})

    assert response.status_code == 200
    login = client.post("/api/auth/login", json={"username": "alice", "password": "brand-new-pass"})
    assert login.status_code == 200
