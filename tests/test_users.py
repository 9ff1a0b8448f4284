from admission_portal.routers import users as users_router

from conftest import PROFILE_PAYLOAD, register_student


# ---------------- Accounts ----------------

def test_list_users_is_privileged(client, student, staff):
    _, student_headers = student
    assert client.get("/api/users", headers=student_headers).status_code == 403

    _, staff_headers = staff
    resp = client.get("/api/users", headers=staff_headers)
    assert resp.status_code == 200
    assert {u["role"] for u in resp.json()} == {"student", "staff"}


def test_get_user_self_or_staff(client, student, staff):
    user, headers = student
    other, _ = register_student(client, name="Other", email="other@example.com")

    assert client.get(f"/api/users/{user['id']}", headers=headers).status_code == 200
    assert client.get(f"/api/users/{other['id']}", headers=headers).status_code == 403

    _, staff_headers = staff
    assert client.get(f"/api/users/{other['id']}", headers=staff_headers).status_code == 200
    assert client.get("/api/users/missing", headers=staff_headers).status_code == 404


def test_update_own_name(client, student):
    user, headers = student
    resp = client.put(f"/api/users/{user['id']}", json={"name": "Renamed"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["name"] == "Renamed"


def test_student_cannot_change_own_role(client, student):
    user, headers = student
    resp = client.put(f"/api/users/{user['id']}", json={"role": "admin"}, headers=headers)
    assert resp.status_code == 403


def test_staff_cannot_edit_other_accounts(client, student, staff):
    user, _ = student
    _, staff_headers = staff
    assert client.put(f"/api/users/{user['id']}", json={"name": "X"}, headers=staff_headers).status_code == 403


def test_admin_promotes_student(client, student, admin):
    user, _ = student
    _, admin_headers = admin
    resp = client.put(f"/api/users/{user['id']}", json={"role": "staff"}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["role"] == "staff"


def test_update_email_conflict(client, student):
    user, headers = student
    register_student(client, name="Other", email="taken@example.com")
    resp = client.put(f"/api/users/{user['id']}", json={"email": "taken@example.com"}, headers=headers)
    assert resp.status_code == 409


# ---------------- Profiles ----------------

def test_create_and_read_profile(client, student):
    user, headers = student
    resp = client.post("/api/users/profile", json=PROFILE_PAYLOAD, headers=headers)
    assert resp.status_code == 201
    body = resp.json()
    assert body["userId"] == user["id"]
    assert body["personalInfo"]["firstName"] == "Test"
    assert body["personalInfo"]["dateOfBirth"] == "2005-04-12"
    assert body["documents"] == []

    resp = client.get(f"/api/users/profile/{user['id']}", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["educationalBackground"]["highSchoolName"] == "City High School"


def test_create_profile_twice_conflicts(client, student):
    _, headers = student
    assert client.post("/api/users/profile", json=PROFILE_PAYLOAD, headers=headers).status_code == 201
    assert client.post("/api/users/profile", json=PROFILE_PAYLOAD, headers=headers).status_code == 409


def test_create_profile_requires_personal_fields(client, student):
    _, headers = student
    bad = {"personalInfo": {**PROFILE_PAYLOAD["personalInfo"], "firstName": ""}}
    resp = client.post("/api/users/profile", json=bad, headers=headers)
    assert resp.status_code == 400
    assert any(e["field"].endswith("firstName") for e in resp.json()["errors"])


def test_staff_cannot_create_profile(client, staff):
    _, headers = staff
    assert client.post("/api/users/profile", json=PROFILE_PAYLOAD, headers=headers).status_code == 403


def test_profile_privacy(client, student, staff):
    user, headers = student
    client.post("/api/users/profile", json=PROFILE_PAYLOAD, headers=headers)
    _, other_headers = register_student(client, name="Other", email="other@example.com")

    assert client.get(f"/api/users/profile/{user['id']}", headers=other_headers).status_code == 403

    _, staff_headers = staff
    assert client.get(f"/api/users/profile/{user['id']}", headers=staff_headers).status_code == 200


def test_missing_profile_not_found(client, student):
    user, headers = student
    assert client.get(f"/api/users/profile/{user['id']}", headers=headers).status_code == 404


def test_update_profile_replaces_section(client, student, staff, admin):
    user, headers = student
    client.post("/api/users/profile", json=PROFILE_PAYLOAD, headers=headers)

    update = {"personalInfo": {**PROFILE_PAYLOAD["personalInfo"], "city": "Mumbai"}}
    resp = client.put(f"/api/users/profile/{user['id']}", json=update, headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["personalInfo"]["city"] == "Mumbai"
    # untouched section is kept
    assert body["educationalBackground"]["highSchoolGrade"] == 88.5

    _, staff_headers = staff
    assert client.put(f"/api/users/profile/{user['id']}", json=update, headers=staff_headers).status_code == 403

    _, admin_headers = admin
    assert client.put(f"/api/users/profile/{user['id']}", json=update, headers=admin_headers).status_code == 200


def test_update_email_race_is_conflict(client, student, monkeypatch):
    user, headers = student
    register_student(client, name="Other", email="taken@example.com")
    monkeypatch.setattr(users_router, "email_taken", lambda *args, **kwargs: False)
    resp = client.put(f"/api/users/{user['id']}", json={"email": "taken@example.com"}, headers=headers)
    assert resp.status_code == 409
    me = client.get(f"/api/users/{user['id']}", headers=headers).json()
    assert me["email"] == user["email"]
