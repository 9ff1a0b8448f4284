from conftest import create_program

PROGRAM_PAYLOAD = {
    "name": "Machine Learning & AI",
    "description": "M.Tech program in Machine Learning & AI",
    "programType": "MTech",
    "department": "Computer Science",
    "duration": 2,
    "seats": 60,
    "applicationFee": 1500,
    "tuitionFee": 150000,
    "eligibility": "B.Tech in CSE/IT/ECE with minimum 60%",
    "applicationDeadline": "2030-06-15",
    "startDate": "2030-08-01",
}


def test_public_list_shows_only_active(client):
    create_program("Active Program")
    create_program("Closed Program", status="Inactive")

    resp = client.get("/api/programs")
    assert resp.status_code == 200
    names = [p["name"] for p in resp.json()]
    assert names == ["Active Program"]


def test_list_all_requires_staff(client, student, staff):
    create_program("Active Program")
    create_program("Closed Program", status="Inactive")

    _, student_headers = student
    assert client.get("/api/programs/all", headers=student_headers).status_code == 403

    _, staff_headers = staff
    resp = client.get("/api/programs/all", headers=staff_headers)
    assert resp.status_code == 200
    assert len(resp.json()) == 2


def test_get_program_by_id(client, program):
    resp = client.get(f"/api/programs/{program['id']}")
    assert resp.status_code == 200
    assert resp.json()["name"] == program["name"]
    assert client.get("/api/programs/missing").status_code == 404


def test_admin_creates_program(client, admin):
    _, headers = admin
    resp = client.post("/api/programs", json=PROGRAM_PAYLOAD, headers=headers)
    assert resp.status_code == 201
    body = resp.json()
    assert body["status"] == "Active"
    assert body["programType"] == "MTech"
    assert body["applicationFee"] == 1500
    assert body["applicationDeadline"] == "2030-06-15"


def test_staff_cannot_create_program(client, staff):
    _, headers = staff
    assert client.post("/api/programs", json=PROGRAM_PAYLOAD, headers=headers).status_code == 403


def test_create_program_rejects_bad_input(client, admin):
    _, headers = admin
    payload = {**PROGRAM_PAYLOAD, "seats": -1, "programType": "MBA"}
    resp = client.post("/api/programs", json=payload, headers=headers)
    assert resp.status_code == 400
    fields = {e["field"] for e in resp.json()["errors"]}
    assert {"seats", "programType"} <= fields


def test_partial_update(client, admin, program):
    _, headers = admin
    resp = client.put(f"/api/programs/{program['id']}", json={"seats": 10, "status": "Inactive"}, headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["seats"] == 10
    assert body["status"] == "Inactive"
    assert body["name"] == program["name"]


def test_delete_program(client, admin, program):
    _, headers = admin
    resp = client.delete(f"/api/programs/{program['id']}", headers=headers)
    assert resp.status_code == 200
    assert client.get(f"/api/programs/{program['id']}").status_code == 404


def test_delete_program_with_applications_conflicts(client, admin, student, program):
    _, student_headers = student
    client.post("/api/applications", json={"program": program["id"]}, headers=student_headers)

    _, headers = admin
    resp = client.delete(f"/api/programs/{program['id']}", headers=headers)
    assert resp.status_code == 409
