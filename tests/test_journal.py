from admission_portal.models import AuditLog


def _lifecycle(client, student, staff, program):
    _, headers = student
    app_id = client.post("/api/applications", json={"program": program["id"]}, headers=headers).json()["id"]
    client.put(f"/api/applications/submit/{app_id}", headers=headers)
    _, staff_headers = staff
    client.put(f"/api/applications/status/{app_id}", json={"status": "Approved"}, headers=staff_headers)
    return app_id


def test_mutations_are_journaled(client, student, staff, program):
    app_id = _lifecycle(client, student, staff, program)
    user, _ = student
    staff_user, staff_headers = staff

    resp = client.get("/api/journal", params={"target_id": app_id, "sort": "id:asc"}, headers=staff_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 3
    actions = [i["action"] for i in body["items"]]
    assert actions == ["APPLICATION_CREATE", "APPLICATION_SUBMIT", "APPLICATION_STATUS"]

    create, submit, decide = body["items"]
    assert create["actor_id"] == user["id"]
    assert decide["actor_id"] == staff_user["id"]
    assert decide["actor_role"] == "staff"
    assert decide["prev_values"]["status"] == "Submitted"
    assert decide["new_values"]["status"] == "Approved"
    assert decide["path"] == f"/api/applications/status/{app_id}"


def test_journal_filters_and_pagination(client, student, staff, program):
    _lifecycle(client, student, staff, program)
    _, staff_headers = staff

    resp = client.get("/api/journal", params={"action": "APPLICATION_SUBMIT"}, headers=staff_headers)
    assert [i["action"] for i in resp.json()["items"]] == ["APPLICATION_SUBMIT"]

    resp = client.get("/api/journal", params={"page": 2, "page_size": 2}, headers=staff_headers)
    body = resp.json()
    assert body["total"] == 3
    assert body["page"] == 2
    assert len(body["items"]) == 1

    assert client.get("/api/journal", params={"page_size": 501}, headers=staff_headers).status_code == 400


def test_journal_detail_signature(client, student, staff, program, db_session):
    _lifecycle(client, student, staff, program)
    _, staff_headers = staff
    first = client.get("/api/journal", headers=staff_headers).json()["items"][0]

    resp = client.get(f"/api/journal/detail/{first['id']}", headers=staff_headers)
    assert resp.status_code == 200
    assert resp.json()["signature_valid"] is True

    row = db_session.get(AuditLog, first["id"])
    row.new_values = {"status": "Rejected"}
    db_session.commit()
    assert client.get(f"/api/journal/detail/{first['id']}", headers=staff_headers).json()["signature_valid"] is False

    assert client.get("/api/journal/detail/99999", headers=staff_headers).status_code == 404


def test_journal_is_staff_only(client, student):
    _, headers = student
    assert client.get("/api/journal", headers=headers).status_code == 403
