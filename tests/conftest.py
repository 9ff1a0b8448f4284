import os
import tempfile
from datetime import date

# settings and the engine are built at import time, so point them at a scratch dir first
_TMP = tempfile.mkdtemp(prefix="admission-tests-")
os.environ["DB_URL"] = "sqlite:///" + os.path.join(_TMP, "test.db").replace("\\", "/")
os.environ["UPLOAD_DIR"] = os.path.join(_TMP, "uploads")
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["EMAIL_ENABLED"] = "false"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["AUDIT_HMAC_SECRET"] = "test-audit"

import pytest
from fastapi.testclient import TestClient

from admission_portal.core.security import create_access_token, hash_password
from admission_portal.db.session import SessionLocal, engine
from admission_portal.main import app
from admission_portal.models import Account, Base, Program
from admission_portal.services import notifier
from admission_portal.services.blob_store import LocalBlobStore, get_blob_store


@pytest.fixture(autouse=True)
def test_db():
    # fresh tables for every test
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    try:
        yield
    finally:
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def blob_store(tmp_path):
    store = LocalBlobStore(str(tmp_path / "blobs"))
    app.dependency_overrides[get_blob_store] = lambda: store
    try:
        yield store
    finally:
        app.dependency_overrides.pop(get_blob_store, None)


@pytest.fixture
def sent_emails(monkeypatch):
    """Capture notifications instead of dispatching them."""
    sent = []

    def _fake_send(to, template, **data):
        sent.append({"to": to, "template": template, **data})
        return True

    monkeypatch.setattr(notifier, "send_email", _fake_send)
    return sent


@pytest.fixture
def client(sent_emails):
    with TestClient(app) as c:
        yield c


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def register_student(client, name="Test Student", email="student@example.com", password="student123"):
    resp = client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
    assert resp.status_code == 201, resp.text
    body = resp.json()
    return body["user"], auth_header(body["token"])


def create_account(name, email, role, password="secret123"):
    """Insert a staff/admin account directly; self-registration only creates students."""
    db = SessionLocal()
    try:
        account = Account(name=name, email=email, password_hash=hash_password(password), role=role)
        db.add(account)
        db.commit()
        db.refresh(account)
        return account.to_dict(), auth_header(create_access_token(account.id, account.role))
    finally:
        db.close()


def create_program(name="Computer Science Engineering", status="Active"):
    db = SessionLocal()
    try:
        program = Program(
            name=name,
            description="B.Tech program in Computer Science Engineering",
            program_type="BTech",
            department="Computer Science",
            duration=4,
            seats=120,
            application_fee=1000,
            tuition_fee=125000,
            eligibility="Minimum 60% in 10+2 with PCM",
            application_deadline=date(2030, 6, 30),
            start_date=date(2030, 8, 1),
            status=status,
        )
        db.add(program)
        db.commit()
        db.refresh(program)
        return program.to_dict()
    finally:
        db.close()


@pytest.fixture
def student(client):
    return register_student(client)


@pytest.fixture
def staff():
    return create_account("Staff User", "staff@college.edu", "staff")


@pytest.fixture
def admin():
    return create_account("Admin User", "admin@college.edu", "admin")


@pytest.fixture
def program():
    return create_program()


PROFILE_PAYLOAD = {
    "personalInfo": {
        "firstName": "Test",
        "lastName": "Student",
        "dateOfBirth": "2005-04-12",
        "gender": "Female",
        "nationality": "Indian",
        "address": "12 College Road",
        "city": "Pune",
        "state": "MH",
        "zipCode": "411001",
        "country": "India",
        "phoneNumber": "+91-9000000000",
    },
    "educationalBackground": {
        "highSchoolName": "City High School",
        "highSchoolGrade": 88.5,
        "highSchoolGraduationYear": 2023,
    },
}
