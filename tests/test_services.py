import io

import pytest

from admission_portal.core.errors import Forbidden, InvalidState
from admission_portal.core.permissions import ADMIN_ONLY, Principal, authorize
from admission_portal.db.session import SessionLocal
from admission_portal.models import ApplicationStatus, Sequence
from admission_portal.services import applications as lifecycle
from admission_portal.services import notifier
from admission_portal.services.blob_store import BlobTooLarge, LocalBlobStore

S = ApplicationStatus


# ---------------- Transitions ----------------

@pytest.mark.parametrize("current,target,allowed", [
    (S.DRAFT, S.SUBMITTED, True),
    (S.DRAFT, S.APPROVED, False),
    (S.DRAFT, S.UNDER_REVIEW, False),
    (S.SUBMITTED, S.SUBMITTED, False),
    (S.SUBMITTED, S.UNDER_REVIEW, True),
    (S.UNDER_REVIEW, S.DOCUMENTS_PENDING, True),
    (S.DOCUMENTS_PENDING, S.APPROVED, True),
    (S.APPROVED, S.UNDER_REVIEW, True),
    (S.REJECTED, S.DRAFT, False),
    (S.WAITLISTED, S.SUBMITTED, False),
])
def test_transition_table(current, target, allowed):
    assert lifecycle.can_transition(current, target) is allowed


def test_check_transition_reports_states():
    with pytest.raises(InvalidState) as exc:
        lifecycle.check_transition("Submitted", S.SUBMITTED)
    assert exc.value.details == {"from": "Submitted", "to": "Submitted"}


def test_application_number_format():
    assert lifecycle.format_application_number(2025, 7) == "APP-2025-00007"


def test_sequence_increments(db_session):
    values = [lifecycle.next_sequence_value(db_session, "test") for _ in range(3)]
    db_session.commit()
    assert values == [1, 2, 3]
    assert lifecycle.next_sequence_value(db_session, "other") == 1


def test_sequence_first_row_created_concurrently(db_session, monkeypatch):
    # another creator commits the first row between our UPDATE and INSERT
    other = SessionLocal()
    try:
        other.add(Sequence(name="race", value=5))
        other.commit()
    finally:
        other.close()

    real_bump = lifecycle._bump_sequence
    calls = []

    def _stale_bump(db, name):
        calls.append(name)
        if len(calls) == 1:
            return real_bump(db, "not-there-yet")
        return real_bump(db, name)

    monkeypatch.setattr(lifecycle, "_bump_sequence", _stale_bump)
    assert lifecycle.next_sequence_value(db_session, "race") == 6
    db_session.commit()
    assert db_session.get(Sequence, "race").value == 6


# ---------------- Capability check ----------------

STUDENT = Principal(account_id="s1", role="student")
STAFF = Principal(account_id="t1", role="staff")
ADMIN = Principal(account_id="a1", role="admin")


def test_authorize_roles():
    assert authorize(STAFF, roles={"staff", "admin"}) is STAFF
    with pytest.raises(Forbidden):
        authorize(STUDENT, roles={"staff", "admin"})


def test_authorize_ownership():
    authorize(STUDENT, owner_id="s1")
    authorize(STAFF, owner_id="s1")
    with pytest.raises(Forbidden):
        authorize(STUDENT, owner_id="s2")
    with pytest.raises(Forbidden):
        authorize(STAFF, owner_id="s1", bypass_roles=ADMIN_ONLY)
    authorize(ADMIN, owner_id="s1", bypass_roles=ADMIN_ONLY)


# ---------------- Blob store ----------------

def test_blob_store_put_and_delete(tmp_path):
    store = LocalBlobStore(str(tmp_path))
    key = store.put(io.BytesIO(b"data"), "scan.PDF", max_bytes=10)
    assert key.startswith("file-") and key.endswith(".pdf")
    assert store.exists(key)
    store.delete(key)
    assert not store.exists(key)
    # releasing twice is fine
    store.delete(key)


def test_blob_store_rejects_oversized(tmp_path):
    store = LocalBlobStore(str(tmp_path))
    with pytest.raises(BlobTooLarge):
        store.put(io.BytesIO(b"x" * 11), "scan.pdf", max_bytes=10)
    assert list(tmp_path.iterdir()) == []


def test_blob_store_rejects_path_keys(tmp_path):
    store = LocalBlobStore(str(tmp_path))
    with pytest.raises(ValueError):
        store.delete("../etc/passwd")


# ---------------- Notifications ----------------

def test_render_templates():
    subject, body = notifier.render("application_submitted", name="Ann", application_number="APP-2025-00001",
                                    program_name="Electrical Engineering")
    assert subject == "Application Submitted Successfully"
    assert "APP-2025-00001" in body and "Electrical Engineering" in body

    subject, body = notifier.render("document_verified", name="Ann", document_name="Passport", status="Rejected")
    assert "resubmit" in body


def test_send_email_disabled_only_logs(monkeypatch):
    def _no_smtp(*args, **kwargs):
        raise AssertionError("SMTP must not be used when email is disabled")

    monkeypatch.setattr(notifier.smtplib, "SMTP", _no_smtp)
    assert notifier.send_email("ann@example.com", "welcome", name="Ann") is True


def test_send_email_failure_is_swallowed(monkeypatch):
    def _down(*args, **kwargs):
        raise OSError("connection refused")

    monkeypatch.setattr(notifier.settings, "EMAIL_ENABLED", True)
    monkeypatch.setattr(notifier.smtplib, "SMTP", _down)
    assert notifier.send_email("ann@example.com", "welcome", name="Ann") is False


def test_unknown_template_is_not_sent():
    assert notifier.send_email("ann@example.com", "nope") is False
