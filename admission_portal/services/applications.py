# admission_portal/services/applications.py
"""
Application lifecycle: creation, submission, review decisions and payment.

Status changes go through ALLOWED_TRANSITIONS; anything not listed there is
rejected with InvalidState. Decided statuses may be re-opened by staff.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import Request
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from admission_portal.core.errors import Conflict, InvalidState, NotFound, ValidationError
from admission_portal.core.permissions import PRIVILEGED, STUDENT, Principal, authorize
from admission_portal.models import Application, ApplicationStatus, PaymentStatus, Program, Sequence
from admission_portal.services.audit import write_audit
from admission_portal.utils.datetime import utcnow

log = logging.getLogger(__name__)

APPLICATION_SEQUENCE = "application_number"

REVIEW_STATUSES = frozenset({
    ApplicationStatus.UNDER_REVIEW,
    ApplicationStatus.DOCUMENTS_PENDING,
    ApplicationStatus.REJECTED,
    ApplicationStatus.APPROVED,
    ApplicationStatus.WAITLISTED,
})

DECISION_STATUSES = frozenset({
    ApplicationStatus.REJECTED,
    ApplicationStatus.APPROVED,
    ApplicationStatus.WAITLISTED,
})

ALLOWED_TRANSITIONS = {
    ApplicationStatus.DRAFT: frozenset({ApplicationStatus.SUBMITTED}),
    ApplicationStatus.SUBMITTED: REVIEW_STATUSES,
    ApplicationStatus.UNDER_REVIEW: REVIEW_STATUSES,
    ApplicationStatus.DOCUMENTS_PENDING: REVIEW_STATUSES,
    # decisions can be re-opened
    ApplicationStatus.REJECTED: REVIEW_STATUSES,
    ApplicationStatus.APPROVED: REVIEW_STATUSES,
    ApplicationStatus.WAITLISTED: REVIEW_STATUSES,
}


def can_transition(current: ApplicationStatus, target: ApplicationStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def check_transition(current: str, target: ApplicationStatus) -> None:
    current_status = ApplicationStatus(current)
    if not can_transition(current_status, target):
        raise InvalidState(
            f"Cannot move application from '{current_status.value}' to '{target.value}'",
            details={"from": current_status.value, "to": target.value},
        )


# ---------------- Application number ----------------

def _bump_sequence(db: Session, name: str) -> int:
    """Increment the counter row in place; returns the number of rows touched."""
    result = db.execute(
        update(Sequence).where(Sequence.name == name).values(value=Sequence.value + 1)
    )
    return result.rowcount


def next_sequence_value(db: Session, name: str) -> int:
    """
    Atomically bump a named counter inside the caller's transaction.
    The UPDATE takes the row lock first, so two creators never read the same value.
    """
    if _bump_sequence(db, name) == 0:
        try:
            with db.begin_nested():
                db.add(Sequence(name=name, value=1))
            return 1
        except IntegrityError:
            # another creator inserted the first row; increment theirs instead
            log.info("Sequence %s created concurrently; retrying increment", name)
            _bump_sequence(db, name)
    return db.execute(select(Sequence.value).where(Sequence.name == name)).scalar_one()


def format_application_number(year: int, seq: int) -> str:
    return f"APP-{year}-{seq:05d}"


# ---------------- Lookups ----------------

def get_application(db: Session, application_id: str) -> Application:
    app_row = db.get(Application, application_id)
    if not app_row:
        raise NotFound("Application")
    return app_row


def get_for_caller(db: Session, principal: Principal, application_id: str) -> Application:
    app_row = get_application(db, application_id)
    authorize(principal, owner_id=app_row.student_id)
    return app_row


def list_by_student(db: Session, principal: Principal, student_id: str) -> List[Application]:
    authorize(principal, owner_id=student_id)
    return (
        db.query(Application)
        .filter(Application.student_id == student_id)
        .order_by(Application.created_at.desc())
        .all()
    )


def list_all(db: Session, principal: Principal) -> List[Application]:
    authorize(principal, roles=PRIVILEGED)
    return db.query(Application).order_by(Application.created_at.desc()).all()


# ---------------- Mutations ----------------

def create_application(
    db: Session,
    principal: Principal,
    program_id: str,
    request: Optional[Request] = None,
) -> Application:
    authorize(principal, roles={STUDENT})

    if not db.get(Program, program_id):
        raise NotFound("Program")

    existing = (
        db.query(Application)
        .filter(Application.student_id == principal.account_id, Application.program_id == program_id)
        .first()
    )
    if existing:
        raise Conflict("You have already applied for this program")

    now = utcnow()
    seq = next_sequence_value(db, APPLICATION_SEQUENCE)
    app_row = Application(
        student_id=principal.account_id,
        program_id=program_id,
        application_number=format_application_number(now.year, seq),
        status=ApplicationStatus.DRAFT.value,
        payment_status=PaymentStatus.PENDING.value,
    )
    db.add(app_row)
    try:
        db.flush()
    except IntegrityError:
        # a concurrent create for the same (student, program) won the race
        db.rollback()
        raise Conflict("You have already applied for this program")

    write_audit(
        db,
        action="APPLICATION_CREATE",
        target_type="Application",
        target_id=app_row.id,
        new_values={"application_number": app_row.application_number, "program_id": program_id, **app_row.snapshot()},
        request=request,
        principal=principal,
    )
    db.commit()
    db.refresh(app_row)
    log.info("Application %s created by %s", app_row.application_number, principal.account_id)
    return app_row


def submit_application(
    db: Session,
    principal: Principal,
    application_id: str,
    request: Optional[Request] = None,
) -> Application:
    app_row = get_application(db, application_id)
    # owner-only; staff cannot submit on a student's behalf
    authorize(principal, roles={STUDENT}, owner_id=app_row.student_id, bypass_roles=())
    check_transition(app_row.status, ApplicationStatus.SUBMITTED)

    prev = app_row.snapshot()
    app_row.status = ApplicationStatus.SUBMITTED.value
    app_row.submission_date = utcnow()

    write_audit(
        db,
        action="APPLICATION_SUBMIT",
        target_type="Application",
        target_id=app_row.id,
        prev_values=prev,
        new_values=app_row.snapshot(),
        request=request,
        principal=principal,
    )
    db.commit()
    db.refresh(app_row)
    return app_row


def update_status(
    db: Session,
    principal: Principal,
    application_id: str,
    new_status: ApplicationStatus,
    review_notes: Optional[str] = None,
    request: Optional[Request] = None,
) -> Application:
    authorize(principal, roles=PRIVILEGED)
    if new_status not in REVIEW_STATUSES:
        raise ValidationError.single("status", "Invalid status")

    app_row = get_application(db, application_id)
    check_transition(app_row.status, new_status)

    prev = app_row.snapshot()
    now = utcnow()
    app_row.status = new_status.value
    app_row.reviewed_by = principal.account_id
    if review_notes:
        app_row.review_notes = review_notes
    if new_status in DECISION_STATUSES:
        app_row.decision_date = now

    write_audit(
        db,
        action="APPLICATION_STATUS",
        target_type="Application",
        target_id=app_row.id,
        prev_values=prev,
        new_values=app_row.snapshot(),
        request=request,
        principal=principal,
    )
    db.commit()
    db.refresh(app_row)
    log.info("Application %s -> %s by %s", app_row.application_number, new_status.value, principal.account_id)
    return app_row


def update_payment(
    db: Session,
    principal: Principal,
    application_id: str,
    payment_status: PaymentStatus,
    payment_details: Optional[dict] = None,
    request: Optional[Request] = None,
) -> Application:
    app_row = get_application(db, application_id)
    authorize(principal, owner_id=app_row.student_id)

    prev = app_row.snapshot()
    app_row.payment_status = payment_status.value
    if payment_details is not None:
        # replaced wholesale, never merged
        app_row.payment_details = dict(payment_details)

    write_audit(
        db,
        action="APPLICATION_PAYMENT",
        target_type="Application",
        target_id=app_row.id,
        prev_values=prev,
        new_values=app_row.snapshot(),
        request=request,
        principal=principal,
    )
    db.commit()
    db.refresh(app_row)
    return app_row
