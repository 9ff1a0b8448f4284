# admission_portal/models/application.py
from enum import Enum

from sqlalchemy import (
    Column, String, Text, DateTime, Integer, JSON, ForeignKey, UniqueConstraint, func
)
from sqlalchemy.orm import relationship

from admission_portal.db.base import Base
from admission_portal.utils.datetime import iso
from admission_portal.utils.ids import new_id


class ApplicationStatus(str, Enum):
    DRAFT = "Draft"
    SUBMITTED = "Submitted"
    UNDER_REVIEW = "Under Review"
    DOCUMENTS_PENDING = "Documents Pending"
    REJECTED = "Rejected"
    APPROVED = "Approved"
    WAITLISTED = "Waitlisted"


class PaymentStatus(str, Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"


class Application(Base):
    __tablename__ = "applications"

    id = Column(String(36), primary_key=True, default=new_id)
    student_id = Column(String(36), ForeignKey("accounts.id"), nullable=False, index=True)
    program_id = Column(String(36), ForeignKey("programs.id"), nullable=False, index=True)
    application_number = Column(String(32), unique=True, nullable=False)

    status = Column(String(32), nullable=False, default=ApplicationStatus.DRAFT.value)
    reviewed_by = Column(String(36), ForeignKey("accounts.id"), nullable=True)
    review_notes = Column(Text, nullable=True)
    submission_date = Column(DateTime(timezone=True), nullable=True)
    decision_date = Column(DateTime(timezone=True), nullable=True)

    payment_status = Column(String(16), nullable=False, default=PaymentStatus.PENDING.value)
    # {amount, transactionId, paymentDate, paymentMethod}
    payment_details = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    student = relationship("Account", foreign_keys=[student_id], lazy="selectin")
    program = relationship("Program", lazy="selectin")
    reviewer = relationship("Account", foreign_keys=[reviewed_by], lazy="selectin")

    __table_args__ = (
        UniqueConstraint("student_id", "program_id", name="uq_applications_student_program"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "applicationNumber": self.application_number,
            "studentId": self.student_id,
            "programId": self.program_id,
            "student": self.student.summary() if self.student else None,
            "program": self.program.summary() if self.program else None,
            "status": self.status,
            "reviewedBy": self.reviewed_by,
            "reviewerName": self.reviewer.name if self.reviewer else None,
            "reviewNotes": self.review_notes,
            "submissionDate": iso(self.submission_date),
            "decisionDate": iso(self.decision_date),
            "paymentStatus": self.payment_status,
            "paymentDetails": self.payment_details,
            "createdAt": iso(self.created_at),
            "updatedAt": iso(self.updated_at),
        }

    def snapshot(self):
        """Flat view of the mutable fields, for the audit journal."""
        return {
            "status": self.status,
            "reviewed_by": self.reviewed_by,
            "review_notes": self.review_notes,
            "submission_date": iso(self.submission_date),
            "decision_date": iso(self.decision_date),
            "payment_status": self.payment_status,
            "payment_details": self.payment_details,
        }

    def __repr__(self) -> str:
        return f"<Application(id={self.id}, number='{self.application_number}', status='{self.status}')>"


class Sequence(Base):
    """Named counter; incremented in place so concurrent creators never read the same value."""
    __tablename__ = "sequences"

    name = Column(String(64), primary_key=True)
    value = Column(Integer, nullable=False, default=0)
