# admission_portal/models/document.py
from enum import Enum

from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey, func, text
from sqlalchemy.orm import relationship

from admission_portal.db.base import Base
from admission_portal.utils.datetime import iso
from admission_portal.utils.ids import new_id


class DocumentType(str, Enum):
    PHOTO = "Photo"
    ID_PROOF = "ID Proof"
    ADDRESS_PROOF = "Address Proof"
    BIRTH_CERTIFICATE = "Birth Certificate"
    HIGH_SCHOOL_CERTIFICATE = "High School Certificate"
    HIGH_SCHOOL_TRANSCRIPTS = "High School Transcripts"
    UNDERGRADUATE_CERTIFICATE = "Undergraduate Certificate"
    UNDERGRADUATE_TRANSCRIPTS = "Undergraduate Transcripts"
    POSTGRADUATE_CERTIFICATE = "Postgraduate Certificate"
    POSTGRADUATE_TRANSCRIPTS = "Postgraduate Transcripts"
    ENTRANCE_EXAM_SCORE = "Entrance Exam Score"
    RECOMMENDATION_LETTER = "Recommendation Letter"
    STATEMENT_OF_PURPOSE = "Statement of Purpose"
    OTHER = "Other"


class VerificationStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class Document(Base):
    __tablename__ = "documents"

    id = Column(String(36), primary_key=True, default=new_id)
    student_id = Column(String(36), ForeignKey("accounts.id"), nullable=False, index=True)
    application_id = Column(String(36), ForeignKey("applications.id"), nullable=True, index=True)

    document_type = Column(String(64), nullable=False)
    document_name = Column(String(255), nullable=False)
    file_path = Column(String(512), nullable=False)  # blob store key
    upload_date = Column(DateTime(timezone=True), server_default=func.now())

    # verified is true iff status == Approved; both are only written together
    verified = Column(Boolean, nullable=False, server_default=text("0"), default=False)
    verified_by = Column(String(36), ForeignKey("accounts.id"), nullable=True)
    verification_date = Column(DateTime(timezone=True), nullable=True)
    status = Column(String(16), nullable=False, default=VerificationStatus.PENDING.value)
    remarks = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    student = relationship("Account", foreign_keys=[student_id], lazy="selectin")

    def to_dict(self):
        return {
            "id": self.id,
            "studentId": self.student_id,
            "applicationId": self.application_id,
            "documentType": self.document_type,
            "documentName": self.document_name,
            "filePath": self.file_path,
            "uploadDate": iso(self.upload_date),
            "verified": bool(self.verified),
            "verifiedBy": self.verified_by,
            "verificationDate": iso(self.verification_date),
            "status": self.status,
            "remarks": self.remarks,
        }

    def snapshot(self):
        return {
            "status": self.status,
            "verified": bool(self.verified),
            "verified_by": self.verified_by,
            "verification_date": iso(self.verification_date),
            "remarks": self.remarks,
            "file_path": self.file_path,
        }

    def __repr__(self) -> str:
        return f"<Document(id={self.id}, type='{self.document_type}', status='{self.status}')>"
