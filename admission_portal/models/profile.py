# admission_portal/models/profile.py
from sqlalchemy import Column, String, JSON, DateTime, ForeignKey, func

from admission_portal.db.base import Base
from admission_portal.utils.datetime import iso
from admission_portal.utils.ids import new_id


class StudentProfile(Base):
    __tablename__ = "student_profiles"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("accounts.id"), unique=True, nullable=False)

    personal_info = Column(JSON, nullable=False)
    educational_background = Column(JSON, nullable=True)
    # ordered Document ids; always reassign the list so the JSON column is flagged dirty
    document_ids = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "personalInfo": self.personal_info,
            "educationalBackground": self.educational_background,
            "documents": list(self.document_ids or []),
            "createdAt": iso(self.created_at),
            "updatedAt": iso(self.updated_at),
        }
