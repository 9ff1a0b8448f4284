# admission_portal/models/program.py
from enum import Enum

from sqlalchemy import Column, String, Integer, Numeric, Text, Date, DateTime, func

from admission_portal.db.base import Base
from admission_portal.utils.datetime import iso
from admission_portal.utils.ids import new_id


class ProgramType(str, Enum):
    BTECH = "BTech"
    MTECH = "MTech"
    PHD = "PhD"
    DIPLOMA = "Diploma"


class ProgramStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class Program(Base):
    __tablename__ = "programs"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    program_type = Column(String(16), nullable=False)
    department = Column(String(255), nullable=False)
    duration = Column(Integer, nullable=False)  # years
    seats = Column(Integer, nullable=False)
    application_fee = Column(Numeric(12, 2), nullable=False)
    tuition_fee = Column(Numeric(12, 2), nullable=False)
    eligibility = Column(Text, nullable=False)
    application_deadline = Column(Date, nullable=False)
    start_date = Column(Date, nullable=False)
    status = Column(String(16), nullable=False, default=ProgramStatus.ACTIVE.value, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "programType": self.program_type,
            "department": self.department,
            "duration": self.duration,
            "seats": self.seats,
            "applicationFee": float(self.application_fee) if self.application_fee is not None else None,
            "tuitionFee": float(self.tuition_fee) if self.tuition_fee is not None else None,
            "eligibility": self.eligibility,
            "applicationDeadline": iso(self.application_deadline),
            "startDate": iso(self.start_date),
            "status": self.status,
            "createdAt": iso(self.created_at),
            "updatedAt": iso(self.updated_at),
        }

    def summary(self):
        return {
            "id": self.id,
            "name": self.name,
            "programType": self.program_type,
            "department": self.department,
        }

    def __repr__(self) -> str:
        return f"<Program(id={self.id}, name='{self.name}', status='{self.status}')>"
