# admission_portal/schemas/program.py
from datetime import date
from typing import Optional

from pydantic import Field, field_validator

from admission_portal.models.program import ProgramStatus, ProgramType
from admission_portal.schemas.base import CamelModel


class ProgramIn(CamelModel):
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    program_type: ProgramType
    department: str = Field(..., min_length=1)
    duration: int = Field(..., ge=0)
    seats: int = Field(..., ge=0)
    application_fee: float = Field(..., ge=0)
    tuition_fee: float = Field(..., ge=0)
    eligibility: str = Field(..., min_length=1)
    application_deadline: date
    start_date: date
    status: ProgramStatus = ProgramStatus.ACTIVE

    @field_validator("name", "description", "department", "eligibility")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v


class ProgramUpdate(CamelModel):
    # PATCH semantics: only fields that are sent get changed
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    program_type: Optional[ProgramType] = None
    department: Optional[str] = Field(default=None, min_length=1)
    duration: Optional[int] = Field(default=None, ge=0)
    seats: Optional[int] = Field(default=None, ge=0)
    application_fee: Optional[float] = Field(default=None, ge=0)
    tuition_fee: Optional[float] = Field(default=None, ge=0)
    eligibility: Optional[str] = Field(default=None, min_length=1)
    application_deadline: Optional[date] = None
    start_date: Optional[date] = None
    status: Optional[ProgramStatus] = None
