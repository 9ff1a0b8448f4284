# admission_portal/schemas/profile.py
from datetime import date
from typing import Optional

from pydantic import Field

from admission_portal.schemas.base import CamelModel


class PersonalInfo(CamelModel):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    date_of_birth: date
    gender: str = Field(..., min_length=1)
    nationality: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zip_code: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)
    phone_number: str = Field(..., min_length=1)


class EducationalBackground(CamelModel):
    high_school_name: str = Field(..., min_length=1)
    high_school_grade: float
    high_school_graduation_year: int
    previous_institution: Optional[str] = None
    previous_qualification: Optional[str] = None
    previous_grade: Optional[float] = None
    previous_graduation_year: Optional[int] = None


class ProfileIn(CamelModel):
    personal_info: PersonalInfo
    educational_background: Optional[EducationalBackground] = None


class ProfileUpdate(CamelModel):
    personal_info: Optional[PersonalInfo] = None
    educational_background: Optional[EducationalBackground] = None
