# admission_portal/schemas/application.py
from datetime import datetime
from typing import Optional

from pydantic import Field

from admission_portal.models.application import ApplicationStatus, PaymentStatus
from admission_portal.schemas.base import CamelModel


class ApplicationCreate(CamelModel):
    program: str = Field(..., min_length=1, description="Program id")


class StatusUpdate(CamelModel):
    status: ApplicationStatus
    review_notes: Optional[str] = None


class PaymentDetails(CamelModel):
    amount: float = Field(..., ge=0)
    transaction_id: str = Field(..., min_length=1)
    payment_date: Optional[datetime] = None
    payment_method: str = Field(..., min_length=1)


class PaymentUpdate(CamelModel):
    payment_status: PaymentStatus
    payment_details: Optional[PaymentDetails] = None
