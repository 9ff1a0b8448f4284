# admission_portal/schemas/document.py
from typing import Optional

from admission_portal.models.document import VerificationStatus
from admission_portal.schemas.base import CamelModel


class VerifyIn(CamelModel):
    status: VerificationStatus
    remarks: Optional[str] = None
