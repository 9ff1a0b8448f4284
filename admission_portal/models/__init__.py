# Aggregator: allows "from admission_portal.models import Account, Program, Application, ..."

from admission_portal.db.base import Base

from .account import Account, Role
from .program import Program, ProgramType, ProgramStatus
from .application import Application, ApplicationStatus, PaymentStatus, Sequence
from .document import Document, DocumentType, VerificationStatus
from .profile import StudentProfile
from .audit import AuditLog

__all__ = [
    "Base",
    "Account",
    "Role",
    "Program",
    "ProgramType",
    "ProgramStatus",
    "Application",
    "ApplicationStatus",
    "PaymentStatus",
    "Sequence",
    "Document",
    "DocumentType",
    "VerificationStatus",
    "StudentProfile",
    "AuditLog",
]
