# admission_portal/services/documents.py
"""
Document upload metadata and the verify/reject workflow.

The blob store and the database never share a transaction, so upload and
delete run as small sagas:

- upload: store blob -> persist metadata; if persisting fails, release the blob.
- delete: release blob -> delete metadata; if the release fails, keep the metadata.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import BinaryIO, List, Optional

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from admission_portal.core.config import settings
from admission_portal.core.errors import InternalError, NotFound, ValidationError
from admission_portal.core.permissions import PRIVILEGED, Principal, authorize
from admission_portal.models import Application, Document, DocumentType, StudentProfile, VerificationStatus
from admission_portal.services.audit import write_audit
from admission_portal.services.blob_store import BlobTooLarge, LocalBlobStore
from admission_portal.utils.datetime import utcnow

log = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpeg", ".jpg", ".png", ".pdf"}
ALLOWED_CONTENT_TYPES = re.compile(r"jpeg|jpg|png|pdf")


def validate_upload(filename: Optional[str], content_type: Optional[str]) -> None:
    if not filename:
        raise ValidationError.single("file", "No file uploaded")
    ext = Path(filename).suffix.lower()
    if ext not in ALLOWED_EXTENSIONS or not ALLOWED_CONTENT_TYPES.search((content_type or "").lower()):
        raise ValidationError.single("file", "Only .jpeg, .jpg, .png, and .pdf files are allowed")


def get_document(db: Session, document_id: str) -> Document:
    doc = db.get(Document, document_id)
    if not doc:
        raise NotFound("Document")
    return doc


# ---------------- Profile document list ----------------

def _attach_to_profile(db: Session, student_id: str, document_id: str) -> None:
    profile = db.query(StudentProfile).filter(StudentProfile.user_id == student_id).first()
    if profile:
        profile.document_ids = [*(profile.document_ids or []), document_id]


def _detach_from_profile(db: Session, student_id: str, document_id: str) -> None:
    profile = db.query(StudentProfile).filter(StudentProfile.user_id == student_id).first()
    if profile and document_id in (profile.document_ids or []):
        profile.document_ids = [d for d in profile.document_ids if d != document_id]


# ---------------- Upload ----------------

def upload_document(
    db: Session,
    blobs: LocalBlobStore,
    principal: Principal,
    *,
    document_type: DocumentType,
    document_name: str,
    fileobj: BinaryIO,
    filename: Optional[str],
    content_type: Optional[str],
    application_id: Optional[str] = None,
    request: Optional[Request] = None,
) -> Document:
    validate_upload(filename, content_type)
    if not (document_name or "").strip():
        raise ValidationError.single("documentName", "Document name is required")

    if application_id:
        app_row = db.get(Application, application_id)
        if not app_row:
            raise NotFound("Application")
        authorize(principal, owner_id=app_row.student_id)

    try:
        key = blobs.put(fileobj, filename, max_bytes=settings.MAX_UPLOAD_BYTES)
    except BlobTooLarge:
        raise ValidationError.single("file", f"File too large (max {settings.MAX_UPLOAD_BYTES} bytes)")
    except OSError:
        log.exception("Could not store uploaded file %s", filename)
        raise InternalError()

    try:
        doc = Document(
            student_id=principal.account_id,
            application_id=application_id or None,
            document_type=document_type.value,
            document_name=document_name.strip(),
            file_path=key,
            upload_date=utcnow(),
            verified=False,
            status=VerificationStatus.PENDING.value,
        )
        db.add(doc)
        db.flush()
        _attach_to_profile(db, principal.account_id, doc.id)
        write_audit(
            db,
            action="DOCUMENT_UPLOAD",
            target_type="Document",
            target_id=doc.id,
            new_values={"document_type": doc.document_type, "application_id": doc.application_id, **doc.snapshot()},
            request=request,
            principal=principal,
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        log.exception("Saving document metadata failed; releasing blob %s", key)
        try:
            blobs.delete(key)
        except OSError:
            log.exception("Compensating release of blob %s failed; blob is orphaned", key)
        raise InternalError()

    db.refresh(doc)
    return doc


# ---------------- Verify ----------------

def verify_document(
    db: Session,
    principal: Principal,
    document_id: str,
    new_status: VerificationStatus,
    remarks: Optional[str] = None,
    request: Optional[Request] = None,
) -> Document:
    authorize(principal, roles=PRIVILEGED)
    doc = get_document(db, document_id)

    prev = doc.snapshot()
    # one record write: status, verified, verifiedBy, verificationDate (+ remarks)
    doc.status = new_status.value
    doc.verified = new_status == VerificationStatus.APPROVED
    doc.verified_by = principal.account_id
    doc.verification_date = utcnow()
    if remarks:
        doc.remarks = remarks

    write_audit(
        db,
        action="DOCUMENT_VERIFY",
        target_type="Document",
        target_id=doc.id,
        prev_values=prev,
        new_values=doc.snapshot(),
        request=request,
        principal=principal,
    )
    db.commit()
    db.refresh(doc)
    return doc


# ---------------- Delete ----------------

def delete_document(
    db: Session,
    blobs: LocalBlobStore,
    principal: Principal,
    document_id: str,
    request: Optional[Request] = None,
) -> None:
    doc = get_document(db, document_id)
    authorize(principal, owner_id=doc.student_id)

    try:
        blobs.delete(doc.file_path)
    except (OSError, ValueError):
        log.exception("Releasing blob %s failed; keeping document %s", doc.file_path, doc.id)
        raise InternalError("Could not remove the stored file")

    prev = doc.snapshot()
    _detach_from_profile(db, doc.student_id, doc.id)
    db.delete(doc)
    write_audit(
        db,
        action="DOCUMENT_DELETE",
        target_type="Document",
        target_id=document_id,
        prev_values=prev,
        request=request,
        principal=principal,
    )
    db.commit()


# ---------------- Reads ----------------

def list_by_student(db: Session, principal: Principal, student_id: str) -> List[Document]:
    authorize(principal, owner_id=student_id)
    return (
        db.query(Document)
        .filter(Document.student_id == student_id)
        .order_by(Document.upload_date.asc())
        .all()
    )


def list_by_application(db: Session, principal: Principal, application_id: str) -> List[Document]:
    app_row = db.get(Application, application_id)
    if not app_row:
        raise NotFound("Application")
    authorize(principal, owner_id=app_row.student_id)
    return (
        db.query(Document)
        .filter(Document.application_id == application_id)
        .order_by(Document.upload_date.asc())
        .all()
    )
