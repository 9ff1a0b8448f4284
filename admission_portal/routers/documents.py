# admission_portal/routers/documents.py
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, Request, UploadFile
from sqlalchemy.orm import Session

from admission_portal.core.errors import ValidationError
from admission_portal.core.permissions import PRIVILEGED, Principal
from admission_portal.db.session import get_db
from admission_portal.models import DocumentType
from admission_portal.routers.auth import get_current_principal, require_roles
from admission_portal.schemas.document import VerifyIn
from admission_portal.services import documents as verification
from admission_portal.services import notifier
from admission_portal.services.blob_store import LocalBlobStore, get_blob_store

router = APIRouter(prefix="/documents", tags=["Documents"])

@router.post("/upload", status_code=201)
def upload_document(
    request: Request,
    document_type: DocumentType = Form(..., alias="documentType"),
    document_name: str = Form(..., alias="documentName"),
    application: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    principal: Principal = Depends(get_current_principal),
    blobs: LocalBlobStore = Depends(get_blob_store),
    db: Session = Depends(get_db),
):
    if file is None:
        raise ValidationError.single("file", "No file uploaded")

    doc = verification.upload_document(
        db,
        blobs,
        principal,
        document_type=document_type,
        document_name=document_name,
        fileobj=file.file,
        filename=file.filename,
        content_type=file.content_type,
        application_id=(application or "").strip() or None,
        request=request,
    )
    return doc.to_dict()

@router.get("/student/{student_id}")
def list_student_documents(
    student_id: str,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return [d.to_dict() for d in verification.list_by_student(db, principal, student_id)]

@router.get("/application/{application_id}")
def list_application_documents(
    application_id: str,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return [d.to_dict() for d in verification.list_by_application(db, principal, application_id)]

@router.put("/verify/{document_id}")
def verify_document(
    document_id: str,
    payload: VerifyIn,
    request: Request,
    background_tasks: BackgroundTasks,
    principal: Principal = Depends(require_roles(*PRIVILEGED)),
    db: Session = Depends(get_db),
):
    doc = verification.verify_document(db, principal, document_id, payload.status, payload.remarks, request=request)
    if doc.student:
        background_tasks.add_task(
            notifier.send_email,
            doc.student.email,
            "document_verified",
            name=doc.student.name,
            document_name=doc.document_name,
            status=doc.status,
        )
    return doc.to_dict()

@router.delete("/{document_id}")
def delete_document(
    document_id: str,
    request: Request,
    principal: Principal = Depends(get_current_principal),
    blobs: LocalBlobStore = Depends(get_blob_store),
    db: Session = Depends(get_db),
):
    verification.delete_document(db, blobs, principal, document_id, request=request)
    return {"message": "Document removed"}
