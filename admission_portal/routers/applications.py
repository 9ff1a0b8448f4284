# admission_portal/routers/applications.py
from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy.orm import Session

from admission_portal.core.permissions import PRIVILEGED, STUDENT, Principal
from admission_portal.db.session import get_db
from admission_portal.models import Application
from admission_portal.routers.auth import get_current_principal, require_roles
from admission_portal.schemas.application import ApplicationCreate, PaymentUpdate, StatusUpdate
from admission_portal.services import applications as lifecycle
from admission_portal.services import notifier
from admission_portal.utils.datetime import utcnow

router = APIRouter(prefix="/applications", tags=["Applications"])

def _notify(background_tasks: BackgroundTasks, app_row: Application, template: str, **extra):
    student = app_row.student
    if not student:
        return
    background_tasks.add_task(
        notifier.send_email,
        student.email,
        template,
        name=student.name,
        application_number=app_row.application_number,
        program_name=app_row.program.name if app_row.program else "",
        **extra,
    )

# ---------------- Reads ----------------

@router.get("")
@router.get("/", include_in_schema=False)
def list_applications(
    principal: Principal = Depends(require_roles(*PRIVILEGED)),
    db: Session = Depends(get_db),
):
    return [a.to_dict() for a in lifecycle.list_all(db, principal)]

@router.get("/student/{student_id}")
def list_student_applications(
    student_id: str,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return [a.to_dict() for a in lifecycle.list_by_student(db, principal, student_id)]

@router.get("/{application_id}")
def get_application(
    application_id: str,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return lifecycle.get_for_caller(db, principal, application_id).to_dict()

# ---------------- Lifecycle ----------------

@router.post("", status_code=201)
@router.post("/", status_code=201, include_in_schema=False)
def create_application(
    payload: ApplicationCreate,
    request: Request,
    principal: Principal = Depends(require_roles(STUDENT)),
    db: Session = Depends(get_db),
):
    return lifecycle.create_application(db, principal, payload.program, request=request).to_dict()

@router.put("/submit/{application_id}")
def submit_application(
    application_id: str,
    request: Request,
    background_tasks: BackgroundTasks,
    principal: Principal = Depends(require_roles(STUDENT)),
    db: Session = Depends(get_db),
):
    app_row = lifecycle.submit_application(db, principal, application_id, request=request)
    _notify(background_tasks, app_row, "application_submitted")
    return app_row.to_dict()

@router.put("/status/{application_id}")
def update_application_status(
    application_id: str,
    payload: StatusUpdate,
    request: Request,
    background_tasks: BackgroundTasks,
    principal: Principal = Depends(require_roles(*PRIVILEGED)),
    db: Session = Depends(get_db),
):
    app_row = lifecycle.update_status(
        db, principal, application_id, payload.status, payload.review_notes, request=request,
    )
    _notify(background_tasks, app_row, "application_status_update", status=app_row.status)
    return app_row.to_dict()

@router.put("/payment/{application_id}")
def update_payment(
    application_id: str,
    payload: PaymentUpdate,
    request: Request,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    details = None
    if payload.payment_details is not None:
        details = payload.payment_details.model_dump(mode="json", by_alias=True)
        if not details.get("paymentDate"):
            details["paymentDate"] = utcnow().isoformat()
    app_row = lifecycle.update_payment(
        db, principal, application_id, payload.payment_status, details, request=request,
    )
    return app_row.to_dict()
