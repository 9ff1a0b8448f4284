# admission_portal/routers/journal.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from admission_portal.core.errors import NotFound
from admission_portal.core.permissions import PRIVILEGED
from admission_portal.db.session import get_db
from admission_portal.models.audit import AuditLog
from admission_portal.routers.auth import require_roles
from admission_portal.services.audit import verify_audit

router = APIRouter(prefix="/journal", tags=["Journal"])

# only staff/admin may read the journal
RequireStaff = Depends(require_roles(*PRIVILEGED))

SORT_COLUMNS = {
    "id": AuditLog.id,
    "occurred_at": AuditLog.occurred_at,
    "action": AuditLog.action,
    "status": AuditLog.status,
    "target_id": AuditLog.target_id,
}

# ===================== LIST =====================
@router.get("", dependencies=[RequireStaff])
@router.get("/", dependencies=[RequireStaff], include_in_schema=False)
def list_logs(
    db: Session = Depends(get_db),
    action: Optional[str] = Query(None),
    target_type: Optional[str] = Query(None),
    target_id: Optional[str] = Query(None),
    actor_id: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=500),
    sort: Optional[str] = Query(None, description="field:dir, e.g. occurred_at:desc"),
):
    qset = db.query(AuditLog)

    if action:
        qset = qset.filter(AuditLog.action == action)
    if target_type:
        qset = qset.filter(AuditLog.target_type == target_type)
    if target_id:
        qset = qset.filter(AuditLog.target_id == target_id)
    if actor_id:
        qset = qset.filter(AuditLog.actor_id == actor_id)

    order_col = AuditLog.id
    order_dir = "desc"
    if sort:
        field, dir_ = (sort.split(":") + [""])[:2]
        order_col = SORT_COLUMNS.get(field.strip(), AuditLog.id)
        order_dir = "asc" if dir_.strip().lower() == "asc" else "desc"

    total = qset.count()
    qset = qset.order_by(order_col.asc() if order_dir == "asc" else order_col.desc())
    items = (
        qset.offset((page - 1) * page_size)
           .limit(page_size)
           .all()
    )

    return {
        "total": total,
        "page": page,
        "size": page_size,
        "items": [i.to_dict() for i in items],
    }

# ===================== DETAIL =====================
@router.get("/detail/{log_id}", dependencies=[RequireStaff])
def log_detail(log_id: int, db: Session = Depends(get_db)):
    row = db.get(AuditLog, log_id)
    if not row:
        raise NotFound("Log entry")
    return {**row.to_dict(), "signature_valid": verify_audit(row)}
