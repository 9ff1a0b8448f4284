# admission_portal/routers/programs.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from admission_portal.core.errors import Conflict, NotFound
from admission_portal.core.permissions import PRIVILEGED, Principal
from admission_portal.db.session import get_db
from admission_portal.models import Application, Program, ProgramStatus
from admission_portal.routers.auth import require_admin, require_roles
from admission_portal.schemas.program import ProgramIn, ProgramUpdate
from admission_portal.services.audit import write_audit

router = APIRouter(prefix="/programs", tags=["Programs"])

def _get_program(db: Session, program_id: str) -> Program:
    program = db.get(Program, program_id)
    if not program:
        raise NotFound("Program")
    return program

def _column_value(v):
    return v.value if hasattr(v, "value") else v

# ---------------- Reads ----------------

@router.get("")
@router.get("/", include_in_schema=False)
def list_active_programs(db: Session = Depends(get_db)):
    rows = (
        db.query(Program)
        .filter(Program.status == ProgramStatus.ACTIVE.value)
        .order_by(Program.name.asc())
        .all()
    )
    return [p.to_dict() for p in rows]

@router.get("/all")
def list_all_programs(
    principal: Principal = Depends(require_roles(*PRIVILEGED)),
    db: Session = Depends(get_db),
):
    return [p.to_dict() for p in db.query(Program).order_by(Program.name.asc()).all()]

@router.get("/{program_id}")
def get_program(program_id: str, db: Session = Depends(get_db)):
    return _get_program(db, program_id).to_dict()

# ---------------- Admin ----------------

@router.post("", status_code=201)
@router.post("/", status_code=201, include_in_schema=False)
def create_program(
    payload: ProgramIn,
    request: Request,
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    data = {k: _column_value(v) for k, v in payload.model_dump().items()}
    program = Program(**data)
    db.add(program)
    db.flush()
    write_audit(
        db,
        action="PROGRAM_CREATE",
        target_type="Program",
        target_id=program.id,
        new_values={"name": program.name, "status": program.status},
        request=request,
    )
    db.commit()
    db.refresh(program)
    return program.to_dict()

@router.put("/{program_id}")
def update_program(
    program_id: str,
    payload: ProgramUpdate,
    request: Request,
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    program = _get_program(db, program_id)
    changes = {k: _column_value(v) for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
    prev = {k: _column_value(getattr(program, k)) for k in changes}
    for k, v in changes.items():
        setattr(program, k, v)

    write_audit(
        db,
        action="PROGRAM_UPDATE",
        target_type="Program",
        target_id=program.id,
        prev_values={k: str(v) for k, v in prev.items()},
        new_values={k: str(v) for k, v in changes.items()},
        request=request,
    )
    db.commit()
    db.refresh(program)
    return program.to_dict()

@router.delete("/{program_id}")
def delete_program(
    program_id: str,
    request: Request,
    principal: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    program = _get_program(db, program_id)
    if db.query(Application).filter(Application.program_id == program_id).first():
        raise Conflict("Program has applications; set it Inactive instead")

    write_audit(
        db,
        action="PROGRAM_DELETE",
        target_type="Program",
        target_id=program.id,
        prev_values={"name": program.name, "status": program.status},
        request=request,
    )
    db.delete(program)
    db.commit()
    return {"message": "Program removed"}
