# admission_portal/routers/users.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from admission_portal.core.errors import Conflict, Forbidden, NotFound
from admission_portal.core.permissions import ADMIN, ADMIN_ONLY, PRIVILEGED, STUDENT, Principal, authorize
from admission_portal.db.session import get_db
from admission_portal.models import Account, StudentProfile
from admission_portal.routers.auth import email_taken, get_current_principal, require_roles
from admission_portal.schemas.auth import UserUpdateIn
from admission_portal.schemas.profile import ProfileIn, ProfileUpdate
from admission_portal.services.audit import write_audit

router = APIRouter(prefix="/users", tags=["Users"])

# ---------------- Student profile ----------------

@router.post("/profile", status_code=201)
def create_profile(
    payload: ProfileIn,
    request: Request,
    principal: Principal = Depends(require_roles(STUDENT)),
    db: Session = Depends(get_db),
):
    if db.query(StudentProfile).filter(StudentProfile.user_id == principal.account_id).first():
        raise Conflict("Profile already exists")

    profile = StudentProfile(
        user_id=principal.account_id,
        personal_info=payload.personal_info.model_dump(mode="json", by_alias=True),
        educational_background=(
            payload.educational_background.model_dump(mode="json", by_alias=True)
            if payload.educational_background else None
        ),
        document_ids=[],
    )
    db.add(profile)
    write_audit(db, action="PROFILE_CREATE", target_type="StudentProfile", target_id=principal.account_id, request=request)
    db.commit()
    db.refresh(profile)
    return profile.to_dict()

@router.get("/profile/{user_id}")
def get_profile(
    user_id: str,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    authorize(principal, owner_id=user_id)
    profile = db.query(StudentProfile).filter(StudentProfile.user_id == user_id).first()
    if not profile:
        raise NotFound("Profile")
    return profile.to_dict()

@router.put("/profile/{user_id}")
def update_profile(
    user_id: str,
    payload: ProfileUpdate,
    request: Request,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    # owner or admin; staff may read profiles but not edit them
    authorize(principal, owner_id=user_id, bypass_roles=ADMIN_ONLY)
    profile = db.query(StudentProfile).filter(StudentProfile.user_id == user_id).first()
    if not profile:
        raise NotFound("Profile")

    # each section is replaced wholesale when sent
    if payload.personal_info is not None:
        profile.personal_info = payload.personal_info.model_dump(mode="json", by_alias=True)
    if payload.educational_background is not None:
        profile.educational_background = payload.educational_background.model_dump(mode="json", by_alias=True)

    write_audit(db, action="PROFILE_UPDATE", target_type="StudentProfile", target_id=user_id, request=request)
    db.commit()
    db.refresh(profile)
    return profile.to_dict()

# ---------------- Accounts ----------------

@router.get("")
@router.get("/", include_in_schema=False)
def list_users(
    principal: Principal = Depends(require_roles(*PRIVILEGED)),
    db: Session = Depends(get_db),
):
    return [u.to_dict() for u in db.query(Account).order_by(Account.created_at.desc()).all()]

@router.get("/{user_id}")
def get_user(
    user_id: str,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    authorize(principal, owner_id=user_id)
    account = db.get(Account, user_id)
    if not account:
        raise NotFound("User")
    return account.to_dict()

@router.put("/{user_id}")
def update_user(
    user_id: str,
    payload: UserUpdateIn,
    request: Request,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    authorize(principal, owner_id=user_id, bypass_roles=ADMIN_ONLY)
    account = db.get(Account, user_id)
    if not account:
        raise NotFound("User")

    prev = account.to_dict()
    if payload.name:
        account.name = payload.name.strip()
    if payload.email:
        email = payload.email.lower()
        if email_taken(db, email, exclude_id=account.id):
            raise Conflict("Email is already used by another account")
        account.email = email
    if payload.role is not None and payload.role.value != account.role:
        if principal.role != ADMIN:
            raise Forbidden("Only an admin can change roles")
        account.role = payload.role.value

    write_audit(
        db,
        action="USER_UPDATE",
        target_type="Account",
        target_id=account.id,
        prev_values={"name": prev["name"], "email": prev["email"], "role": prev["role"]},
        new_values={"name": account.name, "email": account.email, "role": account.role},
        request=request,
    )
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Email is already used by another account")
    db.refresh(account)
    return account.to_dict()
