# admission_portal/routers/auth.py
import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from admission_portal.core.errors import AuthError, Conflict, Forbidden
from admission_portal.core.permissions import ADMIN, Principal, authorize
from admission_portal.core.security import (
    create_access_token, decode_access_token, hash_password, try_rehash_on_success, verify_password,
)
from admission_portal.db.session import get_db
from admission_portal.models.account import Account, Role
from admission_portal.schemas.auth import LoginIn, RegisterIn
from admission_portal.services import notifier
from admission_portal.utils.datetime import utcnow

log = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)

# ---------------- Dependencies ----------------

def get_current_principal(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> Principal:
    if not token:
        raise AuthError("No token, authorization denied")
    payload = decode_access_token(token)
    if not payload:
        raise AuthError("Token is not valid")

    account = db.get(Account, payload["sub"])
    if not account:
        raise AuthError("Token is not valid")

    # role comes from the store, not the token, so role changes apply immediately
    principal = Principal(account_id=account.id, role=account.role, name=account.name, email=account.email)
    request.state.principal = principal
    return principal

def require_roles(*roles: str):
    def _dep(principal: Principal = Depends(get_current_principal)) -> Principal:
        return authorize(principal, roles=roles or None)
    return _dep

require_admin = require_roles(ADMIN)

def email_taken(db: Session, email: str, exclude_id: Optional[str] = None) -> bool:
    q = db.query(Account).filter(Account.email == email)
    if exclude_id:
        q = q.filter(Account.id != exclude_id)
    return q.first() is not None

def _token_response(account: Account) -> dict:
    return {
        "token": create_access_token(account.id, account.role),
        "user": {"id": account.id, "name": account.name, "email": account.email, "role": account.role},
    }

# ---------------- Endpoints ----------------

@router.post("/register", status_code=201)
def register(
    payload: RegisterIn,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    if payload.role and payload.role != Role.STUDENT:
        # staff/admin accounts are promoted by an admin, never self-registered
        raise Forbidden("Only student accounts can be self-registered")

    email = payload.email.lower()
    if email_taken(db, email):
        raise Conflict("User already exists")

    account = Account(
        name=payload.name,
        email=email,
        password_hash=hash_password(payload.password),
        role=Role.STUDENT.value,
    )
    db.add(account)
    try:
        db.commit()
    except IntegrityError:
        # a concurrent registration took the email after the check
        db.rollback()
        raise Conflict("User already exists")
    db.refresh(account)
    log.info("Registered account %s (%s)", account.id, account.role)

    background_tasks.add_task(notifier.send_email, account.email, "welcome", name=account.name)
    return _token_response(account)

@router.post("/login")
def login(payload: LoginIn, db: Session = Depends(get_db)):
    account = db.query(Account).filter(Account.email == payload.email.lower()).first()
    if not account or not verify_password(payload.password, account.password_hash):
        raise AuthError("Invalid credentials")

    # upgrade the hash if the policy changed (rounds/scheme)
    new_hash = try_rehash_on_success(payload.password, account.password_hash)
    if new_hash:
        account.password_hash = new_hash

    account.last_login_at = utcnow()
    db.commit()
    db.refresh(account)
    return _token_response(account)

@router.get("/me")
def me(principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    return db.get(Account, principal.account_id).to_dict()
