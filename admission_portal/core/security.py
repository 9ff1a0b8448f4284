# admission_portal/core/security.py
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from .config import settings

_pwd = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS)

def _with_pepper(plain: str) -> str:
    return f"{plain}{settings.PASSWORD_PEPPER}"

def hash_password(password: str) -> str:
    return _pwd.hash(_with_pepper(password))

def verify_password(plain_password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    try:
        return _pwd.verify(_with_pepper(plain_password), password_hash)
    except ValueError:
        # malformed or unknown hash
        return False

def needs_rehash(password_hash: str) -> bool:
    try:
        return _pwd.needs_update(password_hash)
    except ValueError:
        return False

def try_rehash_on_success(plain_password: str, password_hash: str) -> Optional[str]:
    """
    If the password verifies and the hash policy changed (e.g. more rounds),
    return a fresh hash to store. Otherwise return None.
    """
    if not verify_password(plain_password, password_hash):
        return None
    if needs_rehash(password_hash):
        return hash_password(plain_password)
    return None

# ---------------- Credential token ----------------

def create_access_token(account_id: str, role: str, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS))
    payload = {"sub": str(account_id), "role": role, "exp": expire}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)

def decode_access_token(token: str) -> Optional[dict]:
    """Decode a credential token; None when the signature is bad or it has expired."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None
    if not payload.get("sub"):
        return None
    return payload
