# ================================
# file: admission_portal/routers/health.py
# ================================
from fastapi import APIRouter

from admission_portal.utils.datetime import utcnow

router = APIRouter()

@router.get("/health")
def health():
    return {"ok": True, "time": utcnow().isoformat()}
