# ================================
# file: admission_portal/utils/datetime.py
# ================================
from datetime import date, datetime, timezone
from typing import Optional, Union

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def iso(v: Optional[Union[date, datetime]]) -> Optional[str]:
    return v.isoformat() if v else None
