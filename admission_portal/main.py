# admission_portal/main.py
import logging
import uuid

from fastapi import FastAPI, Request

from admission_portal.core.config import settings
from admission_portal.core.errors import register_error_handlers
from admission_portal.core.log import configure_logging, correlation_id
from admission_portal.db.session import init_db

# Routers
from admission_portal.routers import health, auth, users, programs, applications, documents, journal

configure_logging(settings.LOG_LEVEL)
log = logging.getLogger(__name__)

app = FastAPI(title="College Admission API")

# ---------------- Correlation-ID ----------------
@app.middleware("http")
async def add_correlation_id(request: Request, call_next):
    cid = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
    request.state.correlation_id = cid
    token = correlation_id.set(cid)
    try:
        resp = await call_next(request)
    finally:
        correlation_id.reset(token)
    resp.headers["X-Correlation-ID"] = cid
    return resp

# ---------------- Error handlers ----------------
register_error_handlers(app)

# ---------------- Mount routers ----------------
for r in (health.router, auth.router, users.router, programs.router, applications.router, documents.router, journal.router):
    app.include_router(r, prefix="/api")

# ---------------- Startup ----------------
@app.on_event("startup")
def startup():
    init_db()

@app.on_event("startup")
def _log_routes():
    for r in app.routes:
        log.debug("ROUTE: %s %s", getattr(r, "path", r), getattr(r, "methods", ""))
