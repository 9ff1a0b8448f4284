# admission_portal/db/session.py
import logging
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.engine.url import make_url
from sqlalchemy.exc import OperationalError

from .base import Base
from ..core.config import settings

log = logging.getLogger("db")

DB_URL = settings.DB_URL or "sqlite:///./admission.db"
SQLITE_FALLBACK_URL = "sqlite:///./admission.db"

def _make_engine(url_str: str):
    url = make_url(url_str)
    connect_args = {}
    if url.get_backend_name().startswith("sqlite"):
        connect_args["check_same_thread"] = False
    elif url.get_backend_name().startswith("mysql"):
        connect_args["charset"] = "utf8mb4"

    return create_engine(
        url_str,
        connect_args=connect_args,
        pool_pre_ping=True,
        pool_recycle=3600,
    )

engine = _make_engine(DB_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)

def init_db():
    """Create tables; if MySQL is unreachable and FALLBACK_SQLITE is set, fall back to SQLite."""
    global engine

    # register all mapped classes on Base.metadata
    from .. import models  # noqa: F401

    try:
        Base.metadata.create_all(bind=engine)
        log.info("DB init OK with %s", engine.url.render_as_string(hide_password=True))
        return
    except OperationalError as e:
        backend = make_url(DB_URL).get_backend_name()
        log.error("DB init failed on %s: %s", backend, e)

        if backend.startswith("mysql") and settings.FALLBACK_SQLITE:
            log.warning("Falling back to SQLite: %s", SQLITE_FALLBACK_URL)
            engine = _make_engine(SQLITE_FALLBACK_URL)
            SessionLocal.configure(bind=engine)
            Base.metadata.create_all(bind=engine)
        else:
            raise

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
