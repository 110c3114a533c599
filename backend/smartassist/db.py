# smartassist/db.py
from __future__ import annotations

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import get_settings


def make_engine(url: str) -> Engine:
    """
    Build the SQLAlchemy engine for DATABASE_URL.
    SQLite (local dev and tests) needs foreign keys switched on per connection,
    otherwise ON DELETE CASCADE / SET NULL are ignored.
    """
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # one shared connection, so every session sees the same in-memory db
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, future=True, **kwargs)

        @event.listens_for(engine, "connect")
        def _enable_sqlite_fks(dbapi_conn, _record):
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA foreign_keys=ON")
            cur.close()

        return engine

    return create_engine(url, future=True, pool_pre_ping=True)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, class_=Session)


# process-wide defaults built from the environment; create_app() reuses them
# unless it is handed settings that point at another database
engine = make_engine(get_settings().database_url)
SessionLocal = make_session_factory(engine)


def get_db(request: Request):
    """
    Open a session on the database the running app was created with and
    close it afterward.
    """
    db: Session = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
