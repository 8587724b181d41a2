from __future__ import annotations

from collections.abc import Generator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from ministry.settings import get_settings


def _make_engine():
    settings = get_settings()
    url = settings.resolved_db_url()
    # SQLite connections are shared across FastAPI's threadpool.
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, echo=settings.db_echo, connect_args=connect_args)


engine = _make_engine()

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, class_=Session)


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Request-scoped session.

    Route code keeps writing plain `select(Member)` queries; listing results
    are scope-filtered by the `do_orm_execute` listener in ministry/db/filters.py,
    which reads `Session.info["authz"]`.
    """

    with SessionLocal() as db:
        authz = getattr(request.state, "authz", None)
        if authz is not None:
            db.info["authz"] = authz
        yield db
