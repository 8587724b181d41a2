"""
Pytest fixtures for the test suite.

Data-layer tests use an in-memory SQLite engine and a session that rolls back
after each test, so tests do not affect each other. API tests get a TestClient
over a freshly seeded in-memory database (see ministry.db.init_db.seed_demo_data
for the demo users; the dummy auth provider takes the user id as bearer token).
"""
from __future__ import annotations

from pathlib import Path

import pytest
from fastapi import Request
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool


TEST_DB_URL = "sqlite:///:memory:"
SECURITY_CONFIG_PATH = Path(__file__).resolve().parents[1] / "config" / "security_config.yaml"


@pytest.fixture
def engine():
    """Create a fresh in-memory SQLite engine for each test."""
    return create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )


@pytest.fixture
def tables(engine):
    """Create all ORM tables on the test engine."""
    import ministry.models  # noqa: F401  (register every table)
    from ministry.db.base import Base

    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture
def db_session(tables):
    """
    Provide a Session bound to the test DB; roll back after each test.

    Use this in tests that need a database (e.g. data layer tests). The
    transaction is rolled back so the next test gets a clean state.
    """
    connection = tables.connect()
    transaction = connection.begin()
    TestSession = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        class_=Session,
    )
    session = TestSession()
    yield session
    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def seeded_session(db_session):
    """db_session with the demo organisation, users and roles loaded."""
    from ministry.db.init_db import seed_demo_data

    seed_demo_data(db_session)
    return db_session


@pytest.fixture
def client(tables):
    """
    TestClient over a seeded in-memory database.

    The lifespan is not run: the security config is loaded from the repo's
    config/security_config.yaml and `get_db` is pointed at the test engine.
    """
    from ministry.db.init_db import seed_demo_data
    from ministry.db.session import get_db
    from ministry.main import app
    from ministry.security.config import load_security_config

    TestSession = sessionmaker(bind=tables, autocommit=False, autoflush=False, class_=Session)
    with TestSession() as db:
        seed_demo_data(db)

    def _get_test_db(request: Request):
        db = TestSession()
        try:
            authz = getattr(request.state, "authz", None)
            if authz is not None:
                db.info["authz"] = authz
            yield db
        finally:
            db.close()

    app.state.security_config = load_security_config(SECURITY_CONFIG_PATH)
    app.dependency_overrides[get_db] = _get_test_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth():
    """Build the Authorization header for a seeded user (dummy auth provider)."""

    def _header(user_id: int) -> dict[str, str]:
        return {"Authorization": f"Bearer {user_id}"}

    return _header
