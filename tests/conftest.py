"""
Pytest fixtures for testing
"""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from app.infrastructure.db.session import Base
from app.infrastructure.db.models import User


@pytest.fixture
def db_engine():
    """In-memory SQLite engine shared across threads (TestClient runs sync routes in a pool)."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine) -> Session:
    """Create database session for tests"""
    SessionLocal = sessionmaker(bind=db_engine, autoflush=False, autocommit=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


def _make_user(db: Session, email: str) -> int:
    user = User(email=email, password_hash="x")
    db.add(user)
    db.commit()
    return user.id


@pytest.fixture
def sample_account_id(db_session):
    """Account (users.id) owning the test rows"""
    return _make_user(db_session, "coach@example.com")


@pytest.fixture
def other_account_id(db_session):
    """Second account: its rows must never be visible to sample_account_id"""
    return _make_user(db_session, "other@example.com")

