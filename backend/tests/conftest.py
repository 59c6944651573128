"""
Pytest configuration and fixtures.

Every test gets a fresh in-memory SQLite database, so nothing leaks between tests.
"""
import os
import tempfile

# Configure the app before any backend module reads the environment
os.environ.setdefault("FRISFOCUS_DATABASE_URL", "sqlite://")
os.environ.setdefault("FRISFOCUS_API_KEY", "test-api-key")
os.environ.setdefault("FRISFOCUS_LOG_DIR", tempfile.gettempdir())
os.environ.setdefault("FRISFOCUS_RECONCILE_ENABLED", "false")

import pytest
from datetime import datetime
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from backend.database import Base, get_db
from backend.models import User, HabitSettings, FpActivityLog

TEST_API_KEY = os.environ["FRISFOCUS_API_KEY"]


@pytest.fixture(scope="function")
def engine():
    """Fresh in-memory database shared by every connection in the test"""
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture(scope="function")
def db_session(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db_session):
    """Factory creating users with a starting FP total"""
    def _make_user(user_id: str, fp_total: int = 0, display_name: str = None) -> User:
        user = User(
            id=user_id,
            display_name=display_name or user_id.title(),
            fp_total=fp_total,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make_user


@pytest.fixture
def make_log_entry(db_session):
    """Factory inserting raw ledger rows (bypasses the award engine)"""
    def _make_log_entry(user_id: str, event_type: str, fp_amount: int, created_at: datetime) -> FpActivityLog:
        entry = FpActivityLog(
            user_id=user_id,
            event_type=event_type,
            fp_amount=fp_amount,
            description=event_type,
            created_at=created_at,
        )
        db_session.add(entry)
        db_session.commit()
        db_session.refresh(entry)
        return entry
    return _make_log_entry


@pytest.fixture
def habit_settings(db_session, make_user):
    """User 'alice' with a daily goal of 100 and a weekly goal of 500"""
    make_user("alice")
    settings = HabitSettings(user_id="alice", daily_goal=100, weekly_goal=500)
    db_session.add(settings)
    db_session.commit()
    db_session.refresh(settings)
    return settings


@pytest.fixture
def client(engine):
    """TestClient bound to the test database, sending a valid API key"""
    from fastapi.testclient import TestClient
    from backend.main import app

    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app, headers={"X-API-Key": TEST_API_KEY}) as test_client:
        yield test_client
    app.dependency_overrides.clear()
