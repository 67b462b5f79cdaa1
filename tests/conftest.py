"""Shared fixtures: in-memory store per test, fixed clock, API client."""

import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Settings are read on import, so point them at throwaway values first.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["TZ"] = "UTC"
os.environ.setdefault("DATA_DIR", str(ROOT / "data"))

from app.db.session import Base, get_db  # noqa: E402
from app.services.clock import get_clock  # noqa: E402

# Ensure models are registered so metadata tables are created
from app.models import inventory as inventory_model  # noqa: E402,F401
from app.models import session as session_model  # noqa: E402,F401


class FixedClock:
    def __init__(self, now: datetime) -> None:
        self.current = now

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current


@pytest.fixture()
def clock():
    return FixedClock(datetime(2024, 5, 15, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture()
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture()
def client(db_session, clock):
    from fastapi.testclient import TestClient

    from app import app

    def _override_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_db
    app.dependency_overrides[get_clock] = lambda: clock
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
