import os

# Settings are read at import time; keep the app engine off Postgres.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("CACHE_ENABLED", "false")

from datetime import datetime

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from urlshortener.main import app
from urlshortener.db.Models.models import Base
from urlshortener.db.Connection import database
from urlshortener.api.shortener import get_url_service
from urlshortener.db.repository import URLRepository
from urlshortener.services.shortener import URLService


# Create in-memory SQLite database for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session():
    """Creates a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


class FrozenClock:
    """Stand-in for utcnow that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, value: str):
        self.now = datetime.fromisoformat(value)


@pytest.fixture
def clock():
    return FrozenClock(datetime(2025, 1, 1, 0, 0, 0))


@pytest.fixture
def client(db_session, clock):
    """Creates a test client with overridden database dependency and clock."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    def override_get_url_service(db: Session = Depends(database.get_db)):
        service = get_url_service(db)
        service.clock = clock
        return service

    app.dependency_overrides[database.get_db] = override_get_db
    app.dependency_overrides[get_url_service] = override_get_url_service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def repository(db_session):
    return URLRepository(db_session)


@pytest.fixture
def service(repository, clock):
    return URLService(repository, base_url="http://sho.rt", clock=clock)



@pytest.fixture
def session_factory(db_session):
    """Session factory bound to the same in-memory database as db_session."""
    return TestingSessionLocal


@pytest.fixture
def lenient_client(client):
    """Same overrides as client, but unhandled errors come back as 500 responses."""
    return TestClient(app, raise_server_exceptions=False)
