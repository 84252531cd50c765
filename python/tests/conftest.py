"""Pytest configuration and fixtures for Riskmap tests.

Test isolation strategy:
- Tests that use db_session get a fresh in-memory SQLite database
- Gateway tests stub every upstream call with respx; no live provider calls
- Settings are built explicitly per test, never read from the developer's .env
"""

import sys
from collections.abc import Generator
from pathlib import Path

# Add repo root to sys.path for importing top-level packages (e.g., apps)
_repo_root = Path(__file__).parent.parent.parent
if str(_repo_root) not in sys.path:
    sys.path.insert(0, str(_repo_root))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from riskmap.api.deps import get_db
from riskmap.app import add_request_id_middleware, create_app
from riskmap.config import Settings, clear_settings_cache
from riskmap.db.models import Base
from riskmap.db.session import create_session_factory
from tests.helpers import make_settings


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """Create an in-memory SQLite engine with the schema created.

    StaticPool keeps a single connection so every session sees the same
    in-memory database.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine: Engine) -> Generator[Session, None, None]:
    """Provide a database session bound to the test engine."""
    session = create_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def settings() -> Settings:
    """Settings with every provider credential configured."""
    return make_settings()


@pytest.fixture
def app(settings: Settings, engine: Engine):
    """Provide a FastAPI app wired to the test settings and test database."""
    app = create_app(settings=settings)
    add_request_id_middleware(app, log_requests=False)

    session_factory = create_session_factory(engine)

    def override_get_db() -> Generator[Session, None, None]:
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    """Provide a FastAPI test client.

    Entering the client runs the lifespan, which creates the shared
    httpx client and the Gateway.
    """
    with TestClient(app) as client:
        yield client


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Reset the settings cache before each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
