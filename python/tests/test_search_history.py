"""Tests for search history persistence and routes.

Tests cover:
- Service create/list against an in-memory SQLite database
- POST /search returns 201 with the stored record
- GET /search returns newest first, default and explicit limits
- Validation errors use the standard error envelope
- Database failures map to E_STORAGE_ERROR
- The app's Settings choose the database
"""

from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError
from sqlalchemy import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from riskmap.app import add_request_id_middleware, create_app
from riskmap.db.models import Base, SearchHistory
from riskmap.errors import ApiError, ApiErrorCode
from riskmap.schemas.search_history import SearchHistoryCreate
from riskmap.services.search_history import create_search_history, list_recent_searches
from tests.helpers import make_settings


def _seed(db: Session, count: int) -> list[str]:
    """Insert records with strictly increasing created_at; returns names oldest first."""
    base = datetime(2024, 1, 1, tzinfo=UTC)
    names = []
    for i in range(count):
        name = f"Location {i}"
        db.add(
            SearchHistory(
                location_name=name,
                risk_score=i,
                created_at=base + timedelta(minutes=i),
                updated_at=base + timedelta(minutes=i),
            )
        )
        names.append(name)
    db.commit()
    return names


class TestSearchHistoryService:
    """Service-level tests."""

    def test_create_returns_stored_record(self, db_session: Session):
        user_id = uuid4()
        payload = SearchHistoryCreate(
            location_name="  Lisbon, Portugal  ",
            user_id=user_id,
            risk_score=42,
            search_data={"flood": "low", "crime": 3},
            latitude="38.722300",
            longitude="-9.139300",
            city="Lisbon",
        )

        record = create_search_history(db_session, payload)

        assert isinstance(record.id, UUID)
        assert record.location_name == "Lisbon, Portugal"
        assert record.user_id == user_id
        assert record.risk_score == 42
        assert record.search_data == {"flood": "low", "crime": 3}
        assert record.state is None
        assert record.created_at is not None

        stored = db_session.get(SearchHistory, record.id)
        assert stored is not None
        assert stored.city == "Lisbon"

    def test_anonymous_search_allowed(self, db_session: Session):
        record = create_search_history(db_session, SearchHistoryCreate(location_name="Porto"))

        assert record.user_id is None

    def test_list_newest_first(self, db_session: Session):
        names = _seed(db_session, 3)

        results = list_recent_searches(db_session)

        assert [r.location_name for r in results] == list(reversed(names))

    def test_list_respects_limit(self, db_session: Session):
        names = _seed(db_session, 15)

        results = list_recent_searches(db_session, limit=10)

        assert len(results) == 10
        assert results[0].location_name == names[-1]

    def test_list_empty(self, db_session: Session):
        assert list_recent_searches(db_session) == []


class TestSearchHistoryCreateSchema:
    """Request schema validation."""

    def test_blank_location_rejected(self):
        with pytest.raises(ValidationError, match="location_name cannot be blank"):
            SearchHistoryCreate(location_name="   ")

    def test_latitude_out_of_range_rejected(self):
        with pytest.raises(ValidationError):
            SearchHistoryCreate(location_name="Nowhere", latitude=91)

    def test_longitude_out_of_range_rejected(self):
        with pytest.raises(ValidationError):
            SearchHistoryCreate(location_name="Nowhere", longitude=-181)


class TestSearchRoutes:
    """Tests for POST /search and GET /search"""

    def test_create_returns_201(self, client: TestClient):
        response = client.post(
            "/search",
            json={"location_name": "Madrid", "risk_score": 7, "search_data": {"score": 7}},
        )

        assert response.status_code == 201
        data = response.json()["data"]
        UUID(data["id"])
        assert data["location_name"] == "Madrid"
        assert data["search_data"] == {"score": 7}

    def test_create_then_list(self, client: TestClient):
        client.post("/search", json={"location_name": "Seville"})

        response = client.get("/search")

        assert response.status_code == 200
        names = [r["location_name"] for r in response.json()["data"]]
        assert names == ["Seville"]

    def test_list_default_limit(self, client: TestClient, db_session: Session):
        names = _seed(db_session, 12)

        response = client.get("/search")

        data = response.json()["data"]
        assert len(data) == 10
        assert data[0]["location_name"] == names[-1]

    def test_list_explicit_limit(self, client: TestClient, db_session: Session):
        _seed(db_session, 5)

        response = client.get("/search", params={"limit": 2})

        assert len(response.json()["data"]) == 2

    def test_list_limit_out_of_range(self, client: TestClient):
        response = client.get("/search", params={"limit": 0})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "E_INVALID_REQUEST"

    def test_missing_location_name(self, client: TestClient):
        response = client.post("/search", json={"risk_score": 3})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "E_INVALID_REQUEST"

    def test_blank_location_name(self, client: TestClient):
        response = client.post("/search", json={"location_name": "  "})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "E_INVALID_REQUEST"


class TestStorageFailures:
    """Database failures surface as E_STORAGE_ERROR, never as driver text."""

    def test_create_raises_storage_error(self, db_session: Session, engine: Engine):
        SearchHistory.__table__.drop(engine)

        with pytest.raises(ApiError) as exc_info:
            create_search_history(db_session, SearchHistoryCreate(location_name="Bilbao"))

        assert exc_info.value.code == ApiErrorCode.E_STORAGE_ERROR
        assert exc_info.value.status_code == 500
        assert isinstance(exc_info.value.__cause__, SQLAlchemyError)

    def test_list_raises_storage_error(self, db_session: Session, engine: Engine):
        SearchHistory.__table__.drop(engine)

        with pytest.raises(ApiError) as exc_info:
            list_recent_searches(db_session)

        assert exc_info.value.code == ApiErrorCode.E_STORAGE_ERROR

    def test_route_returns_storage_envelope(self, client: TestClient, engine: Engine):
        SearchHistory.__table__.drop(engine)

        response = client.post("/search", json={"location_name": "Bilbao"})

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["code"] == "E_STORAGE_ERROR"
        assert error["message"] == "Failed to save search history"
        assert "no such table" not in response.text

    def test_list_route_returns_storage_envelope(self, client: TestClient, engine: Engine):
        SearchHistory.__table__.drop(engine)

        response = client.get("/search")

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "E_STORAGE_ERROR"


class TestDatabaseFromAppSettings:
    """The app's own Settings choose the database, not the process environment."""

    def test_search_uses_configured_database(self, tmp_path):
        db_url = f"sqlite:///{tmp_path / 'riskmap.db'}"
        app = create_app(make_settings(DATABASE_URL=db_url))
        add_request_id_middleware(app, log_requests=False)

        with TestClient(app) as client:
            assert app.state.db_engine.url.render_as_string() == db_url
            Base.metadata.create_all(app.state.db_engine)

            created = client.post("/search", json={"location_name": "Valencia"})
            listed = client.get("/search")

        assert created.status_code == 201
        assert [r["location_name"] for r in listed.json()["data"]] == ["Valencia"]
