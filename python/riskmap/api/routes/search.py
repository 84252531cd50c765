"""Search history routes.

Routes are transport-only: each calls exactly one service function.

- POST /search: Record a location-risk search (201)
- GET /search: List the most recent searches, newest first

Response envelope: {"data": ...}
Error envelope: {"error": {"code": "...", "message": "...", "request_id": "..."}}
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from riskmap.api.deps import get_app_settings, get_db
from riskmap.config import Settings
from riskmap.responses import success_response
from riskmap.schemas.search_history import SearchHistoryCreate
from riskmap.services import search_history as search_history_service

router = APIRouter(tags=["search"])


@router.post("/search", status_code=201)
def create_search(
    body: SearchHistoryCreate,
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Record a search.

    Returns:
        201 Created: {"data": SearchHistoryOut}

    Errors:
        E_INVALID_REQUEST (400): Missing or blank location_name, bad coordinates
    """
    record = search_history_service.create_search_history(db, body)
    return success_response(record.model_dump(mode="json"))


@router.get("/search")
def list_searches(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    limit: Annotated[int | None, Query(ge=1, le=100)] = None,
) -> dict:
    """List recent searches.

    Query params:
        limit: Page size (default SEARCH_HISTORY_RECENT_LIMIT, max 100)

    Returns:
        {"data": [SearchHistoryOut, ...]}
    """
    records = search_history_service.list_recent_searches(
        db, limit=limit or settings.search_history_recent_limit
    )
    return success_response([r.model_dump(mode="json") for r in records])
