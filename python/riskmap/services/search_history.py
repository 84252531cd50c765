"""Search history service layer.

- Record a location-risk search
- List the most recent searches, newest first

Database failures are logged with their exception type and re-raised as
ApiError(E_STORAGE_ERROR); driver messages never reach the client.
The gateway layer does not depend on this module.
"""

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from riskmap.db.models import SearchHistory
from riskmap.db.session import transaction
from riskmap.errors import ApiError, ApiErrorCode
from riskmap.logging import get_logger
from riskmap.schemas.search_history import SearchHistoryCreate, SearchHistoryOut

logger = get_logger(__name__)

DEFAULT_RECENT_LIMIT = 10


def create_search_history(db: Session, payload: SearchHistoryCreate) -> SearchHistoryOut:
    """Insert a search history record.

    Args:
        db: Database session.
        payload: Validated request body.

    Returns:
        The stored record, including generated id and timestamps.

    Raises:
        ApiError: E_STORAGE_ERROR if the insert fails (rolled back).
    """
    record = SearchHistory(
        user_id=payload.user_id,
        location_name=payload.location_name,
        risk_score=payload.risk_score,
        search_data=payload.search_data,
        latitude=payload.latitude,
        longitude=payload.longitude,
        city=payload.city,
        state=payload.state,
    )

    try:
        with transaction(db):
            db.add(record)
            db.flush()
    except SQLAlchemyError as e:
        logger.error("search_history.create_failed", error_type=type(e).__name__)
        raise ApiError(ApiErrorCode.E_STORAGE_ERROR, "Failed to save search history") from e

    logger.info(
        "search_history.created",
        search_id=str(record.id),
        has_user=record.user_id is not None,
        risk_score=record.risk_score,
    )
    return SearchHistoryOut.model_validate(record)


def list_recent_searches(db: Session, limit: int = DEFAULT_RECENT_LIMIT) -> list[SearchHistoryOut]:
    """List the most recent searches, ordered by created_at descending.

    Raises:
        ApiError: E_STORAGE_ERROR if the query fails.
    """
    stmt = select(SearchHistory).order_by(SearchHistory.created_at.desc()).limit(limit)
    try:
        records = db.scalars(stmt).all()
    except SQLAlchemyError as e:
        logger.error("search_history.list_failed", error_type=type(e).__name__)
        raise ApiError(ApiErrorCode.E_STORAGE_ERROR, "Failed to load search history") from e
    return [SearchHistoryOut.model_validate(r) for r in records]
