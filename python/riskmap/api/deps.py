"""FastAPI dependencies for route handlers.

Database sessions, the shared gateway, and the startup settings. All three
come from app state populated by the application lifespan.
"""

from collections.abc import Generator

from fastapi import Request
from sqlalchemy.orm import Session

from riskmap.config import Settings
from riskmap.gateway import Gateway

__all__ = ["get_db", "get_gateway", "get_app_settings"]


def get_db(request: Request) -> Generator[Session, None, None]:
    """Provide a request-scoped database session.

    The session factory is bound to the engine built from the app's
    DATABASE_URL, so create_app(settings=...) controls the database too.

    Usage:
        @router.get("/search")
        def list_searches(db: Annotated[Session, Depends(get_db)]):
            ...
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_gateway(request: Request) -> Gateway:
    """Get the shared Gateway from app state.

    The Gateway is created in the application lifespan around one shared
    httpx.AsyncClient, so all gateway routes reuse pooled connections.
    """
    return request.app.state.gateway


def get_app_settings(request: Request) -> Settings:
    """Get the Settings the application was created with."""
    return request.app.state.settings
