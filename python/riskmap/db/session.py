"""Session factory and transaction helper.

Provides:
- create_session_factory(): sessionmaker bound to the application engine
- transaction(): commit-or-rollback context manager for writes

Request-scoped sessions come from riskmap.api.deps.get_db. Only the search
history routes use the database; gateway routes never open a session.
"""

from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create a session factory bound to an engine.

    Objects stay readable after commit so services can serialize what they
    just inserted.
    """
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@contextmanager
def transaction(db: Session) -> Generator[None, None, None]:
    """Commit on success, roll back and re-raise on any exception.

    Usage:
        with transaction(db):
            db.add(record)
    """
    try:
        yield
        db.commit()
    except Exception:
        db.rollback()
        raise
