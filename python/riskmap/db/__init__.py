"""Database module for Riskmap.

Provides engine creation, the session factory, the transaction helper, and ORM models.
"""

from riskmap.db.engine import create_db_engine
from riskmap.db.models import Base, SearchHistory
from riskmap.db.session import create_session_factory, transaction

__all__ = [
    # Engine and session
    "create_db_engine",
    "create_session_factory",
    "transaction",
    # Base
    "Base",
    # Models
    "SearchHistory",
]
