"""Business logic services.

Services are called by route handlers and orchestrate database operations.
"""

from riskmap.services.search_history import create_search_history, list_recent_searches

__all__ = [
    "create_search_history",
    "list_recent_searches",
]
