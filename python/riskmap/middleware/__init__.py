"""HTTP middleware for Riskmap."""

from riskmap.middleware.request_id import RequestIDMiddleware

__all__ = ["RequestIDMiddleware"]
