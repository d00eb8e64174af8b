"""
learnpath/rate_limit.py
Shared slowapi limiter

Decorated endpoints must accept a `request: Request` parameter.
Disable with RATE_LIMIT_ENABLED=false (tests do).
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from learnpath.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    enabled=settings.RATE_LIMIT_ENABLED,
)

AUTH_LIMIT = settings.AUTH_RATE_LIMIT
