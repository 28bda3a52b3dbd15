"""
Request rate limiting with slowapi.

Limits are counted per client address. Redis backs the counters when
``REDIS_URL`` is configured so limits hold across workers; otherwise they
live in process memory.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from pingtopass.core.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
    storage_uri=settings.REDIS_URL or "memory://",
    enabled=settings.RATE_LIMIT_ENABLED,
)
