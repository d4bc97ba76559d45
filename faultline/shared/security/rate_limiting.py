"""
Rate limiting configuration.

Uses slowapi to enforce per-endpoint rate limits. A breached limit
raises RateLimitExceeded (an HTTPException with status 429), which the
central error handler turns into a ``rate-limit-exceeded`` response.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from faultline.core.config import settings

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit_default])
