"""Rate limiter configuration module.

This module is separate from main.py to avoid circular imports when routers
need to access the limiter.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

# Per client IP
SIGNUP_RATE_LIMIT = "5/minute"
LOGIN_RATE_LIMIT = "10/minute"

limiter = Limiter(key_func=get_remote_address)
