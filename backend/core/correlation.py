"""
Correlation ID generation and context management.

Every request gets a short id that shows up in log lines, error bodies and
the X-Correlation-ID response header, so a user report can be matched to
server logs.
"""

import uuid
from contextvars import ContextVar, Token

# Context variable for request-scoped correlation ID
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")


def generate_correlation_id() -> str:
    """
    Generate a short, unique correlation ID.

    Returns:
        8-character hexadecimal string.
    """
    return uuid.uuid4().hex[:8]


def get_correlation_id() -> str:
    """Return the current request's correlation ID, or "" outside a request."""
    return correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> Token[str]:
    """
    Set correlation ID for current request context.

    Args:
        correlation_id: The correlation ID to set for this request.

    Returns:
        Token that restores the previous value when passed to reset_correlation_id.
    """
    return correlation_id_var.set(correlation_id)


def reset_correlation_id(token: Token[str]) -> None:
    """Restore the correlation ID that was active before set_correlation_id."""
    correlation_id_var.reset(token)
