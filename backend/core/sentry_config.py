"""
Sentry SDK configuration.

Sentry is only enabled when SENTRY_DSN is set. Events are scrubbed of
session cookies, OAuth codes and email addresses before they leave the
process.
"""

import os
from typing import Any

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.loguru import LoguruIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from sentry_sdk.types import Event, Hint

# Query parameters that must never reach Sentry
_SENSITIVE_QUERY_KEYS = ("code", "state")


def _scrub_query_string(query: str) -> str:
    parts = []
    for pair in query.split("&"):
        key, _, _value = pair.partition("=")
        if key in _SENSITIVE_QUERY_KEYS:
            parts.append(f"{key}=[Filtered]")
        else:
            parts.append(pair)
    return "&".join(parts)


def _before_send(event: Event, hint: Hint) -> Event | None:
    """
    Scrub PII before sending to Sentry.

    Keeps only the user id, drops cookies (the session id lives there) and
    masks the OAuth authorization code and state.
    """
    user = event.get("user")
    if user:
        user.pop("email", None)
        user.pop("username", None)
        if "ip_address" in user:
            user["ip_address"] = "{{auto}}"

    request = event.get("request")
    if request and isinstance(request, dict):
        request.pop("cookies", None)
        headers = request.get("headers")
        if isinstance(headers, dict):
            for name in ("Cookie", "cookie", "Authorization"):
                if name in headers:
                    headers[name] = "[Filtered]"
        query = request.get("query_string")
        if isinstance(query, str) and query:
            request["query_string"] = _scrub_query_string(query)
        # Signup and login bodies carry passwords
        if "data" in request:
            request["data"] = "[Filtered]"

    return event


def _traces_sampler(sampling_context: dict[str, Any]) -> float:
    """Sample auth and community admin traffic more heavily than reads."""
    if sampling_context.get("parent_sampled") is True:
        return 1.0

    asgi_scope = sampling_context.get("asgi_scope", {})
    path = asgi_scope.get("path", "")

    if path in ["/health", "/api/health"]:
        return 0.0

    if path.startswith("/api/auth") or path.startswith("/api/community"):
        return 0.5

    return 0.2


def init_sentry() -> None:
    """
    Initialize Sentry SDK with FastAPI integration.

    Call this BEFORE creating the FastAPI app instance.
    """
    dsn = os.getenv("SENTRY_DSN")

    if not dsn:
        return

    sentry_sdk.init(
        dsn=dsn,
        environment=os.getenv("ENVIRONMENT", "development"),
        release=os.getenv("SENTRY_RELEASE", "unknown"),
        send_default_pii=False,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
            LoguruIntegration(),
        ],
        traces_sampler=_traces_sampler,
        sample_rate=1.0,
        before_send=_before_send,
        attach_stacktrace=True,
        max_breadcrumbs=50,
        ignore_errors=[KeyboardInterrupt, SystemExit],
    )
