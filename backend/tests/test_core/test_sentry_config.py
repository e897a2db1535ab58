"""Tests for Sentry event scrubbing and sampling."""

import os
from typing import Any
from unittest.mock import patch

from core.sentry_config import _before_send, _traces_sampler, init_sentry


class TestBeforeSend:
    """Tests for PII scrubbing in _before_send."""

    def test_scrubs_user_email(self) -> None:
        event: dict[str, Any] = {"user": {"id": "1", "email": "a@example.com"}}
        result = _before_send(event, {})  # type: ignore[arg-type]

        assert result is not None
        assert result["user"] == {"id": "1"}

    def test_scrubs_session_cookie_and_headers(self) -> None:
        """The session id must never leave the process."""
        event: dict[str, Any] = {
            "request": {
                "cookies": {"connect.sid": "secret"},
                "headers": {"Cookie": "connect.sid=secret", "Accept": "*/*"},
            }
        }
        result = _before_send(event, {})  # type: ignore[arg-type]

        assert "cookies" not in result["request"]
        assert result["request"]["headers"]["Cookie"] == "[Filtered]"
        assert result["request"]["headers"]["Accept"] == "*/*"

    def test_scrubs_oauth_query_params(self) -> None:
        event: dict[str, Any] = {
            "request": {"query_string": "code=abc&state=xyz&scope=email"}
        }
        result = _before_send(event, {})  # type: ignore[arg-type]

        assert result["request"]["query_string"] == (
            "code=[Filtered]&state=[Filtered]&scope=email"
        )

    def test_scrubs_request_body(self) -> None:
        event: dict[str, Any] = {"request": {"data": {"password": "hunter22"}}}
        result = _before_send(event, {})  # type: ignore[arg-type]

        assert result["request"]["data"] == "[Filtered]"


class TestTracesSampler:
    """Tests for _traces_sampler."""

    def test_health_not_sampled(self) -> None:
        assert _traces_sampler({"asgi_scope": {"path": "/api/health"}}) == 0.0

    def test_auth_sampled_more(self) -> None:
        assert _traces_sampler({"asgi_scope": {"path": "/api/auth/login"}}) == 0.5

    def test_default_rate(self) -> None:
        assert _traces_sampler({"asgi_scope": {"path": "/api/posts"}}) == 0.2

    def test_parent_decision_wins(self) -> None:
        assert _traces_sampler({"parent_sampled": True}) == 1.0


class TestInitSentry:
    def test_disabled_without_dsn(self) -> None:
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("SENTRY_DSN", None)
            with patch("core.sentry_config.sentry_sdk.init") as init:
                init_sentry()
        init.assert_not_called()

    def test_enabled_with_dsn(self) -> None:
        with patch.dict(os.environ, {"SENTRY_DSN": "https://key@example.com/1"}):
            with patch("core.sentry_config.sentry_sdk.init") as init:
                init_sentry()
        init.assert_called_once()
        assert init.call_args.kwargs["send_default_pii"] is False
