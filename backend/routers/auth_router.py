"""Authentication router endpoints."""

import json
import secrets
from datetime import datetime, timezone
from typing import List, Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import RedirectResponse
from loguru import logger
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

import authentication.auth as auth
import models.schemas as schemas
from authentication.google_oauth import GoogleOAuthClient, get_google_client
from authentication.session_store import SessionRecord, SessionRegistry
from helpers.rate_limiter import LOGIN_RATE_LIMIT, SIGNUP_RATE_LIMIT, limiter
from models.config import settings
from models.exceptions import DomainException
from repositories.database import get_db
from repositories.db_models import AuthProvider
from services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


def _frontend_url(path: str, params: dict[str, str]) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}{path}?{urlencode(params)}"


def _failure_redirect() -> RedirectResponse:
    response = RedirectResponse(
        _frontend_url(settings.OAUTH_FAILURE_PATH, {"error": "auth_failed"}),
        status_code=status.HTTP_302_FOUND,
    )
    auth.clear_auth_cookies(response)
    return response


def _mask_session_id(session_id: str) -> str:
    return f"{session_id[:8]}..."


def _to_datetime(timestamp: float) -> datetime:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


def _session_info(record: SessionRecord) -> schemas.SessionInfo:
    return schemas.SessionInfo(
        session_id=_mask_session_id(record.session_id),
        user_id=record.user_id,
        created_at=_to_datetime(record.created_at),
        expires_at=_to_datetime(record.expires_at),
    )


@router.post(
    "/signup",
    response_model=schemas.SignupResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(SIGNUP_RATE_LIMIT)
def signup(
    request: Request,
    data: schemas.SignupRequest,
    db: Session = Depends(get_db),
) -> schemas.SignupResponse:
    """Register a local account. Rate limited to 5 per minute."""
    user_id = AuthService.signup(db, data)
    return schemas.SignupResponse(user_id=user_id)


@router.post("/login", response_model=schemas.LoginResponse)
@limiter.limit(LOGIN_RATE_LIMIT)
def login(
    request: Request,
    response: Response,
    data: schemas.LoginRequest,
    db: Session = Depends(get_db),
    registry: SessionRegistry = Depends(auth.get_session_registry),
) -> schemas.LoginResponse:
    """
    Log in with email and password. Rate limited to 10 per minute.

    Sets the session cookie on success.
    """
    previous = auth.get_request_session_id(request)
    user, record = AuthService.login(db, registry, data.email, data.password)
    if previous is not None:
        AuthService.end_session(registry, previous)
    auth.set_session_cookie(response, record)
    return schemas.LoginResponse(user=user)


def _logout(request: Request, response: Response, registry: SessionRegistry) -> None:
    AuthService.logout(registry, None, auth.get_request_session_id(request))
    auth.clear_auth_cookies(response)


@router.post("/logout", response_model=schemas.SuccessResponse)
def logout(
    request: Request,
    response: Response,
    registry: SessionRegistry = Depends(auth.get_session_registry),
) -> schemas.SuccessResponse:
    """Log out. Always succeeds, even without a session."""
    _logout(request, response, registry)
    return schemas.SuccessResponse(message="Logged out successfully")


@router.post("/google/logout", response_model=schemas.SuccessResponse)
def google_logout(
    request: Request,
    response: Response,
    registry: SessionRegistry = Depends(auth.get_session_registry),
) -> schemas.SuccessResponse:
    """Same as /logout, kept for Google-authenticated clients."""
    _logout(request, response, registry)
    return schemas.SuccessResponse(message="Logged out successfully")


@router.get("/current-user", response_model=schemas.CurrentUserResponse)
def current_user(
    response: Response,
    user: Optional[schemas.AuthenticatedUser] = Depends(auth.get_current_user_optional),
) -> schemas.CurrentUserResponse:
    """Return the logged-in user, or {"user": null} with cookies cleared."""
    if user is None:
        auth.clear_auth_cookies(response)
        return schemas.CurrentUserResponse(user=None)
    return schemas.CurrentUserResponse(user=user.summary())


@router.get("/google")
def google_login(
    client: GoogleOAuthClient = Depends(get_google_client),
) -> RedirectResponse:
    """Start the Google sign-in flow."""
    if not client.is_configured:
        logger.error("Google sign-in requested but GOOGLE_CLIENT_ID is not set")
        return _failure_redirect()

    state = secrets.token_urlsafe(24)
    response = RedirectResponse(
        client.build_authorization_url(state), status_code=status.HTTP_302_FOUND
    )
    auth.set_state_cookie(response, state)
    return response


@router.get("/google/callback")
async def google_callback(
    request: Request,
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    db: Session = Depends(get_db),
    registry: SessionRegistry = Depends(auth.get_session_registry),
    client: GoogleOAuthClient = Depends(get_google_client),
) -> RedirectResponse:
    """
    Finish the Google sign-in flow.

    Redirects to the frontend with the user summary on success, or with
    ?error=auth_failed on any failure.
    """
    state_cookie = request.cookies.get(settings.OAUTH_STATE_COOKIE_NAME)
    if error or not code or not auth.verify_state_token(state_cookie, state):
        logger.warning(f"Google callback rejected: error={error!r}")
        return _failure_redirect()

    try:
        access_token = await client.exchange_code(code)
        profile = await client.fetch_profile(access_token)
        user, record = await run_in_threadpool(
            AuthService.oauth_login,
            db,
            registry,
            AuthProvider.GOOGLE,
            profile.subject,
            profile.email,
            profile.given_name,
            profile.family_name,
        )
    except DomainException as e:
        logger.warning(f"Google sign-in failed: {e.message}")
        return _failure_redirect()

    payload = json.dumps(user.model_dump(mode="json", by_alias=True))
    response = RedirectResponse(
        _frontend_url(
            settings.OAUTH_SUCCESS_PATH, {"googleAuthSuccess": "1", "user": payload}
        ),
        status_code=status.HTTP_302_FOUND,
    )
    auth.clear_auth_cookies(response)
    auth.set_session_cookie(response, record)
    return response


@router.get("/verify-session", response_model=schemas.VerifySessionResponse)
def verify_session(
    request: Request,
    user: Optional[schemas.AuthenticatedUser] = Depends(auth.get_current_user_optional),
    registry: SessionRegistry = Depends(auth.get_session_registry),
) -> schemas.VerifySessionResponse:
    """Report whether the caller is authenticated and has a live session."""
    session_id = auth.get_request_session_id(request)
    return schemas.VerifySessionResponse(
        authenticated=user is not None,
        has_session=AuthService.has_session(registry, session_id),
        user=user.summary() if user is not None else None,
        timestamp=datetime.now(timezone.utc),
    )


@router.post("/cleanup-session", response_model=schemas.SuccessResponse)
def cleanup_session(
    request: Request,
    response: Response,
    registry: SessionRegistry = Depends(auth.get_session_registry),
) -> schemas.SuccessResponse:
    """Drop the caller's session and cookies without logging the user out."""
    AuthService.end_session(registry, auth.get_request_session_id(request))
    auth.clear_auth_cookies(response)
    return schemas.SuccessResponse(message="Session cleaned up")


@router.get("/debug-sessions", response_model=schemas.DebugSessionsResponse)
def debug_sessions(
    admin: schemas.AuthenticatedUser = Depends(auth.get_admin_user),
    registry: SessionRegistry = Depends(auth.get_session_registry),
) -> schemas.DebugSessionsResponse:
    """List live sessions (ids masked) and the number of logged-out users."""
    records, tombstones = AuthService.list_sessions(registry)
    sessions: List[schemas.SessionInfo] = [_session_info(r) for r in records]
    return schemas.DebugSessionsResponse(
        total_sessions=len(sessions),
        sessions=sessions,
        logged_out_users=tombstones,
    )


@router.post("/clear-all-sessions", response_model=schemas.ClearSessionsResponse)
def clear_all_sessions(
    response: Response,
    admin: schemas.AuthenticatedUser = Depends(auth.get_admin_user),
    registry: SessionRegistry = Depends(auth.get_session_registry),
) -> schemas.ClearSessionsResponse:
    """Drop every session and tombstone, the caller's session included."""
    sessions, tombstones = AuthService.clear_all_sessions(registry)
    auth.clear_auth_cookies(response)
    return schemas.ClearSessionsResponse(
        cleared_sessions=sessions, cleared_tombstones=tombstones
    )
