"""
Password hashing, signed cookies and the FastAPI auth dependencies.

The session cookie holds a JWT whose only claims are the opaque session id
and an expiry. The session itself lives in the server-side SessionStore, so
logging out or clearing sessions takes effect immediately even if a copy of
the cookie survives.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends, Request, Response
from sqlalchemy.orm import Session

from authentication.session_store import SessionRecord, SessionRegistry
from models.config import settings
from models.exceptions import LoginRequiredException, NotCommunityAdminException
from models.schemas import AuthenticatedUser
from repositories.database import get_db

BCRYPT_ROUNDS = 10

SESSION_TOKEN_TYPE = "session"
STATE_TOKEN_TYPE = "oauth_state"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(plain_password.encode(), hashed_password.encode())


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode()


# Checked against when the account is missing so failed logins cost the same
_DUMMY_PASSWORD_HASH = bcrypt.hashpw(
    b"dummy-password-for-timing", bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
)


def verify_dummy_password(plain_password: str) -> bool:
    """Spend one bcrypt check without an account. Always False."""
    bcrypt.checkpw(plain_password.encode(), _DUMMY_PASSWORD_HASH)
    return False


def hash_external_id(external_id: str) -> str:
    """Hash an OAuth provider's subject id before it is stored."""
    return get_password_hash(external_id)


def _encode(claims: dict, expires_at: datetime) -> str:
    to_encode = claims.copy()
    to_encode.update({"exp": expires_at})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def _decode(token: str, token_type: str) -> Optional[dict]:
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
        )
    except jwt.exceptions.InvalidTokenError:
        return None
    if payload.get("typ") != token_type:
        return None
    return payload


def create_session_token(record: SessionRecord) -> str:
    expires_at = datetime.fromtimestamp(record.expires_at, tz=timezone.utc)
    return _encode({"sid": record.session_id, "typ": SESSION_TOKEN_TYPE}, expires_at)


def decode_session_token(token: Optional[str]) -> Optional[str]:
    """
    Return the session id carried by a cookie value.

    Tampered, expired or foreign tokens yield None.
    """
    if not token:
        return None
    payload = _decode(token, SESSION_TOKEN_TYPE)
    if payload is None:
        return None
    session_id = payload.get("sid")
    return str(session_id) if session_id else None


def create_state_token(state: str) -> str:
    expires_at = datetime.now(timezone.utc) + timedelta(
        seconds=settings.OAUTH_STATE_MAX_AGE_SECONDS
    )
    return _encode({"state": state, "typ": STATE_TOKEN_TYPE}, expires_at)


def verify_state_token(token: Optional[str], state: Optional[str]) -> bool:
    """Check an OAuth callback's state against the signed state cookie."""
    if not token or not state:
        return False
    payload = _decode(token, STATE_TOKEN_TYPE)
    return payload is not None and payload.get("state") == state


def _cookie_options() -> dict:
    return {
        "httponly": True,
        "secure": settings.is_production,
        "samesite": "none" if settings.is_production else "lax",
        "path": "/",
    }


def set_session_cookie(response: Response, record: SessionRecord) -> None:
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        create_session_token(record),
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        **_cookie_options(),
    )


def set_state_cookie(response: Response, state: str) -> None:
    response.set_cookie(
        settings.OAUTH_STATE_COOKIE_NAME,
        create_state_token(state),
        max_age=settings.OAUTH_STATE_MAX_AGE_SECONDS,
        **_cookie_options(),
    )


def clear_auth_cookies(response: Response) -> None:
    """Expire every cookie this API sets."""
    options = _cookie_options()
    for name in (settings.SESSION_COOKIE_NAME, settings.OAUTH_STATE_COOKIE_NAME):
        response.delete_cookie(
            name,
            path=options["path"],
            secure=options["secure"],
            httponly=options["httponly"],
            samesite=options["samesite"],
        )


def get_session_registry(request: Request) -> SessionRegistry:
    """The registry built by the application lifespan."""
    return request.app.state.session_registry


def get_request_session_id(request: Request) -> Optional[str]:
    return decode_session_token(request.cookies.get(settings.SESSION_COOKIE_NAME))


def get_current_user_optional(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    registry: SessionRegistry = Depends(get_session_registry),
) -> Optional[AuthenticatedUser]:
    """
    Resolve the caller's session, or None for anonymous callers.

    With rolling sessions the cookie is re-issued so its lifetime follows
    the server-side record.
    """
    # Inline import to avoid a cycle with the auth service
    from services.auth_service import AuthService

    session_id = get_request_session_id(request)
    if session_id is None:
        return None

    user = AuthService.resolve_session(db, registry, session_id)
    if user is not None and settings.SESSION_ROLLING:
        record = registry.sessions.get(session_id)
        if record is not None:
            set_session_cookie(response, record)
    return user


async def get_current_user(
    current_user: Optional[AuthenticatedUser] = Depends(get_current_user_optional),
) -> AuthenticatedUser:
    """
    Require an authenticated session.

    Raises:
        LoginRequiredException: If the caller is anonymous.
    """
    if current_user is None:
        raise LoginRequiredException()
    return current_user


async def require_community_member(
    current_user: Optional[AuthenticatedUser] = Depends(get_current_user_optional),
) -> AuthenticatedUser:
    """
    Gate for posting, commenting and liking.

    Raises:
        LoginRequiredException: If the caller is anonymous.
        CommunityMembershipRequiredException: If the caller is not a member.
    """
    from services.membership_service import MembershipService

    return MembershipService.enforce(current_user, "content")


async def get_admin_user(
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> AuthenticatedUser:
    """
    Require the Admin permission level.

    Raises:
        NotCommunityAdminException: If the caller is not an admin.
    """
    if not current_user.is_admin:
        raise NotCommunityAdminException("Admin access required")
    return current_user
