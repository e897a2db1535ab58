"""
Authentication Service

Signup, local and Google login, logout and session resolution. All access to
the session store and the logout tombstones goes through this class.
"""

from typing import Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from authentication.auth import (
    get_password_hash,
    hash_external_id,
    verify_dummy_password,
    verify_password,
)
from authentication.session_store import SessionRecord, SessionRegistry
from helpers.sanitization import is_valid_email, normalize_email, sanitize_display_text
from models.config import settings
from models.exceptions import (
    AuthenticationException,
    EmailAlreadyExistsException,
    InvalidCredentialsException,
    ValidationException,
)
from models.schemas import AuthenticatedUser, SignupRequest, UserSummary
from repositories.transaction import transaction
from repositories.user_repository import UserRepository

MIN_PASSWORD_LENGTH = 8

# Defaults for accounts created by Google sign-in
OAUTH_DEFAULT_FIRST_NAME = "Google"
OAUTH_DEFAULT_LAST_NAME = "User"
OAUTH_DEFAULT_COMPANY = "Unknown"
OAUTH_DEFAULT_JOB_TITLE = "Unknown"
OAUTH_DEFAULT_INDUSTRY = "Other"


def mask_email(email: str) -> str:
    """Keep the first character and the domain, e.g. j***@example.com."""
    local, _, domain = email.partition("@")
    if not domain:
        return "***"
    return f"{local[:1]}***@{domain}"


def to_summary(user: db_models.User) -> UserSummary:
    return UserSummary(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        permission_level=user.permission_level,
        community_id=user.community_id,
    )


class AuthService:
    """Service for authentication business logic."""

    @staticmethod
    def signup(db: Session, data: SignupRequest) -> int:
        """
        Register a local account.

        Args:
            db: Database session
            data: Signup form

        Returns:
            The new user's id

        Raises:
            ValidationException: If a field is missing or malformed
            EmailAlreadyExistsException: If the email is taken (any casing)
        """
        fields = (
            data.first_name,
            data.last_name,
            data.email,
            data.password,
            data.company,
            data.job_title,
            data.industry,
        )
        if not all(fields):
            raise ValidationException("All fields are required")

        email = normalize_email(data.email)
        if not is_valid_email(email):
            raise ValidationException("Invalid email format")

        password = data.password or ""
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationException(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
            )

        first_name = sanitize_display_text(data.first_name)
        last_name = sanitize_display_text(data.last_name)
        company = sanitize_display_text(data.company)
        job_title = sanitize_display_text(data.job_title)
        industry = sanitize_display_text(data.industry)
        if not (first_name and last_name and company and job_title and industry):
            raise ValidationException("All fields are required")

        repo = UserRepository(db)
        with transaction(db, "signup"):
            if repo.email_exists(email):
                raise EmailAlreadyExistsException()
            user = db_models.User(
                first_name=first_name,
                last_name=last_name,
                email=email,
                hashed_password=get_password_hash(password),
                auth_provider=db_models.AuthProvider.LOCAL,
                company=company,
                job_title=job_title,
                industry=industry,
                community_id=None,
                permission_level=db_models.PermissionLevel.USER,
            )
            try:
                repo.add(user)
            except IntegrityError:
                # Lost a race with a concurrent signup for the same email
                raise EmailAlreadyExistsException()

        logger.info(f"User registered: user_id={user.id}")
        return user.id

    @staticmethod
    def login(
        db: Session,
        registry: SessionRegistry,
        email: Optional[str],
        password: Optional[str],
    ) -> tuple[UserSummary, SessionRecord]:
        """
        Verify local credentials and open a session.

        A successful login lifts any logout tombstone for the user.

        Raises:
            ValidationException: If email or password is missing
            InvalidCredentialsException: If the account does not exist or the
                password is wrong (the two cases are indistinguishable)
        """
        if not email or not password:
            raise ValidationException("Email and password required")

        normalized = normalize_email(email)
        user = UserRepository(db).get_by_email(normalized)
        if user is None or not user.hashed_password:
            verified = verify_dummy_password(password)
        else:
            verified = verify_password(password, user.hashed_password)
        if not verified:
            logger.warning(f"Failed login for {mask_email(normalized)}")
            raise InvalidCredentialsException()

        record = AuthService._open_session(registry, user)
        logger.info(f"User logged in: user_id={user.id}")
        return to_summary(user), record

    @staticmethod
    def oauth_login(
        db: Session,
        registry: SessionRegistry,
        provider: db_models.AuthProvider,
        external_id: str,
        email: Optional[str],
        given_name: Optional[str] = None,
        family_name: Optional[str] = None,
    ) -> tuple[UserSummary, SessionRecord]:
        """
        Log in, link or create an account from a provider's profile.

        An existing account with the same email gets the provider id attached
        if it has none yet. Membership is never changed here.

        Raises:
            AuthenticationException: If the provider did not supply an email
        """
        normalized = normalize_email(email)
        if not normalized:
            raise AuthenticationException(f"No email returned by {provider.value}")

        repo = UserRepository(db)
        with transaction(db, "oauth login"):
            user = repo.get_by_email(normalized)
            if user is not None:
                if not user.google_id:
                    user.google_id = hash_external_id(external_id)
                    repo.flush()
                    logger.info(f"Linked {provider.value} account: user_id={user.id}")
            else:
                user = repo.add(
                    db_models.User(
                        first_name=sanitize_display_text(given_name)
                        or OAUTH_DEFAULT_FIRST_NAME,
                        last_name=sanitize_display_text(family_name)
                        or OAUTH_DEFAULT_LAST_NAME,
                        email=normalized,
                        hashed_password=None,
                        google_id=hash_external_id(external_id),
                        auth_provider=provider,
                        company=OAUTH_DEFAULT_COMPANY,
                        job_title=OAUTH_DEFAULT_JOB_TITLE,
                        industry=OAUTH_DEFAULT_INDUSTRY,
                        community_id=None,
                        permission_level=db_models.PermissionLevel.USER,
                    )
                )
                logger.info(f"Created {provider.value} account: user_id={user.id}")

        record = AuthService._open_session(registry, user)
        return to_summary(user), record

    @staticmethod
    def _open_session(
        registry: SessionRegistry, user: db_models.User
    ) -> SessionRecord:
        registry.tombstones.discard(user.id)
        return registry.sessions.create(user.id)

    @staticmethod
    def logout(
        registry: SessionRegistry, user_id: Optional[int], session_id: Optional[str]
    ) -> None:
        """
        Tombstone the user and destroy the caller's session.

        Either argument may be None for a caller whose session already expired.
        Without a user id the session record, if any, names the user.
        """
        if user_id is None and session_id is not None:
            record = registry.sessions.get(session_id)
            if record is not None:
                user_id = record.user_id
        if user_id is not None:
            registry.tombstones.add(user_id)
        if session_id is not None:
            registry.sessions.destroy(session_id)
        logger.info(f"User logged out: user_id={user_id}")

    @staticmethod
    def end_session(registry: SessionRegistry, session_id: Optional[str]) -> bool:
        """Destroy a session without tombstoning its user."""
        if session_id is None:
            return False
        return registry.sessions.destroy(session_id)

    @staticmethod
    def has_session(registry: SessionRegistry, session_id: Optional[str]) -> bool:
        return session_id is not None and registry.sessions.get(session_id) is not None

    @staticmethod
    def resolve_session(
        db: Session, registry: SessionRegistry, session_id: str
    ) -> Optional[AuthenticatedUser]:
        """
        Turn a session id into the current user, or None.

        A tombstoned user stays anonymous even if their session record still
        exists. The user row is always re-read so membership and permission
        changes apply on the next request.
        """
        record = registry.sessions.get(session_id)
        if record is None:
            return None

        if record.user_id in registry.tombstones:
            logger.warning(
                f"Rejected session for logged-out user: user_id={record.user_id}"
            )
            registry.sessions.destroy(session_id)
            return None

        user = UserRepository(db).get_by_id(record.user_id)
        if user is None:
            registry.sessions.destroy(session_id)
            return None

        if settings.SESSION_ROLLING:
            registry.sessions.touch(session_id)
        return AuthenticatedUser(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            permission_level=user.permission_level,
            community_id=user.community_id,
            session_id=session_id,
        )

    @staticmethod
    def list_sessions(registry: SessionRegistry) -> tuple[list[SessionRecord], int]:
        """Live sessions plus the number of tombstoned users."""
        return registry.sessions.all(), len(registry.tombstones)

    @staticmethod
    def clear_all_sessions(registry: SessionRegistry) -> tuple[int, int]:
        """
        Drop every session and every tombstone.

        Tombstones go too, otherwise every user who ever logged out would be
        locked out after the wipe.

        Returns:
            (sessions cleared, tombstones cleared)
        """
        sessions = registry.sessions.clear()
        tombstones = registry.tombstones.clear()
        logger.warning(
            f"All sessions cleared: sessions={sessions} tombstones={tombstones}"
        )
        return sessions, tombstones
