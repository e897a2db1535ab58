"""Google OAuth 2.0 client: authorization URL, code exchange and user info."""

from dataclasses import dataclass
from typing import Any, ClassVar, Optional
from urllib.parse import urlencode

import httpx
from loguru import logger

from models.config import settings
from models.exceptions import AuthenticationException


@dataclass
class GoogleProfile:
    """The parts of a Google OpenID profile the app uses."""

    subject: str
    email: Optional[str]
    given_name: Optional[str] = None
    family_name: Optional[str] = None


class GoogleOAuthClient:
    """Authorization code flow against Google's OpenID Connect endpoints."""

    AUTHORIZATION_ENDPOINT: ClassVar[str] = (
        "https://accounts.google.com/o/oauth2/v2/auth"
    )
    TOKEN_ENDPOINT: ClassVar[str] = "https://oauth2.googleapis.com/token"
    USERINFO_ENDPOINT: ClassVar[str] = (
        "https://openidconnect.googleapis.com/v1/userinfo"
    )
    SCOPES: ClassVar[tuple[str, ...]] = ("openid", "profile", "email")
    TIMEOUT: ClassVar[float] = 30.0

    def __init__(self, client_id: str, client_secret: str, redirect_uri: str) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def build_authorization_url(self, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(self.SCOPES),
            "state": state,
            "prompt": "select_account",
        }
        return f"{self.AUTHORIZATION_ENDPOINT}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> str:
        """
        Exchange an authorization code for an access token.

        Raises:
            AuthenticationException: If Google rejects the code or is unreachable.
        """
        data = await self._request(
            "POST",
            self.TOKEN_ENDPOINT,
            data={
                "code": code,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "redirect_uri": self.redirect_uri,
                "grant_type": "authorization_code",
            },
        )
        access_token = data.get("access_token")
        if not access_token:
            raise AuthenticationException("Google did not return an access token")
        return str(access_token)

    async def fetch_profile(self, access_token: str) -> GoogleProfile:
        """Fetch the OpenID profile for an access token."""
        data = await self._request(
            "GET",
            self.USERINFO_ENDPOINT,
            headers={"Authorization": f"Bearer {access_token}"},
        )
        subject = data.get("sub")
        if not subject:
            raise AuthenticationException("Google profile is missing a subject id")
        return GoogleProfile(
            subject=str(subject),
            email=data.get("email"),
            given_name=data.get("given_name"),
            family_name=data.get("family_name"),
        )

    async def _request(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=self.TIMEOUT) as client:
                response = await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Google OAuth request to {url} failed: {e!r}")
            raise AuthenticationException("Google sign-in failed") from e

        if response.status_code != 200:
            logger.warning(
                f"Google OAuth request to {url} returned status={response.status_code}"
            )
            raise AuthenticationException("Google sign-in failed")
        return response.json()


def get_google_client() -> GoogleOAuthClient:
    """Dependency returning a client built from settings."""
    return GoogleOAuthClient(
        client_id=settings.GOOGLE_CLIENT_ID,
        client_secret=settings.GOOGLE_CLIENT_SECRET,
        redirect_uri=settings.GOOGLE_REDIRECT_URI,
    )
