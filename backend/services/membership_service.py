"""
Membership gate for content mutations.

Posting, commenting and liking require a logged-in user who belongs to the
community.
"""

import enum
from dataclasses import dataclass
from typing import Optional

from models.exceptions import (
    CommunityMembershipRequiredException,
    LoginRequiredException,
)
from models.schemas import AuthenticatedUser


class DenialReason(str, enum.Enum):
    LOGIN_REQUIRED = "LoginRequired"
    COMMUNITY_REQUIRED = "CommunityRequired"


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: Optional[DenialReason] = None

    @classmethod
    def allow(cls) -> "AccessDecision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenialReason) -> "AccessDecision":
        return cls(allowed=False, reason=reason)


class MembershipService:
    @staticmethod
    def check_access(
        user: Optional[AuthenticatedUser], action: str
    ) -> AccessDecision:
        """
        Decide whether a user may perform a content action.

        Args:
            user: The resolved session user, or None for anonymous callers
            action: Name of the action, used only for logging by callers

        Returns:
            Allowed, Denied(LoginRequired) or Denied(CommunityRequired)
        """
        if user is None:
            return AccessDecision.deny(DenialReason.LOGIN_REQUIRED)
        if user.community_id is None:
            return AccessDecision.deny(DenialReason.COMMUNITY_REQUIRED)
        return AccessDecision.allow()

    @staticmethod
    def enforce(user: Optional[AuthenticatedUser], action: str) -> AuthenticatedUser:
        """
        Raise the matching domain exception unless access is allowed.

        Raises:
            LoginRequiredException: Denied(LoginRequired)
            CommunityMembershipRequiredException: Denied(CommunityRequired)
        """
        decision = MembershipService.check_access(user, action)
        if user is None or decision.reason == DenialReason.LOGIN_REQUIRED:
            raise LoginRequiredException()
        if decision.reason == DenialReason.COMMUNITY_REQUIRED:
            raise CommunityMembershipRequiredException()
        return user
