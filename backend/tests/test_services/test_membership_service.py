"""Tests for the membership gate."""

import pytest

from models.exceptions import (
    CommunityMembershipRequiredException,
    LoginRequiredException,
)
from services.membership_service import DenialReason, MembershipService


class TestCheckAccess:
    """Test cases for MembershipService.check_access."""

    def test_anonymous_denied(self):
        decision = MembershipService.check_access(None, "post")

        assert not decision.allowed
        assert decision.reason == DenialReason.LOGIN_REQUIRED

    def test_non_member_denied(self, outsider):
        decision = MembershipService.check_access(outsider, "comment")

        assert not decision.allowed
        assert decision.reason == DenialReason.COMMUNITY_REQUIRED

    def test_member_allowed(self, member):
        decision = MembershipService.check_access(member, "like")

        assert decision.allowed
        assert decision.reason is None


class TestEnforce:
    """Test cases for MembershipService.enforce."""

    def test_anonymous_raises_login_required(self):
        with pytest.raises(LoginRequiredException):
            MembershipService.enforce(None, "post")

    def test_non_member_raises(self, outsider):
        with pytest.raises(CommunityMembershipRequiredException) as exc:
            MembershipService.enforce(outsider, "post")
        assert exc.value.message == "You must join the community first"

    def test_member_passes_through(self, member):
        assert MembershipService.enforce(member, "post") is member
