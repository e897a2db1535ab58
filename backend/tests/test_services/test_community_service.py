"""Tests for CommunityService and the join workflow."""

import pytest

import repositories.db_models as db_models
from models.exceptions import (
    AlreadyMemberException,
    CommunityNotFoundException,
    DuplicateJoinRequestException,
    NotCommunityAdminException,
    NotificationNotFoundException,
    UserNotFoundException,
    ValidationException,
)
from models.schemas import CommunityUpdate
from services.community_service import CommunityService


def _notifications(db_session, receiver_id: int) -> list[db_models.Notification]:
    return (
        db_session.query(db_models.Notification)
        .filter(db_models.Notification.receiver_id == receiver_id)
        .all()
    )


class TestCommunityInfo:
    """Test cases for reading and updating community info."""

    def test_get_community(self, db_session, community, admin_user):
        result = CommunityService.get_community(db_session)

        assert result.id == community.id
        assert result.admin_user_id == admin_user.id

    def test_get_community_missing(self, db_session):
        with pytest.raises(CommunityNotFoundException):
            CommunityService.get_community(db_session)

    def test_admin_updates_info(self, db_session, admin, community):
        result = CommunityService.update_community_info(
            db_session,
            admin,
            CommunityUpdate(name="  Deep Miners ", description="<i>Dig</i> deep"),
        )

        assert result.name == "Deep Miners"
        assert result.description == "Dig deep"

    def test_non_admin_cannot_update(self, db_session, member, community):
        with pytest.raises(NotCommunityAdminException):
            CommunityService.update_community_info(
                db_session, member, CommunityUpdate(name="Hijacked")
            )
        db_session.refresh(community)
        assert community.name != "Hijacked"

    def test_blank_name_rejected(self, db_session, admin):
        with pytest.raises(ValidationException):
            CommunityService.update_community_info(
                db_session, admin, CommunityUpdate(name="   ")
            )


class TestMembers:
    """Test cases for member listing."""

    def test_members_count(self, db_session, member_user, outsider_user):
        """The admin and the member count; the outsider does not."""
        assert CommunityService.members_count(db_session) == 2

    def test_joined_members_excludes_outsiders(
        self, db_session, member_user, outsider_user
    ):
        ids = [u.id for u in CommunityService.joined_members(db_session)]

        assert member_user.id in ids
        assert outsider_user.id not in ids


class TestJoinRequest:
    """Test cases for CommunityService.request_join."""

    def test_request_notifies_admin(self, db_session, outsider_user, admin_user):
        notification = CommunityService.request_join(db_session, outsider_user.id)

        assert notification.receiver_id == admin_user.id
        assert notification.sender_id == outsider_user.id
        assert notification.message == "Otto Outsider requested to join the community"
        assert not notification.is_read

    def test_duplicate_request_rejected(self, db_session, outsider_user, admin_user):
        """A second request while the first is pending creates no new row."""
        CommunityService.request_join(db_session, outsider_user.id)

        with pytest.raises(DuplicateJoinRequestException):
            CommunityService.request_join(db_session, outsider_user.id)
        assert len(_notifications(db_session, admin_user.id)) == 1

    def test_member_cannot_request(self, db_session, member_user):
        with pytest.raises(AlreadyMemberException):
            CommunityService.request_join(db_session, member_user.id)

    def test_unknown_user(self, db_session, community):
        with pytest.raises(UserNotFoundException):
            CommunityService.request_join(db_session, 99999)


class TestProcessJoinRequest:
    """Test cases for approving and declining join requests."""

    def test_approve_grants_membership(
        self, db_session, admin, outsider_user, community
    ):
        request_id = CommunityService.request_join(db_session, outsider_user.id).id

        outcome = CommunityService.process_join_request(
            db_session, admin, request_id, outsider_user.id, approve=True
        )

        db_session.expire_all()
        user = db_session.get(db_models.User, outsider_user.id)
        assert user.community_id == community.id
        assert outcome.receiver_id == outsider_user.id
        assert outcome.sender_id == admin.id
        assert outcome.message.endswith("has been approved")
        assert db_session.get(db_models.Notification, request_id) is None

    def test_decline_keeps_user_outside(self, db_session, admin, outsider_user):
        request = CommunityService.request_join(db_session, outsider_user.id)

        outcome = CommunityService.process_join_request(
            db_session, admin, request.id, outsider_user.id, approve=False
        )

        db_session.expire_all()
        assert db_session.get(db_models.User, outsider_user.id).community_id is None
        assert outcome.message.endswith("has been declined")
        assert _notifications(db_session, admin.id) == []

    def test_declined_user_can_ask_again(self, db_session, admin, outsider_user):
        request = CommunityService.request_join(db_session, outsider_user.id)
        CommunityService.process_join_request(
            db_session, admin, request.id, outsider_user.id, approve=False
        )

        again = CommunityService.request_join(db_session, outsider_user.id)
        assert again.id is not None

    def test_non_admin_cannot_process(self, db_session, member, outsider_user):
        request = CommunityService.request_join(db_session, outsider_user.id)

        with pytest.raises(NotCommunityAdminException):
            CommunityService.process_join_request(
                db_session, member, request.id, outsider_user.id, approve=True
            )
        db_session.expire_all()
        assert db_session.get(db_models.User, outsider_user.id).community_id is None

    def test_mismatched_user(self, db_session, admin, outsider_user, member_user):
        """The request must have been sent by the user being approved."""
        request = CommunityService.request_join(db_session, outsider_user.id)

        with pytest.raises(NotificationNotFoundException):
            CommunityService.process_join_request(
                db_session, admin, request.id, member_user.id, approve=True
            )

    def test_unknown_notification(self, db_session, admin, outsider_user):
        with pytest.raises(NotificationNotFoundException):
            CommunityService.process_join_request(
                db_session, admin, 4242, outsider_user.id, approve=True
            )


class TestApproveJoin:
    """Test cases for direct approval."""

    def test_approve_join_clears_pending_requests(
        self, db_session, admin, outsider_user, community
    ):
        CommunityService.request_join(db_session, outsider_user.id)

        user = CommunityService.approve_join(db_session, admin, outsider_user.id)

        assert user.community_id == community.id
        assert _notifications(db_session, admin.id) == []

    def test_non_admin_cannot_approve(self, db_session, member, outsider_user):
        with pytest.raises(NotCommunityAdminException):
            CommunityService.approve_join(db_session, member, outsider_user.id)

    def test_unknown_user(self, db_session, admin):
        with pytest.raises(UserNotFoundException):
            CommunityService.approve_join(db_session, admin, 99999)
