"""Tests for NotificationService."""

import pytest

import repositories.db_models as db_models
from models.exceptions import PermissionDeniedException
from services.community_service import CommunityService
from services.notification_service import NotificationService


class TestNotificationService:
    """Test cases for NotificationService."""

    def test_list_own_notifications(self, db_session, admin, outsider_user):
        CommunityService.request_join(db_session, outsider_user.id)

        result = NotificationService.list_notifications(db_session, admin, admin.id)

        assert len(result) == 1
        assert result[0].sender_id == outsider_user.id

    def test_cannot_read_others_notifications(self, db_session, member, admin):
        with pytest.raises(PermissionDeniedException):
            NotificationService.list_notifications(db_session, member, admin.id)

    def test_newest_first(self, db_session, admin, member_user):
        for text in ("first", "second", "third"):
            db_session.add(
                db_models.Notification(
                    receiver_id=admin.id, sender_id=member_user.id, message=text
                )
            )
            db_session.commit()

        result = NotificationService.list_notifications(db_session, admin, admin.id)

        assert [n.message for n in result] == ["third", "second", "first"]

    def test_unread_count_and_mark_read(self, db_session, admin, outsider_user):
        CommunityService.request_join(db_session, outsider_user.id)
        assert NotificationService.unread_count(db_session, admin) == 1

        assert NotificationService.mark_all_read(db_session, admin) == 1
        assert NotificationService.unread_count(db_session, admin) == 0
        assert NotificationService.mark_all_read(db_session, admin) == 0
