"""
Notification Service

Reading and marking a user's notifications. Notifications are created by the
community join workflow.
"""

from sqlalchemy.orm import Session

import repositories.db_models as db_models
from models.exceptions import PermissionDeniedException
from models.schemas import AuthenticatedUser
from repositories.notification_repository import NotificationRepository
from repositories.transaction import transaction


def _ensure_self(user: AuthenticatedUser, receiver_id: int) -> None:
    if user.id != receiver_id:
        raise PermissionDeniedException("You can only access your own notifications")


class NotificationService:
    """Service for notification business logic."""

    @staticmethod
    def list_notifications(
        db: Session, user: AuthenticatedUser, receiver_id: int
    ) -> list[db_models.Notification]:
        """
        List a receiver's notifications, newest first.

        Raises:
            PermissionDeniedException: If the caller is not the receiver
        """
        _ensure_self(user, receiver_id)
        return NotificationRepository(db).list_for_receiver(receiver_id)

    @staticmethod
    def unread_count(db: Session, user: AuthenticatedUser) -> int:
        return NotificationRepository(db).count_unread(user.id)

    @staticmethod
    def mark_all_read(db: Session, user: AuthenticatedUser) -> int:
        """
        Mark every unread notification of the caller as read.

        Returns:
            Number of notifications changed
        """
        with transaction(db, "mark notifications read"):
            updated = NotificationRepository(db).mark_all_read(user.id)
        return updated
