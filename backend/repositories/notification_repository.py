"""
Notification repository for database operations.
"""

from typing import Optional

from sqlalchemy.orm import Session

import repositories.db_models as db_models
from .base import BaseRepository


class NotificationRepository(BaseRepository[db_models.Notification]):
    """Repository for Notification entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db_models.Notification, db)

    def list_for_receiver(self, receiver_id: int) -> list[db_models.Notification]:
        """List a user's notifications, newest first."""
        return (
            self.db.query(db_models.Notification)
            .filter(db_models.Notification.receiver_id == receiver_id)
            .order_by(
                db_models.Notification.created_at.desc(),
                db_models.Notification.id.desc(),
            )
            .all()
        )

    def count_unread(self, receiver_id: int) -> int:
        return (
            self.db.query(db_models.Notification)
            .filter(
                db_models.Notification.receiver_id == receiver_id,
                db_models.Notification.is_read == False,  # noqa: E712
            )
            .count()
        )

    def mark_all_read(self, receiver_id: int) -> int:
        """
        Flip every unread notification of a receiver to read.

        Returns:
            Number of notifications changed
        """
        return (
            self.db.query(db_models.Notification)
            .filter(
                db_models.Notification.receiver_id == receiver_id,
                db_models.Notification.is_read == False,  # noqa: E712
            )
            .update({"is_read": True}, synchronize_session=False)
        )

    def find_by_message(
        self, receiver_id: int, sender_id: int, message: str
    ) -> Optional[db_models.Notification]:
        """
        Find a notification by exact message text.

        Used to detect a join request that is already pending.
        """
        return (
            self.db.query(db_models.Notification)
            .filter(
                db_models.Notification.receiver_id == receiver_id,
                db_models.Notification.sender_id == sender_id,
                db_models.Notification.message == message,
            )
            .first()
        )

    def delete_from_sender_matching(
        self, sender_id: int, receiver_id: int, suffix: str
    ) -> int:
        """
        Delete a sender's notifications to a receiver whose text ends with suffix.

        Returns:
            Number of notifications deleted
        """
        return (
            self.db.query(db_models.Notification)
            .filter(
                db_models.Notification.sender_id == sender_id,
                db_models.Notification.receiver_id == receiver_id,
                db_models.Notification.message.endswith(suffix, autoescape=True),
            )
            .delete(synchronize_session=False)
        )
