"""
Community Service

The singleton community: its info, its members and the join workflow
(request, then admin approval or rejection).
"""

from loguru import logger
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from helpers.sanitization import sanitize_plain_text
from models.exceptions import (
    AlreadyMemberException,
    CommunityNotFoundException,
    DuplicateJoinRequestException,
    NotCommunityAdminException,
    NotificationNotFoundException,
    UserNotFoundException,
    ValidationException,
)
from models.schemas import AuthenticatedUser, CommunityUpdate
from repositories.community_repository import CommunityRepository
from repositories.notification_repository import NotificationRepository
from repositories.transaction import transaction
from repositories.user_repository import UserRepository

JOIN_REQUEST_SUFFIX = "requested to join the community"


def join_request_message(user: db_models.User) -> str:
    return f"{user.first_name} {user.last_name} {JOIN_REQUEST_SUFFIX}"


def join_outcome_message(community: db_models.Community, approved: bool) -> str:
    outcome = "approved" if approved else "declined"
    return f"Your request to join {community.name} has been {outcome}"


class CommunityService:
    """Service for community business logic."""

    @staticmethod
    def get_community(db: Session) -> db_models.Community:
        """
        Load the singleton community.

        Raises:
            CommunityNotFoundException: If the community was never seeded
        """
        community = CommunityRepository(db).get_singleton()
        if community is None:
            raise CommunityNotFoundException()
        return community

    @staticmethod
    def update_community_info(
        db: Session, user: AuthenticatedUser, data: CommunityUpdate
    ) -> db_models.Community:
        """
        Change the community's name and/or description.

        Raises:
            NotCommunityAdminException: Unless the caller is the community's admin
            ValidationException: If the name is blank
        """
        with transaction(db, "update community"):
            community = CommunityService.get_community(db)
            if community.admin_user_id != user.id:
                raise NotCommunityAdminException(
                    "Only the community admin can update community info"
                )
            if data.name is not None:
                name = (sanitize_plain_text(data.name) or "").strip()
                if not name:
                    raise ValidationException("Community name is required")
                community.name = name
            if data.description is not None:
                community.description = sanitize_plain_text(data.description.strip())
        logger.info(f"Community info updated by user_id={user.id}")
        return community

    @staticmethod
    def members_count(db: Session) -> int:
        return UserRepository(db).count_members()

    @staticmethod
    def joined_members(db: Session) -> list[db_models.User]:
        return UserRepository(db).get_members()

    @staticmethod
    def request_join(db: Session, user_id: int) -> db_models.Notification:
        """
        Send a join request notification to the community admin.

        Raises:
            UserNotFoundException: If the requester does not exist
            AlreadyMemberException: If the requester is already a member
            DuplicateJoinRequestException: If the same request is still pending
            CommunityNotFoundException: If the community was never seeded
        """
        users = UserRepository(db)
        notifications = NotificationRepository(db)

        with transaction(db, "request join"):
            user = users.get_by_id(user_id)
            if user is None:
                raise UserNotFoundException("User not found")
            if user.community_id is not None:
                raise AlreadyMemberException()

            community = CommunityService.get_community(db)
            if community.admin_user_id is None:
                raise CommunityNotFoundException()

            message = join_request_message(user)
            if notifications.find_by_message(
                community.admin_user_id, user.id, message
            ):
                raise DuplicateJoinRequestException()

            notification = notifications.add(
                db_models.Notification(
                    receiver_id=community.admin_user_id,
                    sender_id=user.id,
                    community_id=community.id,
                    message=message,
                )
            )

        logger.info(f"Join request sent: user_id={user_id}")
        return notification

    @staticmethod
    def process_join_request(
        db: Session,
        admin: AuthenticatedUser,
        notification_id: int,
        user_id: int,
        approve: bool,
    ) -> db_models.Notification:
        """
        Approve or decline a pending join request.

        Grants membership on approval, tells the requester the outcome and
        removes the original request, all in one transaction.

        Returns:
            The outcome notification sent to the requester

        Raises:
            CommunityNotFoundException: If the community was never seeded
            NotCommunityAdminException: Unless the caller is the community's admin
            NotificationNotFoundException: If the request does not exist or was
                not sent by user_id
            UserNotFoundException: If the requester no longer exists
        """
        users = UserRepository(db)
        notifications = NotificationRepository(db)

        with transaction(db, "process join request"):
            community = CommunityService.get_community(db)
            if community.admin_user_id != admin.id:
                raise NotCommunityAdminException(
                    "Only the community admin can process join requests"
                )

            request = notifications.get_by_id(notification_id)
            if (
                request is None
                or request.sender_id != user_id
                or request.receiver_id != admin.id
            ):
                raise NotificationNotFoundException("Join request not found")

            requester = users.get_by_id(user_id)
            if requester is None:
                raise UserNotFoundException("User not found")

            if approve:
                requester.community_id = community.id

            outcome = notifications.add(
                db_models.Notification(
                    receiver_id=requester.id,
                    sender_id=admin.id,
                    community_id=community.id,
                    message=join_outcome_message(community, approve),
                )
            )
            notifications.delete(request)

        logger.info(
            f"Join request {'approved' if approve else 'declined'}: user_id={user_id}"
        )
        return outcome

    @staticmethod
    def approve_join(
        db: Session, admin: AuthenticatedUser, user_id: int
    ) -> db_models.User:
        """
        Grant membership directly and drop the user's pending requests.

        Raises:
            NotCommunityAdminException: Unless the caller is the community's admin
            UserNotFoundException: If the user does not exist
        """
        users = UserRepository(db)
        notifications = NotificationRepository(db)

        with transaction(db, "approve join"):
            community = CommunityService.get_community(db)
            if community.admin_user_id != admin.id:
                raise NotCommunityAdminException(
                    "Only the community admin can approve join requests"
                )

            user = users.get_by_id(user_id)
            if user is None:
                raise UserNotFoundException("User not found")

            user.community_id = community.id
            notifications.delete_from_sender_matching(
                user.id, admin.id, JOIN_REQUEST_SUFFIX
            )

        logger.info(f"Membership granted: user_id={user_id}")
        return user
