"""
Services layer for business logic.

This package contains service modules that encapsulate business logic
separate from the API routes.
"""

from .auth_service import AuthService
from .comment_service import CommentService
from .community_service import CommunityService
from .like_service import LikeService
from .membership_service import MembershipService
from .notification_service import NotificationService
from .post_service import PostService
from .upload_service import UploadService
from .user_service import UserService

__all__ = [
    "AuthService",
    "CommentService",
    "CommunityService",
    "LikeService",
    "MembershipService",
    "NotificationService",
    "PostService",
    "UploadService",
    "UserService",
]
