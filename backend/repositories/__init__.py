"""
Repository pattern implementation for data access layer.
"""

from .base import BaseRepository
from .comment_repository import CommentRepository
from .community_repository import CommunityRepository
from .like_repository import LikeRepository
from .notification_repository import NotificationRepository
from .post_repository import PostRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "CommentRepository",
    "CommunityRepository",
    "LikeRepository",
    "NotificationRepository",
    "PostRepository",
    "UserRepository",
]
