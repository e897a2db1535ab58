"""
Request and response schemas.

The JSON wire format is camelCase (``firstName``, ``postId``). Field names
stay snake_case in Python; ``CamelModel`` supplies the aliases.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from repositories.db_models import PermissionLevel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# Auth Schemas
# Signup and login fields are optional here so that missing values are
# reported by the service as a 400 with a readable message.
class SignupRequest(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    company: Optional[str] = None
    job_title: Optional[str] = None
    industry: Optional[str] = None


class SignupResponse(CamelModel):
    message: str = "User registered successfully"
    user_id: int


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserSummary(CamelModel):
    """What a client may know about the logged-in user. Never the hash."""

    id: int
    email: str
    first_name: str
    last_name: str
    permission_level: PermissionLevel = Field(alias="PermissionLevel")
    community_id: Optional[int] = Field(default=None, alias="CommunityID")


class AuthenticatedUser(UserSummary):
    """A UserSummary bound to the session it was resolved from."""

    session_id: str = Field(exclude=True)

    @property
    def is_admin(self) -> bool:
        return self.permission_level == PermissionLevel.ADMIN

    @property
    def is_member(self) -> bool:
        return self.community_id is not None

    def summary(self) -> UserSummary:
        return UserSummary.model_validate(self.model_dump())


class LoginResponse(CamelModel):
    success: bool = True
    user: UserSummary


class CurrentUserResponse(CamelModel):
    user: Optional[UserSummary] = None


class SuccessResponse(CamelModel):
    success: bool = True
    message: Optional[str] = None


class VerifySessionResponse(CamelModel):
    authenticated: bool
    has_session: bool
    user: Optional[UserSummary] = None
    timestamp: datetime


class SessionInfo(CamelModel):
    session_id: str
    user_id: int
    created_at: datetime
    expires_at: datetime


class DebugSessionsResponse(CamelModel):
    total_sessions: int
    sessions: List[SessionInfo]
    logged_out_users: int


class ClearSessionsResponse(CamelModel):
    success: bool = True
    cleared_sessions: int
    cleared_tombstones: int


# Community Schemas
class CommunityInfo(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    admin_user_id: Optional[int] = None


class CommunityUpdate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None


class MembersCount(CamelModel):
    count: int


class Member(CamelModel):
    id: int
    first_name: str
    last_name: str
    job_title: Optional[str] = None
    company: Optional[str] = None
    industry: Optional[str] = None
    date_joined: datetime


class ApproveJoinRequest(CamelModel):
    user_id: int


class ProcessJoinRequest(CamelModel):
    notification_id: int
    user_id: int
    approve: bool


# Notification Schemas
class Notification(CamelModel):
    id: int
    receiver_id: int
    sender_id: int
    community_id: Optional[int] = None
    message: str
    is_read: bool
    created_at: datetime


class UnreadCount(CamelModel):
    count: int


class MarkReadResponse(CamelModel):
    success: bool = True
    updated: int


# Post Schemas
class PostCreate(CamelModel):
    content: Optional[str] = None
    image_url: Optional[str] = None


class PostUpdate(PostCreate):
    pass


class Post(CamelModel):
    id: int
    user_id: int
    content: str
    image_url: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    first_name: str
    last_name: str
    job_title: Optional[str] = None
    like_count: int = 0
    comment_count: int = 0
    is_liked_by_user: bool = False


class ImageUploadResponse(CamelModel):
    success: bool = True
    image_url: str
    filename: str


# Comment Schemas
class CommentCreate(CamelModel):
    post_id: int
    content: Optional[str] = None


class CommentUpdate(CamelModel):
    content: Optional[str] = None


class Comment(CamelModel):
    id: int
    post_id: int
    user_id: int
    content: str
    is_edited: bool = False
    created_at: datetime
    updated_at: Optional[datetime] = None
    first_name: str
    last_name: str
    job_title: Optional[str] = None
    like_count: int = 0


# Like Schemas
class LikeToggleRequest(CamelModel):
    post_id: Optional[int] = None
    comment_id: Optional[int] = None


class LikeToggleResult(CamelModel):
    action: Literal["liked", "unliked"]
    is_liked: bool
    total_likes: int
    like_id: Optional[int] = None


class Like(CamelModel):
    id: int
    user_id: int
    first_name: str
    last_name: str
    created_at: datetime


class LikeList(CamelModel):
    likes: List[Like]
    total_likes: int


class LikeDeleteResult(CamelModel):
    success: bool = True
    total_likes: int


# User Schemas
class UserProfile(CamelModel):
    id: int
    first_name: str
    last_name: str
    email: str
    company: Optional[str] = None
    job_title: Optional[str] = None
    industry: Optional[str] = None
    avatar_url: Optional[str] = None
    date_joined: datetime
    community_id: Optional[int] = None
    permission_level: PermissionLevel


class ProfileUpdate(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    job_title: Optional[str] = None
    company: Optional[str] = None
    industry: Optional[str] = None


class AvatarUploadResponse(CamelModel):
    success: bool = True
    avatar_url: str


class LikeStatus(CamelModel):
    like_status: dict[str, bool]
