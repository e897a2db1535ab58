"""
Custom domain exceptions for the application.

These exceptions are raised by the service layer and converted to HTTP exceptions
by centralized exception handlers in main.py, maintaining proper separation of concerns.

The authentication module (auth.py) also uses these domain exceptions to remain
HTTP-agnostic, allowing reuse in non-HTTP contexts (CLI tools, seed scripts).
"""

from core.correlation import generate_correlation_id, get_correlation_id


class DomainException(Exception):
    """
    Base class for all domain exceptions.

    Attributes:
        message: Human-readable error message.
        correlation_id: Unique ID for error tracking (auto-generated if not provided).
    """

    def __init__(self, message: str, correlation_id: str | None = None):
        self.message = message
        # Use request correlation ID if available, otherwise generate new one
        self.correlation_id = (
            correlation_id or get_correlation_id() or generate_correlation_id()
        )
        super().__init__(self.message)


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    pass


class PermissionDeniedException(DomainException):
    """Raised when an authenticated user is not allowed to perform an action."""

    pass


class ValidationException(DomainException):
    """Raised when input validation fails."""

    pass


class ConflictException(DomainException):
    """Raised when operation conflicts with existing data."""

    pass


class AuthenticationException(DomainException):
    """Raised when authentication fails or is missing."""

    pass


class InternalException(DomainException):
    """Raised when storage or IO fails. The message is always generic."""

    pass


# Authentication


class InvalidCredentialsException(AuthenticationException):
    """Invalid email or password. Never says which one."""

    def __init__(self) -> None:
        super().__init__("Invalid credentials")


class LoginRequiredException(AuthenticationException):
    """No authenticated session for an action that needs one."""

    def __init__(self) -> None:
        super().__init__("You must be logged in to do that")


class EmailAlreadyExistsException(ConflictException):
    """Email already registered (case-insensitive)."""

    def __init__(self) -> None:
        super().__init__("Email already exists")


# Authorization


class CommunityMembershipRequiredException(PermissionDeniedException):
    """User must belong to the community to post, comment or like."""

    def __init__(self) -> None:
        super().__init__("You must join the community first")


class NotCommunityAdminException(PermissionDeniedException):
    """Only the community admin may perform this action."""

    def __init__(self, message: str = "Only the community admin can do that") -> None:
        super().__init__(message)


class NotResourceOwnerException(PermissionDeniedException):
    """User tried to change something they do not own."""

    pass


# Specific exceptions for domain entities


class UserNotFoundException(NotFoundException):
    """User not found."""

    pass


class CommunityNotFoundException(NotFoundException):
    """The singleton community row is missing."""

    def __init__(self) -> None:
        super().__init__("Community not found")


class PostNotFoundException(NotFoundException):
    """Post not found."""

    pass


class CommentNotFoundException(NotFoundException):
    """Comment not found."""

    pass


class LikeNotFoundException(NotFoundException):
    """Like not found."""

    pass


class NotificationNotFoundException(NotFoundException):
    """Notification not found."""

    pass


class FileNotFoundException(NotFoundException):
    """Uploaded image or avatar not found."""

    pass


# Community workflow


class DuplicateJoinRequestException(ConflictException):
    """User already has a pending join request."""

    def __init__(self) -> None:
        super().__init__("You already have a pending join request")


class AlreadyMemberException(ConflictException):
    """User already belongs to the community."""

    def __init__(self) -> None:
        super().__init__("You are already a member of the community")


# Likes


class InvalidLikeTargetException(ValidationException):
    """Exactly one of post or comment must be given."""

    def __init__(self) -> None:
        super().__init__("Either postId or commentId must be provided, but not both")


class DuplicateLikeException(ConflictException):
    """A concurrent request already recorded the same like."""

    def __init__(self) -> None:
        super().__init__("Like already recorded")


# Uploads


class FileTooLargeException(ValidationException):
    """Uploaded file exceeds the size limit."""

    def __init__(self, max_size: int) -> None:
        megabytes = max_size // (1024 * 1024)
        super().__init__(f"Image size too large. Maximum size is {megabytes}MB.")
        self.max_size = max_size


class TooManyFilesException(ValidationException):
    """More than one file in a single upload."""

    def __init__(self) -> None:
        super().__init__("Too many files. Only one image allowed.")


class InvalidFileTypeException(ValidationException):
    """Uploaded file is not an accepted image type."""

    def __init__(self) -> None:
        super().__init__("Only image files (JPG, PNG, GIF, WebP) are allowed.")
