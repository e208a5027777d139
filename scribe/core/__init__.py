"""
Core module - data models, error taxonomy, and shared helpers.
"""

from scribe.core.models import (
    User,
    PublicProfile,
    UserResponse,
    Post,
    PostStatus,
    Comment,
    CommentView,
    PostView,
    PageInfo,
    PostPage,
    LikeState,
)

from scribe.core.errors import (
    ScribeError,
    ValidationError,
    InvalidCredentials,
    AuthenticationRequired,
    ForbiddenError,
    NotFound,
    TransientStoreError,
    DuplicateKeyError,
)

from scribe.core.utils import (
    generate_id,
    utc_now,
    split_tags,
)

__all__ = [
    # Models
    "User",
    "PublicProfile",
    "UserResponse",
    "Post",
    "PostStatus",
    "Comment",
    "CommentView",
    "PostView",
    "PageInfo",
    "PostPage",
    "LikeState",
    # Errors
    "ScribeError",
    "ValidationError",
    "InvalidCredentials",
    "AuthenticationRequired",
    "ForbiddenError",
    "NotFound",
    "TransientStoreError",
    "DuplicateKeyError",
    # Utils
    "generate_id",
    "utc_now",
    "split_tags",
]
