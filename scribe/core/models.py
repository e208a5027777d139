"""
Core data models for the scribe service.

Users author posts; posts carry an embedded, append-only comment stream
and a set of likes. Stored documents hold identities only. Read models
(`PostView`, `CommentView`) carry the resolved public profiles and the
derived counts, which are never persisted.
"""

from __future__ import annotations

import math
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from scribe.core.utils import generate_id, utc_now


# =============================================================================
# Enums
# =============================================================================


class PostStatus(str, Enum):
    """Visibility of a post."""

    DRAFT = "draft"  # Visible to its author only
    PUBLISHED = "published"  # Visible to everyone


# =============================================================================
# User
# =============================================================================


class User(BaseModel):
    """
    A registered user.

    `password_hash` is set once at registration and only ever compared
    through the credential store. `is_admin` is never changed by normal
    flows.
    """

    id: str = Field(default_factory=lambda: generate_id("user"))
    username: str
    email: str
    password_hash: str
    is_admin: bool = False

    # Profile
    avatar: str = "default-avatar.png"
    bio: str = ""

    created_at: datetime = Field(default_factory=utc_now)


class PublicProfile(BaseModel):
    """The fields of a user that any visitor may see."""

    id: str
    username: str
    avatar: str = "default-avatar.png"
    bio: str = ""

    @classmethod
    def of(cls, user: User) -> PublicProfile:
        return cls(id=user.id, username=user.username, avatar=user.avatar, bio=user.bio)

    @classmethod
    def deleted(cls, user_id: str) -> PublicProfile:
        """Placeholder for an author whose record no longer resolves."""
        return cls(id=user_id, username="[deleted]")


class UserResponse(BaseModel):
    """User data returned to its owner (no password hash)."""

    id: str
    username: str
    email: str
    avatar: str
    bio: str
    is_admin: bool
    created_at: datetime

    @classmethod
    def of(cls, user: User) -> UserResponse:
        return cls(**user.model_dump(exclude={"password_hash"}))


# =============================================================================
# Post
# =============================================================================


class Comment(BaseModel):
    """One entry of a post's comment stream. Never edited once written."""

    id: str = Field(default_factory=lambda: generate_id("cmt"))
    author: str  # user id
    text: str
    created_at: datetime = Field(default_factory=utc_now)


class Post(BaseModel):
    """
    A post as stored.

    `author` is fixed at creation. `likes` holds each user id at most once,
    `comments` is in creation order and `views` only grows.
    """

    id: str = Field(default_factory=lambda: generate_id("post"))

    title: str
    content: str
    excerpt: str

    author: str  # user id
    tags: list[str] = Field(default_factory=list)
    featured_image: str = "default-post.jpg"
    status: PostStatus = PostStatus.PUBLISHED

    views: int = 0
    likes: list[str] = Field(default_factory=list)
    comments: list[Comment] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def like_count(self) -> int:
        return len(self.likes)

    @property
    def comment_count(self) -> int:
        return len(self.comments)

    @property
    def is_published(self) -> bool:
        return self.status == PostStatus.PUBLISHED

    def is_liked_by(self, user_id: str | None) -> bool:
        return user_id is not None and user_id in self.likes


# =============================================================================
# Read models
# =============================================================================


class CommentView(BaseModel):
    id: str
    author: PublicProfile
    text: str
    created_at: datetime


class PostView(BaseModel):
    """A post with author identities resolved and derived counts filled in."""

    id: str
    title: str
    content: str
    excerpt: str
    author: PublicProfile
    tags: list[str]
    featured_image: str
    status: PostStatus
    views: int
    like_count: int
    comment_count: int
    liked: bool = False  # whether the viewing identity is in `likes`
    comments: list[CommentView] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class PageInfo(BaseModel):
    """Pagination metadata derived from the total count."""

    current_page: int
    page_size: int
    total_items: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def build(cls, page: int, page_size: int, total_items: int) -> PageInfo:
        total_pages = math.ceil(total_items / page_size) if page_size else 0
        return cls(
            current_page=page,
            page_size=page_size,
            total_items=total_items,
            total_pages=total_pages,
            has_next_page=page < total_pages,
            has_prev_page=page > 1,
        )


class PostPage(BaseModel):
    posts: list[PostView]
    page_info: PageInfo


class LikeState(BaseModel):
    """Outcome of a like toggle."""

    liked: bool
    like_count: int
