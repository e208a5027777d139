"""
Post service - the content lifecycle.

A post goes nonexistent → draft|published → (edited in place) → deleted.
Deleted is terminal: the document is gone and every later operation on
its id reports NotFound.

Mutations that touch shared per-post state never write back a copy read
earlier in the request:
- views go through `increment`
- comments go through `push`
- likes go through `toggle_member`
Edits replace title, content, tags and status in a single `update`.
"""

from __future__ import annotations

import logging
from typing import Any

from scribe.auth.accounts import AccountService
from scribe.auth.capabilities import Capability
from scribe.auth.context import Identity
from scribe.auth.policies import authorize, enforce
from scribe.config import Settings
from scribe.core.errors import NotFound, ValidationError
from scribe.core.models import (
    Comment,
    CommentView,
    LikeState,
    PageInfo,
    Post,
    PostPage,
    PostStatus,
    PostView,
)
from scribe.core.utils import split_tags, utc_now
from scribe.storage.base import Collections, StorageProvider

logger = logging.getLogger(__name__)

NEWEST_FIRST = [("created_at", True)]


class PostService:
    """Create, read, edit, delete, comment on and like posts."""

    def __init__(self, storage: StorageProvider, accounts: AccountService, settings: Settings):
        self.storage = storage
        self.accounts = accounts
        self.settings = settings

    # =========================================================================
    # Validation helpers
    # =========================================================================

    def _clean_fields(
        self,
        title: str | None,
        content: str | None,
        tags: str | list[str] | None,
        status: PostStatus | str | None,
    ) -> dict[str, Any]:
        title = (title or "").strip()
        content = content or ""

        if not title or not content.strip():
            raise ValidationError("Title and content are required")
        if len(title) > self.settings.post_title_max_length:
            raise ValidationError(
                f"Title must be at most {self.settings.post_title_max_length} characters"
            )
        if len(content) < self.settings.post_content_min_length:
            raise ValidationError(
                f"Content must be at least {self.settings.post_content_min_length} characters"
            )

        try:
            status = PostStatus(status) if status else PostStatus.PUBLISHED
        except ValueError:
            raise ValidationError(f"Unknown status: {status}")

        return {
            "title": title,
            "content": content,
            "tags": split_tags(tags),
            "status": status,
        }

    def make_excerpt(self, content: str) -> str:
        return content[:self.settings.excerpt_length] + "..."

    # =========================================================================
    # Loading
    # =========================================================================

    async def _load(self, post_id: str) -> Post:
        doc = await self.storage.metadata.get(Collections.POSTS, post_id)
        if doc is None:
            raise NotFound()
        return Post.model_validate(doc)

    async def _load_visible(self, post_id: str, identity: Identity) -> Post:
        """Load a post the caller may see: published, or their own draft."""
        post = await self._load(post_id)
        if not post.is_published and not identity.owns(post.author):
            raise NotFound()
        return post

    async def populate(self, post: Post, identity: Identity | None = None) -> PostView:
        """Resolve author and comment authors to public profiles."""
        profiles = await self.accounts.get_profiles(
            [post.author, *(c.author for c in post.comments)]
        )
        viewer = identity.user_id if identity else None
        return PostView(
            id=post.id,
            title=post.title,
            content=post.content,
            excerpt=post.excerpt,
            author=profiles[post.author],
            tags=post.tags,
            featured_image=post.featured_image,
            status=post.status,
            views=post.views,
            like_count=post.like_count,
            comment_count=post.comment_count,
            liked=post.is_liked_by(viewer),
            comments=[
                CommentView(
                    id=c.id,
                    author=profiles[c.author],
                    text=c.text,
                    created_at=c.created_at,
                )
                for c in post.comments
            ],
            created_at=post.created_at,
            updated_at=post.updated_at,
        )

    # =========================================================================
    # Create
    # =========================================================================

    async def create(
        self,
        identity: Identity,
        title: str | None,
        content: str | None,
        tags: str | list[str] | None = None,
        status: PostStatus | str | None = None,
        excerpt: str | None = None,
    ) -> Post:
        """Create a post owned by the caller. Status defaults to published."""
        enforce(Capability.AUTHENTICATED, identity)
        fields = self._clean_fields(title, content, tags, status)

        if excerpt:
            if len(excerpt) > self.settings.post_excerpt_max_length:
                raise ValidationError(
                    f"Excerpt must be at most {self.settings.post_excerpt_max_length} characters"
                )
        else:
            excerpt = self.make_excerpt(fields["content"])

        post = Post(author=identity.user_id, excerpt=excerpt, **fields)
        await self.storage.metadata.insert(Collections.POSTS, post.id, post.model_dump())

        logger.info("User %s created post %s (%s)", identity.user_id, post.id, post.status.value)
        return post

    # =========================================================================
    # List
    # =========================================================================

    async def _page(
        self,
        filters: dict[str, Any],
        page: int,
        page_size: int,
        identity: Identity | None,
    ) -> PostPage:
        page = max(page or 1, 1)
        total = await self.storage.metadata.count(Collections.POSTS, filters)
        docs = await self.storage.metadata.query(
            Collections.POSTS,
            filters,
            sort=NEWEST_FIRST,
            limit=page_size,
            offset=(page - 1) * page_size,
        )
        posts = [await self.populate(Post.model_validate(doc), identity) for doc in docs]
        return PostPage(posts=posts, page_info=PageInfo.build(page, page_size, total))

    async def list_published(
        self,
        page: int = 1,
        identity: Identity | None = None,
        page_size: int | None = None,
    ) -> PostPage:
        """Published posts, newest first."""
        return await self._page(
            {"status": PostStatus.PUBLISHED.value},
            page,
            page_size or self.settings.posts_per_page,
            identity,
        )

    async def list_by_author(
        self,
        identity: Identity,
        page: int = 1,
        page_size: int | None = None,
    ) -> PostPage:
        """The caller's own posts in any status, newest first."""
        enforce(Capability.AUTHENTICATED, identity)
        return await self._page(
            {"author": identity.user_id},
            page,
            page_size or self.settings.posts_per_page,
            identity,
        )

    async def home_feed(self, identity: Identity | None = None) -> list[PostView]:
        feed = await self.list_published(1, identity, page_size=self.settings.home_feed_size)
        return feed.posts

    async def dashboard(self, identity: Identity) -> dict[str, list[PostView]]:
        enforce(Capability.AUTHENTICATED, identity)
        own = await self.list_by_author(identity, 1, page_size=self.settings.dashboard_own_posts)
        recent = await self.list_published(
            1, identity, page_size=self.settings.dashboard_recent_posts
        )
        return {"user_posts": own.posts, "recent_posts": recent.posts}

    # =========================================================================
    # Read
    # =========================================================================

    async def read(self, post_id: str, identity: Identity | None = None) -> PostView:
        """
        Public read of a single post.

        Drafts are NotFound here for everyone, owner included. Each
        successful call adds exactly one view.
        """
        post = await self._load(post_id)
        if not post.is_published:
            raise NotFound()

        doc = await self.storage.metadata.increment(Collections.POSTS, post_id, "views")
        if doc is None:
            raise NotFound()
        return await self.populate(Post.model_validate(doc), identity)

    async def get_for_edit(self, post_id: str, identity: Identity) -> Post:
        """
        Owner fetch of a post in any status (the edit form). No view counted.

        A non-owner gets NotFound for a draft and ForbiddenError for a
        published post.
        """
        enforce(Capability.AUTHENTICATED, identity)
        post = await self._load(post_id)
        if not authorize(Capability.OWNER, identity, post):
            if not post.is_published:
                raise NotFound()
            enforce(Capability.OWNER, identity, post)
        return post

    # =========================================================================
    # Edit / Delete
    # =========================================================================

    async def edit(
        self,
        post_id: str,
        identity: Identity,
        title: str | None,
        content: str | None,
        tags: str | list[str] | None = None,
        status: PostStatus | str | None = None,
    ) -> Post:
        """
        Replace title, content, tags and status in one write.

        Author, views, likes, comments and excerpt are left as they are.
        """
        enforce(Capability.AUTHENTICATED, identity)
        post = await self._load(post_id)
        enforce(Capability.OWNER, identity, post)

        fields = self._clean_fields(title, content, tags, status)
        doc = await self.storage.metadata.update(
            Collections.POSTS,
            post_id,
            {**fields, "updated_at": utc_now()},
        )
        if doc is None:
            raise NotFound()

        logger.info("User %s edited post %s", identity.user_id, post_id)
        return Post.model_validate(doc)

    async def delete(self, post_id: str, identity: Identity) -> None:
        """Remove a post for good. A second delete reports NotFound."""
        enforce(Capability.AUTHENTICATED, identity)
        post = await self._load(post_id)
        enforce(Capability.OWNER, identity, post)

        if not await self.storage.metadata.delete(Collections.POSTS, post_id):
            raise NotFound()
        logger.info("User %s deleted post %s", identity.user_id, post_id)

    # =========================================================================
    # Comments / Likes
    # =========================================================================

    async def add_comment(self, post_id: str, identity: Identity, text: str | None) -> Post:
        """
        Append a comment by the caller.

        Text that trims to nothing is accepted and ignored: the post comes
        back unchanged.
        """
        enforce(Capability.AUTHENTICATED, identity)
        post = await self._load_visible(post_id, identity)

        text = (text or "").strip()
        if not text:
            return post
        if len(text) > self.settings.comment_max_length:
            raise ValidationError(
                f"Comment must be at most {self.settings.comment_max_length} characters"
            )

        comment = Comment(author=identity.user_id, text=text)
        doc = await self.storage.metadata.push(
            Collections.POSTS, post_id, "comments", comment.model_dump()
        )
        if doc is None:
            raise NotFound()
        return Post.model_validate(doc)

    async def toggle_like(self, post_id: str, identity: Identity) -> LikeState:
        """Like the post if the caller has not, unlike it if they have."""
        enforce(Capability.AUTHENTICATED, identity)
        await self._load_visible(post_id, identity)

        result = await self.storage.metadata.toggle_member(
            Collections.POSTS, post_id, "likes", identity.user_id
        )
        if result is None:
            raise NotFound()

        liked, count = result
        logger.debug("User %s %s post %s", identity.user_id, "liked" if liked else "unliked", post_id)
        return LikeState(liked=liked, like_count=count)
