"""
Blog routes - posts, comments, likes, and the personal views.

Handlers only translate HTTP to service calls: the identity comes from
the auth dependencies and is handed to `PostService` explicitly.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel

from scribe.auth import Identity, optional_auth, require_admin, require_auth
from scribe.auth.accounts import AccountService
from scribe.core.models import LikeState, PostPage, PostView, UserResponse
from scribe.services.posts import PostService


router = APIRouter(tags=["blog"])


# =============================================================================
# Dependencies
# =============================================================================


def get_post_service(request: Request) -> PostService:
    return request.app.state.posts


def get_accounts(request: Request) -> AccountService:
    return request.app.state.accounts


# =============================================================================
# Request/Response Models
# =============================================================================


class PostRequest(BaseModel):
    title: str | None = ""
    content: str | None = ""
    tags: str | list[str] | None = None  # list, or "a, b, c" from a form
    status: str | None = None  # checked by PostService
    excerpt: str | None = None


class CommentRequest(BaseModel):
    content: str | None = ""


class DashboardResponse(BaseModel):
    user: UserResponse
    user_posts: list[PostView]
    recent_posts: list[PostView]


# =============================================================================
# Home / Dashboard
# =============================================================================


@router.get("/", response_model=list[PostView])
async def home(
    identity: Identity = Depends(optional_auth),
    posts: PostService = Depends(get_post_service),
):
    """Newest published posts."""
    return await posts.home_feed(identity)


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(
    identity: Identity = Depends(require_auth),
    posts: PostService = Depends(get_post_service),
):
    """The caller's latest posts (any status) next to the latest published ones."""
    data = await posts.dashboard(identity)
    return DashboardResponse(user=UserResponse.of(identity.user), **data)


# =============================================================================
# Posts
# =============================================================================


@router.get("/blog", response_model=PostPage)
async def list_posts(
    page: int = Query(1),
    identity: Identity = Depends(optional_auth),
    posts: PostService = Depends(get_post_service),
):
    """Paginated published posts."""
    return await posts.list_published(page, identity)


@router.get("/blog/mine", response_model=PostPage)
async def list_my_posts(
    page: int = Query(1),
    identity: Identity = Depends(require_auth),
    posts: PostService = Depends(get_post_service),
):
    """Paginated posts of the caller, drafts included."""
    return await posts.list_by_author(identity, page)


@router.post("/blog", response_model=PostView, status_code=201)
async def create_post(
    data: PostRequest,
    identity: Identity = Depends(require_auth),
    posts: PostService = Depends(get_post_service),
):
    post = await posts.create(
        identity,
        data.title,
        data.content,
        tags=data.tags,
        status=data.status,
        excerpt=data.excerpt,
    )
    return await posts.populate(post, identity)


@router.get("/blog/{post_id}/edit", response_model=PostView)
async def edit_form(
    post_id: str,
    identity: Identity = Depends(require_auth),
    posts: PostService = Depends(get_post_service),
):
    """The post as its owner sees it before editing. Does not count a view."""
    post = await posts.get_for_edit(post_id, identity)
    return await posts.populate(post, identity)


@router.get("/blog/{post_id}", response_model=PostView)
async def read_post(
    post_id: str,
    identity: Identity = Depends(optional_auth),
    posts: PostService = Depends(get_post_service),
):
    return await posts.read(post_id, identity)


@router.put("/blog/{post_id}", response_model=PostView)
async def edit_post(
    post_id: str,
    data: PostRequest,
    identity: Identity = Depends(require_auth),
    posts: PostService = Depends(get_post_service),
):
    post = await posts.edit(
        post_id,
        identity,
        data.title,
        data.content,
        tags=data.tags,
        status=data.status,
    )
    return await posts.populate(post, identity)


@router.delete("/blog/{post_id}")
async def delete_post(
    post_id: str,
    identity: Identity = Depends(require_auth),
    posts: PostService = Depends(get_post_service),
):
    await posts.delete(post_id, identity)
    return {"success": True}


@router.post("/blog/{post_id}/comments", response_model=PostView)
async def add_comment(
    post_id: str,
    data: CommentRequest,
    identity: Identity = Depends(require_auth),
    posts: PostService = Depends(get_post_service),
):
    post = await posts.add_comment(post_id, identity, data.content)
    return await posts.populate(post, identity)


@router.post("/blog/{post_id}/like", response_model=LikeState)
async def toggle_like(
    post_id: str,
    identity: Identity = Depends(require_auth),
    posts: PostService = Depends(get_post_service),
):
    return await posts.toggle_like(post_id, identity)


# =============================================================================
# Admin
# =============================================================================


@router.get("/admin/users", response_model=list[UserResponse])
async def list_users(
    identity: Identity = Depends(require_admin),
    accounts: AccountService = Depends(get_accounts),
):
    users = await accounts.list_users()
    return [UserResponse.of(user) for user in users]
