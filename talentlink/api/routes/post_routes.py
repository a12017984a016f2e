"""
Post Routes

GET /posts - Public feed
POST /posts - Create post
POST /posts/{post_id}/like - Like / unlike (toggle)
POST /posts/{post_id}/comment - Add comment
GET /posts/user/{user_id} - Posts by one user, filtered by what the viewer may see
"""

from fastapi import APIRouter, HTTPException, Depends
from typing import Optional

from talentlink.api.deps import Page, pagination_params
from talentlink.core.auth import get_current_user, get_optional_user
from talentlink.services.mongo_service import same_id
from talentlink.services.post_service import PostService
from talentlink.services.user_service import UserService
from talentlink.schemas.schemas import (
    PostCreate, CommentCreate, PostListResponse, PostMutationResponse,
    LikeToggleResponse, CommentAddedResponse, PostVisibility
)

router = APIRouter(prefix="/posts", tags=["Posts"])


def get_post_or_404(posts: PostService, post_id: str) -> dict:
    post = posts.get_raw(post_id)
    if post is None:
        raise HTTPException(status_code=404, detail="Post not found")
    return post


@router.get("", response_model=PostListResponse)
async def list_posts(page: Page = Depends(pagination_params)):
    """Public posts, newest first."""
    posts, pagination = PostService().list_public(page.page, page.limit)
    return PostListResponse(posts=posts, pagination=pagination)


@router.post("", response_model=PostMutationResponse, status_code=201)
async def create_post(data: PostCreate, user: dict = Depends(get_current_user)):
    post = PostService().create(
        author_id=user["id"],
        content=data.content,
        image=str(data.image) if data.image else None,
        visibility=data.visibility
    )
    return PostMutationResponse(post=post)


@router.post("/{post_id}/like", response_model=LikeToggleResponse)
async def like_post(post_id: str, user: dict = Depends(get_current_user)):
    """Same call likes and unlikes, depending on whether the user already liked."""
    posts = PostService()
    post = get_post_or_404(posts, post_id)
    liked, like_count = posts.toggle_like(post, user["id"])
    return LikeToggleResponse(liked=liked, like_count=like_count)


@router.post("/{post_id}/comment", response_model=CommentAddedResponse)
async def comment_on_post(post_id: str, data: CommentCreate, user: dict = Depends(get_current_user)):
    posts = PostService()
    post = get_post_or_404(posts, post_id)
    comment, comment_count = posts.add_comment(post, user["id"], data.content)
    return CommentAddedResponse(comment=comment, comment_count=comment_count)


@router.get("/user/{user_id}", response_model=PostListResponse)
async def list_user_posts(
    user_id: str,
    page: Page = Depends(pagination_params),
    viewer: Optional[dict] = Depends(get_optional_user)
):
    """
    Posts by ``user_id``.

    The author sees everything, accepted connections also see
    connections-only posts, everyone else sees public posts.
    """
    if viewer is not None and same_id(viewer["id"], user_id):
        visibilities = None
    elif viewer is not None and UserService().is_connected(viewer["id"], user_id):
        visibilities = [PostVisibility.public.value, PostVisibility.connections.value]
    else:
        visibilities = [PostVisibility.public.value]

    posts, pagination = PostService().list_by_author(user_id, visibilities, page.page, page.limit)
    return PostListResponse(posts=posts, pagination=pagination)
