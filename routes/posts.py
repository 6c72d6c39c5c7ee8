from typing import List

from fastapi import APIRouter, HTTPException

from dependencies import Comments, CurrentUser, Posts
from errors import DataAccessError
from models.comment import Comment
from models.post import Post

router = APIRouter()


@router.get("")
async def get_posts(posts: Posts, current_user: CurrentUser) -> List[Post]:
    """Get all posts, newest first"""
    try:
        return await posts.list_posts()
    except DataAccessError as e:
        raise HTTPException(status_code=503, detail=e.user_message)


@router.get("/{post_id}")
async def get_post(post_id: str, posts: Posts, current_user: CurrentUser) -> Post:
    """Get a single post"""
    try:
        post = await posts.get_post(post_id)
    except DataAccessError as e:
        raise HTTPException(status_code=503, detail=e.user_message)

    if post is None:
        raise HTTPException(status_code=404, detail="Post not found")
    return post


@router.get("/{post_id}/comments")
async def get_comments(post_id: str, comments: Comments, current_user: CurrentUser) -> List[Comment]:
    """Get the comments of a post in the order they were written"""
    try:
        return await comments.list_comments(post_id)
    except DataAccessError as e:
        raise HTTPException(status_code=503, detail=e.user_message)
