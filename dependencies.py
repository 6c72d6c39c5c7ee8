import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Request

from models.user import User
from services.board_session import BoardSession, SessionRegistry
from services.comments import CommentRepository
from services.identity import TOKEN_ERRORS, verify_token
from services.posts import PostRepository

logger = logging.getLogger(__name__)


async def get_current_user(request: Request) -> User:
    """
    Verify Firebase ID token from Authorization header and return user info
    """
    authorization = request.headers.get("Authorization")
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=401,
            detail="Invalid authorization header"
        )

    token = authorization.split("Bearer ")[1]
    try:
        return await verify_token(token)
    except TOKEN_ERRORS as e:
        logger.warning("Invalid authentication token: %s", e)
        raise HTTPException(
            status_code=401,
            detail=f"Invalid authentication token: {str(e)}"
        )


async def get_post_repository(request: Request) -> PostRepository:
    """Get post repository from app state"""
    return request.app.state.post_repository


async def get_comment_repository(request: Request) -> CommentRepository:
    """Get comment repository from app state"""
    return request.app.state.comment_repository


async def get_session_registry(request: Request) -> SessionRegistry:
    """Get the per-user session registry from app state"""
    return request.app.state.sessions


async def get_board_session(
        user: Annotated[User, Depends(get_current_user)],
        registry: Annotated[SessionRegistry, Depends(get_session_registry)],
) -> BoardSession:
    """Get the calling user's board session, starting it on first use"""
    return await registry.get(user)


# Type annotations for dependency injection
CurrentUser = Annotated[User, Depends(get_current_user)]
Posts = Annotated[PostRepository, Depends(get_post_repository)]
Comments = Annotated[CommentRepository, Depends(get_comment_repository)]
Session = Annotated[BoardSession, Depends(get_board_session)]
