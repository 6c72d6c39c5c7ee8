from typing import Optional

from fastapi import APIRouter, File, Form, UploadFile

from dependencies import Session
from models.post import ImageUpload
from models.session import CommentRequest, SessionSnapshot

router = APIRouter()


@router.get("")
async def get_session(session: Session) -> SessionSnapshot:
    """Get the active view and the data it shows"""
    return session.snapshot()


@router.post("/refresh")
async def refresh(session: Session) -> SessionSnapshot:
    await session.refresh_posts()
    return session.snapshot()


@router.post("/posts/{post_id}")
async def open_post(post_id: str, session: Session) -> SessionSnapshot:
    """Open a post and its comments"""
    await session.open_post(post_id)
    return session.snapshot()


@router.post("/back")
async def back(session: Session) -> SessionSnapshot:
    await session.back()
    return session.snapshot()


@router.post("/create")
async def start_create(session: Session) -> SessionSnapshot:
    session.start_create()
    return session.snapshot()


@router.post("/create/cancel")
async def cancel_create(session: Session) -> SessionSnapshot:
    await session.cancel_create()
    return session.snapshot()


@router.post("/create/submit")
async def submit_post(
        session: Session,
        title: str = Form(...),
        content: str = Form(...),
        image: Optional[UploadFile] = File(None),
) -> SessionSnapshot:
    """Create a post from the form, with an optional image"""
    upload = None
    if image is not None and image.filename:
        upload = ImageUpload(
            filename=image.filename,
            content_type=image.content_type or "application/octet-stream",
            data=await image.read(),
        )
    await session.submit_post(title, content, upload)
    return session.snapshot()


@router.put("/comments/draft")
async def set_comment_draft(request: CommentRequest, session: Session) -> SessionSnapshot:
    session.set_comment_draft(request.content or "")
    return session.snapshot()


@router.post("/comments")
async def submit_comment(request: CommentRequest, session: Session) -> SessionSnapshot:
    """Post a comment on the open post, the body content is submitted instead of the draft when given"""
    await session.submit_comment(request.content)
    return session.snapshot()


@router.delete("/notices")
async def dismiss_notices(session: Session) -> SessionSnapshot:
    session.dismiss_notices()
    return session.snapshot()
