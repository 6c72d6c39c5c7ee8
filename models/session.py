from typing import List, Literal, Optional

from pydantic import BaseModel

from models.comment import Comment
from models.post import Post
from models.user import User
from models.view_state import ViewState


class Notice(BaseModel):
    level: Literal["info", "error"] = "error"
    message: str


class SessionSnapshot(BaseModel):
    view: ViewState
    user: Optional[User] = None
    auth_loading: bool = True
    posts: List[Post] = []
    posts_loading: bool = False
    comments: List[Comment] = []
    comments_loading: bool = False
    comment_draft: str = ""
    submitting_comment: bool = False
    submitting_post: bool = False
    notices: List[Notice] = []


class CommentRequest(BaseModel):
    content: Optional[str] = None
