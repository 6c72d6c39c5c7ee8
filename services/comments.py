import logging
from datetime import datetime, timezone
from typing import List, Optional

from errors import CommentSubmitError, DataAccessError, ValidationError
from models.comment import (
    Comment,
    CommentSubmitResult,
    CommentThread,
    SubmitOutcome,
    new_provisional_id,
)
from models.user import User
from services.datastore import SERVER_TIMESTAMP, DataStore, to_models
from utils.text import strip_markup

logger = logging.getLogger(__name__)


def comments_path(post_id: str) -> str:
    return f"posts/{post_id}/comments"


class CommentRepository:
    def __init__(self, store: DataStore):
        self.store = store

    async def list_comments(self, post_id: str) -> List[Comment]:
        """Get comments for a post in the order they were written"""
        documents = await self.store.list_documents(comments_path(post_id), order_by="created_at")
        return to_models(documents, lambda doc: Comment.from_document(post_id, doc), "comment")

    async def load_thread(self, thread: CommentThread) -> List[Comment]:
        """Fill a thread with the stored comments of its post"""
        thread.loading = True
        try:
            await self._refresh(thread)
        finally:
            thread.loading = False
        return thread.comments

    async def add_comment(self, thread: CommentThread, user: Optional[User]) -> CommentSubmitResult:
        """
        Submit the thread's draft as a new comment, optimistically

        The comment is shown at once under a provisional id and the draft is cleared.
        Once the store accepts the write the whole list is fetched again, so the
        placeholder is replaced by the stored comment. If the write fails every
        provisional entry is removed and the result carries a CommentSubmitError.

        :raises ValidationError: blank draft or no signed-in user, nothing is sent
        """
        content = thread.draft
        if not content.strip():
            raise ValidationError("Comment cannot be empty.")
        if user is None:
            raise ValidationError("You must be signed in to post a comment.")

        placeholder = Comment(
            id=new_provisional_id(),
            post_id=thread.post_id,
            author=user.author_name,
            content=content,
            created_at=datetime.now(timezone.utc),
        )
        thread.comments = thread.comments + [placeholder]
        thread.draft = ""

        comment_data = {
            "post_id": thread.post_id,
            "author": user.author_name,
            "author_uid": user.user_id,
            "content": strip_markup(content),
            "created_at": SERVER_TIMESTAMP,
        }
        try:
            comment_id = await self.store.create_document(comments_path(thread.post_id), comment_data)
        except DataAccessError as e:
            removed = thread.purge_provisional()
            logger.warning("Comment on post %s failed, rolled back %d pending comment(s)",
                           thread.post_id, removed)
            error = CommentSubmitError(f"Failed to write comment on post {thread.post_id}: {e.message}")
            error.__cause__ = e
            return CommentSubmitResult(SubmitOutcome.ROLLED_BACK, list(thread.comments), error=error)

        refresh_error = None
        if not thread.closed:
            try:
                await self._refresh(thread)
            except DataAccessError as e:
                logger.warning("Comment %s stored but the list could not be refreshed: %s", comment_id, e)
                refresh_error = e

        # a skipped or failed resync leaves the placeholder behind, the write
        # landed so it stays under its durable id
        self._promote(thread, placeholder, comment_id)
        logger.info("Comment %s reconciled on post %s", comment_id, thread.post_id)
        return CommentSubmitResult(SubmitOutcome.RECONCILED, list(thread.comments), comment_id, error=refresh_error)

    async def _refresh(self, thread: CommentThread):
        """Replace the thread's list with a fresh read unless a newer read already landed"""
        thread.fetches_issued += 1
        sequence = thread.fetches_issued
        comments = await self.list_comments(thread.post_id)

        if thread.closed:
            logger.debug("Dropping comments for closed thread on post %s", thread.post_id)
            return
        if sequence < thread.fetch_applied:
            logger.debug("Dropping out-of-order comment fetch %d for post %s", sequence, thread.post_id)
            return
        thread.comments = comments
        thread.fetch_applied = sequence

    @staticmethod
    def _promote(thread: CommentThread, placeholder: Comment, comment_id: str):
        durable = placeholder.model_copy(update={"id": comment_id})
        thread.comments = [durable if c.id == placeholder.id else c for c in thread.comments]
