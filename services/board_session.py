import logging
import time
from typing import Callable, Dict, List, Optional

from errors import BoardError, DataAccessError, NavigationError, ValidationError
from models.comment import CommentSubmitResult, CommentThread
from models.post import ImageUpload, Post, PostInput
from models.session import Notice, SessionSnapshot
from models.user import AuthState, User
from services.comments import CommentRepository
from services.identity import IdentityProvider, Subscription
from services.posts import PostRepository
from services.view_controller import ViewController

logger = logging.getLogger(__name__)


class BoardSession:
    """
    One user's browsing session: the active view and the data it owns

    The List view owns `posts`, the Detail view owns `thread`. Results that
    arrive after the user navigated away are dropped instead of being applied to
    a view that is no longer displayed. Every failure ends up in `notices`;
    no action raises.
    """

    def __init__(
            self,
            posts: PostRepository,
            comments: CommentRepository,
            identity: IdentityProvider,
    ):
        self.post_repo = posts
        self.comment_repo = comments
        self.identity = identity
        self.controller = ViewController()

        self.auth = AuthState()
        self.posts: List[Post] = []
        self.posts_loading = False
        self.thread: Optional[CommentThread] = None
        self.submitting_comments = 0
        self.submitting_post = False
        self.notices: List[Notice] = []

        self._subscription: Optional[Subscription] = None

    async def __aenter__(self) -> "BoardSession":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.close()

    async def start(self):
        """Start following the identity provider and load the post list"""
        if self._subscription is None:
            self._subscription = self.identity.subscribe(self._on_auth_change)
        await self.refresh_posts()

    def close(self):
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        if self.thread is not None:
            self.thread.close()

    @property
    def busy(self) -> bool:
        """True while a post or comment submission is in flight"""
        return self.submitting_post or self.submitting_comments > 0

    def _on_auth_change(self, state: AuthState):
        self.auth = state

    # List view

    async def refresh_posts(self) -> bool:
        """Reload the post list, keeping the previous list if the load fails"""
        view = self.controller.state
        if view.mode != "list":
            return False

        self.posts_loading = True
        try:
            posts = await self.post_repo.list_posts()
        except DataAccessError as e:
            if self.controller.is_showing(view):
                self._report(e, "Could not load posts. Please try again.")
            return False
        finally:
            if self.controller.is_showing(view):
                self.posts_loading = False

        if not self.controller.is_showing(view):
            logger.debug("Dropping post list that arrived after navigation")
            return False
        self.posts = posts
        return True

    async def select_post(self, post: Post) -> bool:
        try:
            self.controller.select_post(post)
        except NavigationError as e:
            self._report(e)
            return False

        self.thread = CommentThread(post_id=post.id)
        await self._load_comments(self.thread)
        return True

    async def open_post(self, post_id: str) -> bool:
        """Look a post up by id and open it"""
        view = self.controller.state
        if view.mode != "list":
            self._report(NavigationError(f"Cannot open a post from the {view.mode} view"))
            return False

        try:
            post = await self.post_repo.get_post(post_id)
        except DataAccessError as e:
            if self.controller.is_showing(view):
                self._report(e, "Could not load the post. Please try again.")
            return False

        if not self.controller.is_showing(view):
            return False
        if post is None:
            self.notices.append(Notice(message="Post not found."))
            return False
        return await self.select_post(post)

    def start_create(self) -> bool:
        return self._navigate(self.controller.start_create)

    # Create view

    async def cancel_create(self) -> bool:
        if not self._navigate(self.controller.cancel):
            return False
        await self.refresh_posts()
        return True

    async def submit_post(self, title: str, content: str, image: Optional[ImageUpload] = None) -> bool:
        """Create a post as the signed-in user and return to the list when done"""
        view = self.controller.state
        if view.mode != "create":
            self._report(NavigationError(f"Cannot create a post from the {view.mode} view"))
            return False

        user = self.auth.current_user
        if user is None:
            self._report(ValidationError("Please sign in to create a new post."))
            return False

        post_input = PostInput(user_id=user.user_id, author=user.author_name, title=title, content=content)
        self.submitting_post = True
        try:
            await self.post_repo.create_post(post_input, image)
        except BoardError as e:
            logger.error("Error adding post: %s", e)
            self._report(e, "Failed to create post. Please try again.")
            return False
        finally:
            self.submitting_post = False

        if self.controller.is_showing(view):
            self.controller.post_created()
            await self.refresh_posts()
        return True

    # Detail view

    async def back(self) -> bool:
        thread = self.thread
        if not self._navigate(self.controller.back):
            return False
        if thread is not None:
            thread.close()
        self.thread = None
        await self.refresh_posts()
        return True

    def set_comment_draft(self, text: str):
        if self.thread is not None:
            self.thread.draft = text

    async def submit_comment(self, content: Optional[str] = None) -> Optional[CommentSubmitResult]:
        """
        Post a comment on the open post

        Submits `content` when given, otherwise the current draft. A rejected
        submission leaves the saved draft as it was.
        """
        thread = self.thread
        if thread is None:
            self._report(NavigationError(f"Cannot comment from the {self.controller.mode} view"))
            return None

        saved_draft = thread.draft
        if content is not None:
            thread.draft = content

        self.submitting_comments += 1
        try:
            result = await self.comment_repo.add_comment(thread, self.auth.current_user)
        except ValidationError as e:
            thread.draft = saved_draft
            self._report(e)
            return None
        finally:
            self.submitting_comments -= 1

        if result.error is not None and not thread.closed:
            if result.success:
                self.notices.append(Notice(
                    level="info",
                    message="Comment posted, but the list could not be refreshed.",
                ))
            else:
                self._report(result.error)
        return result

    async def _load_comments(self, thread: CommentThread):
        try:
            await self.comment_repo.load_thread(thread)
        except DataAccessError as e:
            if not thread.closed:
                self._report(e, "Could not load comments. Please try again.")

    # Shared

    def dismiss_notices(self):
        self.notices = []

    def snapshot(self) -> SessionSnapshot:
        view = self.controller.state
        snapshot = SessionSnapshot(
            view=view,
            user=self.auth.current_user,
            auth_loading=self.auth.loading,
            submitting_post=self.submitting_post,
            notices=list(self.notices),
        )
        if view.mode == "list":
            snapshot.posts = list(self.posts)
            snapshot.posts_loading = self.posts_loading
        elif view.mode == "detail" and self.thread is not None:
            snapshot.comments = list(self.thread.comments)
            snapshot.comments_loading = self.thread.loading
            snapshot.comment_draft = self.thread.draft
            snapshot.submitting_comment = self.submitting_comments > 0
        return snapshot

    def _navigate(self, transition) -> bool:
        try:
            transition()
        except NavigationError as e:
            self._report(e)
            return False
        return True

    def _report(self, error: BoardError, fallback: Optional[str] = None):
        """Turn a failure into a notice for the user"""
        if isinstance(error, ValidationError) or fallback is None:
            message = error.user_message
        else:
            message = fallback
        logger.info("Notice for user: %s (%s)", message, error.message)
        self.notices.append(Notice(message=message))


class SessionRegistry:
    """
    Keeps one BoardSession per signed-in user

    Sessions unused for `idle_seconds` are closed and dropped the next time the
    registry is used, unless a submission is still in flight.
    """

    def __init__(
            self,
            posts: PostRepository,
            comments: CommentRepository,
            idle_seconds: float = 30 * 60,
            clock: Callable[[], float] = time.monotonic,
    ):
        self.posts = posts
        self.comments = comments
        self.idle_seconds = idle_seconds
        self.clock = clock
        self._sessions: Dict[str, BoardSession] = {}
        self._last_used: Dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    async def get(self, user: User) -> BoardSession:
        """Get the user's session, starting one on first use"""
        now = self.clock()
        self.evict_idle(now)
        self._last_used[user.user_id] = now

        session = self._sessions.get(user.user_id)
        if session is not None:
            session.identity.publish(user)
            return session

        identity = IdentityProvider()
        identity.publish(user)
        session = BoardSession(self.posts, self.comments, identity)
        self._sessions[user.user_id] = session
        await session.start()
        logger.info("Started board session for %s", user.user_id)
        return session

    def evict_idle(self, now: Optional[float] = None) -> int:
        """Close sessions idle for longer than idle_seconds, returns how many were closed"""
        now = self.clock() if now is None else now
        expired = [
            user_id for user_id, last_used in self._last_used.items()
            if now - last_used > self.idle_seconds and not self._sessions[user_id].busy
        ]
        for user_id in expired:
            self._sessions.pop(user_id).close()
            del self._last_used[user_id]
            logger.info("Closed idle board session for %s", user_id)
        return len(expired)

    def close_all(self):
        for session in self._sessions.values():
            session.close()
        self._sessions.clear()
        self._last_used.clear()
