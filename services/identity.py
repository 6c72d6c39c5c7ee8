import logging
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional

from firebase_admin import auth
from starlette.concurrency import run_in_threadpool

from models.user import AuthState, User

logger = logging.getLogger(__name__)

AuthListener = Callable[[AuthState], None]

# Errors firebase_admin raises for a token it will not accept
TOKEN_ERRORS = (
    ValueError,
    auth.InvalidIdTokenError,
    auth.CertificateFetchError,
    auth.UserDisabledError,
)


async def verify_token(id_token: str) -> User:
    """
    Verify a Firebase ID token and return the user it belongs to

    Raises one of TOKEN_ERRORS when the token is missing, malformed, expired or revoked
    """
    decoded_token = await run_in_threadpool(
        auth.verify_id_token, id_token, check_revoked=True, clock_skew_seconds=10
    )
    return User(
        user_id=decoded_token["uid"],
        email=decoded_token.get("email"),
        display_name=decoded_token.get("name"),
    )


class Subscription:
    """Handle returned by IdentityProvider.subscribe, releasing it is idempotent"""

    def __init__(self, provider: "IdentityProvider", listener: AuthListener):
        self._provider = provider
        self._listener = listener
        self.active = True

    def unsubscribe(self):
        if self.active:
            self._provider._remove(self._listener)
            self.active = False


class IdentityProvider:
    """
    Holds the signed-in user and notifies observers when it changes

    Starts in the loading state until the first user (or None) is published.
    """

    def __init__(self):
        self._state = AuthState()
        self._listeners: List[AuthListener] = []

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def current_user(self) -> Optional[User]:
        return self._state.current_user

    @property
    def loading(self) -> bool:
        return self._state.loading

    def subscribe(self, listener: AuthListener) -> Subscription:
        """Register a listener, it is called right away with the current state"""
        self._listeners.append(listener)
        listener(self._state)
        return Subscription(self, listener)

    @contextmanager
    def watch(self, listener: AuthListener) -> Iterator[Subscription]:
        subscription = self.subscribe(listener)
        try:
            yield subscription
        finally:
            subscription.unsubscribe()

    def publish(self, user: Optional[User]):
        """Set the current user (None when signed out) and notify listeners"""
        if self._state.current_user == user and not self._state.loading:
            return
        self._state = AuthState(current_user=user, loading=False)
        for listener in list(self._listeners):
            listener(self._state)

    async def sign_in_with_token(self, id_token: str) -> Optional[User]:
        """Verify an ID token and publish its user, a rejected token signs out"""
        try:
            user = await verify_token(id_token)
        except TOKEN_ERRORS as e:
            logger.warning("Firebase sign-in failed: %s", e)
            user = None
        self.publish(user)
        return user

    def sign_out(self):
        self.publish(None)

    def _remove(self, listener: AuthListener):
        if listener in self._listeners:
            self._listeners.remove(listener)
