"""IdentityProvider: observer registration with a guaranteed release."""

from firebase_admin import auth

from models.user import User
from services import identity as identity_module
from services.identity import IdentityProvider


def test_starts_loading_without_user():
    provider = IdentityProvider()
    assert provider.loading
    assert provider.current_user is None


def test_subscribe_delivers_current_state_then_changes(user):
    provider = IdentityProvider()
    seen = []

    subscription = provider.subscribe(seen.append)
    provider.publish(user)
    provider.sign_out()
    subscription.unsubscribe()
    subscription.unsubscribe()
    provider.publish(user)

    assert [(s.current_user, s.loading) for s in seen] == [
        (None, True),
        (user, False),
        (None, False),
    ]
    assert not subscription.active


def test_watch_releases_on_exit(user):
    provider = IdentityProvider()
    seen = []

    with provider.watch(seen.append):
        provider.publish(user)
    provider.sign_out()

    assert len(seen) == 2


def test_publishing_same_user_does_not_notify_twice(user):
    provider = IdentityProvider()
    seen = []
    provider.subscribe(seen.append)

    provider.publish(user)
    provider.publish(user)

    assert len(seen) == 2


def test_author_name_fallbacks():
    assert User(user_id="u", email="e@x.test", display_name="Ada").author_name == "Ada"
    assert User(user_id="u", email="e@x.test").author_name == "e@x.test"
    assert User(user_id="u").author_name == "Anonymous"


async def test_sign_in_with_valid_token(monkeypatch):
    def fake_verify(token, check_revoked=False, clock_skew_seconds=0):
        assert token == "good"
        return {"uid": "u9", "email": "nine@example.test", "name": "Nine"}

    monkeypatch.setattr(identity_module.auth, "verify_id_token", fake_verify)
    provider = IdentityProvider()

    user = await provider.sign_in_with_token("good")

    assert user.user_id == "u9"
    assert provider.current_user.display_name == "Nine"
    assert not provider.loading


async def test_sign_in_with_rejected_token_signs_out(monkeypatch, user):
    def fake_verify(token, check_revoked=False, clock_skew_seconds=0):
        raise auth.InvalidIdTokenError("bad token")

    monkeypatch.setattr(identity_module.auth, "verify_id_token", fake_verify)
    provider = IdentityProvider()
    provider.publish(user)

    assert await provider.sign_in_with_token("bad") is None
    assert provider.current_user is None
