"""Shared fixtures: fake store and blob storage wired into the repositories."""

import pytest

from fakes import FakeBlobStorage, InMemoryDataStore
from models.user import User
from services.comments import CommentRepository
from services.identity import IdentityProvider
from services.posts import PostRepository


@pytest.fixture
def store():
    return InMemoryDataStore()


@pytest.fixture
def blobs():
    return FakeBlobStorage()


@pytest.fixture
def post_repo(store, blobs):
    return PostRepository(store, blobs, max_image_mb=1)


@pytest.fixture
def comment_repo(store):
    return CommentRepository(store)


@pytest.fixture
def user():
    return User(user_id="u1", email="ada@example.test", display_name="Ada")


@pytest.fixture
def identity(user):
    provider = IdentityProvider()
    provider.publish(user)
    return provider
