"""PostRepository: newest-first listing, lookups, image-then-document creation."""

from datetime import datetime, timezone

import pytest

from errors import DataAccessError, UploadError, ValidationError
from models.post import ImageUpload, PostInput

T1 = datetime(2024, 3, 1, tzinfo=timezone.utc)
T2 = datetime(2024, 3, 2, tzinfo=timezone.utc)


def seed_post(store, post_id, title, created_at):
    store.seed("posts", post_id, user_id="u1", author="Ada", title=title,
               content="body", image_url=None, created_at=created_at)


@pytest.fixture
def post_input():
    return PostInput(user_id="u1", author="Ada", title="Hello", content="First post")


async def test_list_posts_newest_first(store, post_repo):
    seed_post(store, "p1", "A", T1)
    seed_post(store, "p2", "B", T2)

    posts = await post_repo.list_posts()

    assert [p.id for p in posts] == ["p2", "p1"]


async def test_list_posts_is_non_increasing_in_created_at(store, post_repo):
    for i, day in enumerate([5, 1, 9, 3, 9, 2]):
        seed_post(store, f"p{i}", "t", datetime(2024, 1, day, tzinfo=timezone.utc))

    posts = await post_repo.list_posts()

    stamps = [p.created_at for p in posts]
    assert stamps == sorted(stamps, reverse=True)


async def test_list_posts_empty_store(post_repo):
    assert await post_repo.list_posts() == []


async def test_list_posts_failure_raises_data_access_error(store, post_repo):
    store.fail.add("list")
    with pytest.raises(DataAccessError):
        await post_repo.list_posts()


async def test_get_post_found_and_missing(store, post_repo):
    seed_post(store, "p1", "A", T1)

    post = await post_repo.get_post("p1")
    assert post.title == "A"
    assert await post_repo.get_post("nope") is None


async def test_get_post_failure_is_not_not_found(store, post_repo):
    store.fail.add("get")
    with pytest.raises(DataAccessError):
        await post_repo.get_post("p1")


async def test_create_post_without_image(store, post_repo, post_input):
    post_id = await post_repo.create_post(post_input)

    post = await post_repo.get_post(post_id)
    assert post.title == "Hello"
    assert post.user_id == "u1"
    assert post.image_url is None
    assert post.created_at is not None


async def test_create_post_sanitizes_markup(post_repo):
    post_id = await post_repo.create_post(
        PostInput(user_id="u1", author="Ada", title="<h1>Hi</h1>", content="<script>x</script>ok")
    )
    post = await post_repo.get_post(post_id)
    assert post.title == "Hi"
    assert "<script>" not in post.content


async def test_create_post_uploads_image_first(store, blobs, post_repo, post_input):
    image = ImageUpload(filename="cat.png", content_type="image/png", data=b"png")

    post_id = await post_repo.create_post(post_input, image)

    [key] = blobs.objects
    assert key.startswith("images/") and key.endswith("-cat.png")
    post = await post_repo.get_post(post_id)
    assert post.image_url == f"https://cdn.example.test/{key}"


@pytest.mark.parametrize("title, content", [("", "x"), ("x", "   "), (" ", "\n")])
async def test_create_post_rejects_blank_fields_without_io(store, post_repo, title, content):
    with pytest.raises(ValidationError):
        await post_repo.create_post(PostInput(user_id="u1", author="Ada", title=title, content=content))
    assert store.calls == []


async def test_create_post_rejects_bad_images(store, blobs, post_repo, post_input):
    not_image = ImageUpload(filename="a.pdf", content_type="application/pdf", data=b"%PDF")
    too_big = ImageUpload(filename="a.png", content_type="image/png", data=b"x" * (1024 * 1024 + 1))

    for image in (not_image, too_big):
        with pytest.raises(ValidationError):
            await post_repo.create_post(post_input, image)

    assert blobs.objects == {}
    assert store.calls == []


async def test_upload_failure_aborts_post_creation(store, blobs, post_repo, post_input):
    blobs.fail = True
    image = ImageUpload(filename="cat.png", content_type="image/png", data=b"png")

    with pytest.raises(UploadError):
        await post_repo.create_post(post_input, image)

    assert store.count("create") == 0


async def test_document_failure_leaves_uploaded_image_orphaned(store, blobs, post_repo, post_input):
    store.fail.add("create")
    image = ImageUpload(filename="cat.png", content_type="image/png", data=b"png")

    with pytest.raises(DataAccessError):
        await post_repo.create_post(post_input, image)

    assert len(blobs.objects) == 1
    assert store.collections["posts"] == []


async def test_post_text_is_stored_as_typed(post_repo):
    title = 'Q&A: is "a < b"?'
    content = "Fish & chips > salad, it's true"

    post_id = await post_repo.create_post(PostInput(user_id="u1", author="Ada", title=title, content=content))

    post = await post_repo.get_post(post_id)
    assert post.title == title
    assert post.content == content


async def test_malformed_post_documents_are_skipped_in_listing(store, post_repo):
    seed_post(store, "p1", "A", T1)
    store.seed("posts", "legacy", author="Ada", content="no title", created_at=T2)

    posts = await post_repo.list_posts()

    assert [p.id for p in posts] == ["p1"]


async def test_malformed_post_lookup_is_a_data_access_error(store, post_repo):
    store.seed("posts", "legacy", author="Ada", content="no title", created_at=T2)

    with pytest.raises(DataAccessError):
        await post_repo.get_post("legacy")
