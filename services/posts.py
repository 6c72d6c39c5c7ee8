import logging
import uuid
from typing import List, Optional

from errors import DataAccessError, ValidationError
from models.post import ImageUpload, Post, PostInput
from services.datastore import SERVER_TIMESTAMP, DataStore, to_model, to_models
from services.s3 import S3Service
from utils.text import strip_markup

logger = logging.getLogger(__name__)

POSTS = "posts"


class PostRepository:
    def __init__(self, store: DataStore, blobs: S3Service, max_image_mb: int = 5):
        self.store = store
        self.blobs = blobs
        self.max_image_mb = max_image_mb

    async def list_posts(self) -> List[Post]:
        """Get all posts, newest first. An empty store gives an empty list"""
        documents = await self.store.list_documents(POSTS, order_by="created_at", descending=True)
        return to_models(documents, Post.from_document, "post")

    async def get_post(self, post_id: str) -> Optional[Post]:
        """Get a post by ID, None if it does not exist"""
        doc = await self.store.get_document(POSTS, post_id)
        if doc is None:
            return None
        return to_model(doc, Post.from_document, "post")

    async def create_post(self, post_input: PostInput, image: Optional[ImageUpload] = None) -> str:
        """
        Create a new post, uploading its image first when there is one

        Upload and document write are not transactional: if the write fails after
        the upload succeeded the image stays orphaned in the bucket.

        :return: the ID of the new post
        :raises ValidationError: blank title or content, or an unacceptable image
        :raises UploadError: the image could not be stored, no post is written
        :raises DataAccessError: the post document could not be written
        """
        self._validate(post_input, image)

        image_url = None
        image_key = None
        if image is not None:
            image_key = f"images/{uuid.uuid4()}-{image.filename}"
            await self.blobs.upload(image_key, image.data, image.content_type)
            image_url = await self.blobs.get_url(image_key)

        new_post_data = {
            "user_id": post_input.user_id,
            "author": post_input.author,
            "title": strip_markup(post_input.title),
            "content": strip_markup(post_input.content),
            "image_url": image_url,
            "created_at": SERVER_TIMESTAMP,
        }
        try:
            post_id = await self.store.create_document(POSTS, new_post_data)
        except DataAccessError:
            if image_key:
                logger.warning("Post write failed, image %s is orphaned", image_key)
            raise

        logger.info("Created post %s by %s", post_id, post_input.user_id)
        return post_id

    def _validate(self, post_input: PostInput, image: Optional[ImageUpload]):
        if not post_input.title.strip() or not post_input.content.strip():
            raise ValidationError("Title and content cannot be empty.")

        if image is None:
            return
        if not image.content_type.startswith("image/"):
            raise ValidationError("Only image files can be attached to a post.")
        if image.size > self.max_image_mb * 1024 * 1024:
            raise ValidationError(f"File size exceeds {self.max_image_mb}MB limit")
