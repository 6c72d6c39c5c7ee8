from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from services.datastore import Document


class PostInput(BaseModel):
    user_id: str
    author: str
    title: str
    content: str


class Post(BaseModel):
    id: str
    user_id: str
    author: str
    title: str
    content: str
    image_url: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_document(cls, doc: Document) -> "Post":
        return cls(id=doc.id, **doc.fields)


class ImageUpload(BaseModel):
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)
