import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, TypeVar

from google.cloud import firestore
from pydantic import ValidationError as PydanticValidationError

from errors import DataAccessError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Placeholder for "created at" fields, the store replaces it with its own clock
SERVER_TIMESTAMP = firestore.SERVER_TIMESTAMP


@dataclass(frozen=True)
class Document:
    """A stored document: its store-assigned id and its fields"""
    id: str
    fields: Dict[str, Any] = field(default_factory=dict)


class DataStore(ABC):
    """Base interface for the remote document store

    Every method is a coroutine and raises DataAccessError when the store cannot
    be reached or rejects the call.
    """

    @abstractmethod
    async def list_documents(
            self,
            collection: str,
            order_by: Optional[str] = None,
            descending: bool = False
    ) -> List[Document]:
        """List all documents of a collection, optionally ordered by one field

        Args:
            collection: Collection path, e.g. "posts" or "posts/{id}/comments"
            order_by: Field to order by, store order when omitted
            descending: Sort direction for order_by
        """

    @abstractmethod
    async def get_document(self, collection: str, document_id: str) -> Optional[Document]:
        """Look up one document, None when it does not exist"""

    @abstractmethod
    async def create_document(self, collection: str, fields: Dict[str, Any]) -> str:
        """Create a document with a store-assigned id and return that id"""


def to_models(documents: List[Document], build: Callable[[Document], T], kind: str) -> List[T]:
    """
    Map stored documents to models, skipping documents that do not fit the model

    Older documents written with another schema are logged and left out rather than
    failing the whole listing.
    """
    models = []
    for doc in documents:
        try:
            models.append(build(doc))
        except (PydanticValidationError, TypeError) as e:
            logger.warning("Skipping malformed %s document %s: %s", kind, doc.id, e)
    return models


def to_model(doc: Document, build: Callable[[Document], T], kind: str) -> T:
    """Map one stored document to a model, a malformed document is a DataAccessError"""
    try:
        return build(doc)
    except (PydanticValidationError, TypeError) as e:
        logger.warning("Malformed %s document %s: %s", kind, doc.id, e)
        raise DataAccessError(f"Stored {kind} {doc.id} is malformed") from e
