import logging
from typing import Any, Dict, List, Optional

import firebase_admin
from firebase_admin import firestore_async
from google.api_core.exceptions import GoogleAPIError
from google.cloud import firestore

from errors import DataAccessError
from services.datastore import DataStore, Document

logger = logging.getLogger(__name__)


class FirestoreDB(DataStore):
    def __init__(self, app: firebase_admin.App):
        self.db = firestore_async.client(app)

    def collection(self, name: str):
        return self.db.collection(name)

    async def list_documents(
            self,
            collection: str,
            order_by: Optional[str] = None,
            descending: bool = False
    ) -> List[Document]:
        """Get all documents of a collection, sorted by order_by when given"""
        query = self.collection(collection)
        if order_by:
            direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            query = query.order_by(order_by, direction=direction)

        try:
            documents = []
            async for doc in query.stream():
                documents.append(Document(id=doc.id, fields=doc.to_dict() or {}))
            return documents
        except GoogleAPIError as e:
            logger.error("Listing %s failed: %s", collection, e)
            raise DataAccessError(f"Failed to list {collection}") from e

    async def get_document(self, collection: str, document_id: str) -> Optional[Document]:
        """Get a document by ID"""
        try:
            snapshot = await self.collection(collection).document(document_id).get()
        except GoogleAPIError as e:
            logger.error("Lookup of %s/%s failed: %s", collection, document_id, e)
            raise DataAccessError(f"Failed to get {collection}/{document_id}") from e

        if not snapshot.exists:
            return None
        return Document(id=snapshot.id, fields=snapshot.to_dict() or {})

    async def create_document(self, collection: str, fields: Dict[str, Any]) -> str:
        """Create a new document with an auto-generated ID"""
        try:
            _, doc_ref = await self.collection(collection).add(fields)
        except GoogleAPIError as e:
            logger.error("Write to %s failed: %s", collection, e)
            raise DataAccessError(f"Failed to create document in {collection}") from e

        logger.debug("Created %s/%s", collection, doc_ref.id)
        return doc_ref.id
