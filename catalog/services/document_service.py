import logging
import re
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator, List, Mapping, Optional, Union

import bson
from bson import ObjectId
from bson.errors import InvalidDocument
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, DocumentTooLarge, PyMongoError

from catalog.config import get_settings
from catalog.services.exceptions import (
    DocumentNotFoundError,
    DocumentTooLargeError,
    StoreFailureError,
    StoreUnavailableError,
)
from catalog.utils.filters import (
    PRIMARY_KEY,
    build_filter,
    parse_limit,
    parse_object_id,
    parse_sort,
)

logger = logging.getLogger(__name__)

Document = dict[str, Any]

_COLLECTION_NAME = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")


class InvalidCollectionError(ValueError):
    """Exception raised for collection names the proxy refuses to address."""


def utc_timestamp() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class DocumentRepository:
    """
    Generic CRUD access to the collections of a document store.

    The repository is the only place that talks to MongoDB. It handles:
    - Translating ``field[op]=value`` parameters into filters
    - Exposing ``_id`` to clients as a string ``id`` field
    - Stamping ``created_at`` on insert
    - Keeping identity and creation time immutable on update
    - Turning driver failures into ``StoreFailureError`` subclasses
    """

    # Fields that can never be written after a document is created
    IMMUTABLE_FIELDS = frozenset({"id", PRIMARY_KEY, "created_at"})

    def __init__(self, db: Database, max_document_bytes: Optional[int] = None):
        self.db = db
        self.max_document_bytes = max_document_bytes or get_settings().MAX_DOCUMENT_BYTES

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------
    def list(self, collection: str, params: Optional[Mapping[str, Any]] = None) -> List[Document]:
        """
        List documents matching query parameters.

        Args:
            collection: Collection name
            params: Query parameters (``field[op]=value``, ``order``, ``limit``)

        Returns:
            Matching documents in client shape
        """
        params = params or {}
        filter_doc = build_filter(params)
        sort = parse_sort(params.get("order"))
        limit = parse_limit(params.get("limit"))

        logger.info(f"GET {collection} filter={filter_doc} sort={sort} limit={limit}")

        with self._store_errors("list", collection):
            cursor = self._collection(collection).find(filter_doc)
            if sort:
                cursor = cursor.sort(*sort)
            if limit:
                cursor = cursor.limit(limit)
            documents = [self._to_client(doc) for doc in cursor]

        logger.info(f"Found {len(documents)} documents in {collection}")
        return documents

    def get(self, collection: str, document_id: str) -> Document:
        """
        Get a single document by identifier.

        Raises:
            DocumentNotFoundError: If no document has that identifier
        """
        object_id = self._require_object_id(collection, document_id)
        with self._store_errors("get", collection):
            document = self._collection(collection).find_one({PRIMARY_KEY: object_id})
        if document is None:
            raise DocumentNotFoundError(collection, document_id)
        return self._to_client(document)

    def find_one(self, collection: str, document_id: str) -> Optional[Document]:
        """Like ``get`` but returns None instead of raising."""
        try:
            return self.get(collection, document_id)
        except DocumentNotFoundError:
            return None

    # ------------------------------------------------------------------
    # Write operations
    # ------------------------------------------------------------------
    def insert(
        self,
        collection: str,
        payload: Union[Document, List[Document]],
    ) -> Union[Document, List[Document]]:
        """
        Insert one document or a list of documents.

        Client-supplied identifiers are dropped and ``created_at`` is
        stamped when missing. The result has the same shape as the input.
        """
        items = payload if isinstance(payload, list) else [payload]
        timestamp = utc_timestamp()

        to_insert = []
        for item in items:
            document = self._encode_references(
                {k: v for k, v in item.items() if k not in ("id", PRIMARY_KEY)}
            )
            if not document.get("created_at"):
                document["created_at"] = timestamp
            document[PRIMARY_KEY] = ObjectId()
            self._check_size(document)
            to_insert.append(document)

        logger.info(f"POST {collection} ({len(to_insert)} documents)")

        if not to_insert:
            return []

        with self._store_errors("insert", collection):
            self._collection(collection).insert_many(to_insert)

        inserted = [self._to_client(doc) for doc in to_insert]
        logger.info(f"Inserted {len(inserted)} documents into {collection}")
        return inserted if isinstance(payload, list) else inserted[0]

    def update(
        self,
        collection: str,
        params: Optional[Mapping[str, Any]],
        changes: Document,
    ) -> List[Document]:
        """
        Merge ``changes`` into every document matching the parameters.

        Returns:
            The matching documents after the update
        """
        filter_doc = build_filter(params or {})
        update_data = self._writable(changes)

        logger.info(f"PATCH {collection} filter={filter_doc} fields={sorted(update_data)}")

        with self._store_errors("update", collection):
            coll = self._collection(collection)
            if update_data:
                result = coll.update_many(filter_doc, {"$set": update_data})
                logger.info(f"Updated {result.modified_count} documents in {collection}")
            documents = [self._to_client(doc) for doc in coll.find(filter_doc)]
        return documents

    def update_by_id(self, collection: str, document_id: str, changes: Document) -> Document:
        """
        Merge ``changes`` into a single document.

        Raises:
            DocumentNotFoundError: If no document has that identifier
        """
        object_id = self._require_object_id(collection, document_id)
        update_data = self._writable(changes)

        logger.info(f"PATCH {collection}/{document_id} fields={sorted(update_data)}")

        with self._store_errors("update", collection):
            coll = self._collection(collection)
            if update_data:
                result = coll.update_one({PRIMARY_KEY: object_id}, {"$set": update_data})
                if result.matched_count == 0:
                    raise DocumentNotFoundError(collection, document_id)
            document = coll.find_one({PRIMARY_KEY: object_id})

        if document is None:
            raise DocumentNotFoundError(collection, document_id)
        return self._to_client(document)

    def delete(self, collection: str, params: Optional[Mapping[str, Any]]) -> List[Document]:
        """Delete every document matching the parameters and return them."""
        filter_doc = build_filter(params or {})

        logger.info(f"DELETE {collection} filter={filter_doc}")

        with self._store_errors("delete", collection):
            coll = self._collection(collection)
            to_delete = list(coll.find(filter_doc))
            if to_delete:
                coll.delete_many({PRIMARY_KEY: {"$in": [doc[PRIMARY_KEY] for doc in to_delete]}})

        logger.info(f"Deleted {len(to_delete)} documents from {collection}")
        return [self._to_client(doc) for doc in to_delete]

    def delete_by_id(self, collection: str, document_id: str) -> Document:
        """
        Delete a single document and return it.

        Raises:
            DocumentNotFoundError: If no document has that identifier
        """
        object_id = self._require_object_id(collection, document_id)

        logger.info(f"DELETE {collection}/{document_id}")

        with self._store_errors("delete", collection):
            document = self._collection(collection).find_one_and_delete({PRIMARY_KEY: object_id})
        if document is None:
            raise DocumentNotFoundError(collection, document_id)
        return self._to_client(document)

    def ping(self) -> bool:
        """Check store connectivity. Raises StoreUnavailableError when unreachable."""
        with self._store_errors("ping", "admin"):
            self.db.client.admin.command("ping")
        return True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _collection(self, name: str) -> Collection:
        if not _COLLECTION_NAME.match(name or ""):
            raise InvalidCollectionError(f"Invalid collection name: {name!r}")
        return self.db[name]

    @staticmethod
    def _require_object_id(collection: str, document_id: str) -> ObjectId:
        object_id = parse_object_id(document_id)
        if object_id is None:
            # A malformed identifier can never match a document
            raise DocumentNotFoundError(collection, document_id)
        return object_id

    def _writable(self, changes: Document) -> Document:
        update_data = self._encode_references(
            {k: v for k, v in changes.items() if k not in self.IMMUTABLE_FIELDS}
        )
        self._check_size(update_data)
        return update_data

    @staticmethod
    def _encode_references(document: Document) -> Document:
        # Identifier-shaped references are stored as ObjectIds so that
        # ``product_id[eq]=<hex>`` filters match them.
        for key, value in document.items():
            if key.endswith("_id") and isinstance(value, str):
                object_id = parse_object_id(value)
                if object_id is not None:
                    document[key] = object_id
        return document

    def _check_size(self, document: Document) -> None:
        try:
            size = len(bson.encode(document))
        except InvalidDocument as e:
            raise StoreFailureError(f"Document cannot be stored: {e}") from e
        if size > self.max_document_bytes:
            logger.error(f"Rejected document of {size} bytes (limit {self.max_document_bytes})")
            raise DocumentTooLargeError(size, self.max_document_bytes)

    @staticmethod
    def _to_client(document: Mapping[str, Any]) -> Document:
        result = {}
        for key, value in document.items():
            if key == PRIMARY_KEY:
                continue
            result[key] = str(value) if isinstance(value, ObjectId) else value
        if PRIMARY_KEY in document:
            result["id"] = str(document[PRIMARY_KEY])
        return result

    @contextmanager
    def _store_errors(self, operation: str, collection: str) -> Iterator[None]:
        try:
            yield
        except DocumentTooLarge as e:
            logger.error(f"Document too large during {operation} on {collection}: {e}")
            raise DocumentTooLargeError(limit=self.max_document_bytes) from e
        except ConnectionFailure as e:
            logger.error(f"Document store unreachable during {operation} on {collection}: {e}")
            raise StoreUnavailableError(f"Document store unavailable: {e}") from e
        except (PyMongoError, InvalidDocument) as e:
            logger.error(f"Store error during {operation} on {collection}: {e}")
            raise StoreFailureError(f"Document store error: {e}") from e
