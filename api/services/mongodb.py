# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
MongoDB service layer with document and array operations and connection pooling.
"""

import os
import logging
from typing import List, Dict, Optional, Any
from pymongo import MongoClient, ASCENDING, DESCENDING, ReturnDocument, TEXT
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import (
    ConnectionFailure,
    ServerSelectionTimeoutError,
    DuplicateKeyError
)
from bson import ObjectId
from bson.errors import InvalidId

logger = logging.getLogger(__name__)

FORMS_COLLECTION = "businesscontractforms"
AGENCIES_COLLECTION = "agencies"
BUSINESSES_COLLECTION = "businesses"
WORKERS_COLLECTION = "workers"

# Owner documents keep the ids of the forms they hold in this array.
OWNER_FORMS_FIELD = "businessContractForms"

FORM_SEARCH_INDEX = "search_index"
FORM_SEARCH_WEIGHTS = {"title": 3, "tags": 2, "description": 1}


class PaginationResult:
    """Result container for paginated queries."""

    def __init__(self, items: List[Dict], total: int, page: int, page_size: int):
        self.items = items
        self.total = total
        self.page = page
        self.page_size = page_size
        self.total_pages = (total + page_size - 1) // page_size
        self.has_next = page < self.total_pages
        self.has_prev = page > 1


class MongoDBService:
    """MongoDB service with per-document operations and connection pooling."""

    def __init__(self, connection_string: str = None, database_name: str = None):
        """Initialize MongoDB service with connection pooling."""
        self.connection_string = connection_string or os.getenv(
            'MONGODB_URI',
            'mongodb://localhost:27017/staffing_forms_dev'
        )
        self.database_name = database_name or os.getenv('MONGODB_DATABASE', 'staffing_forms_dev')
        self._client: Optional[MongoClient] = None
        self._database: Optional[Database] = None

        # Connection pool settings
        self.max_pool_size = int(os.getenv('MONGODB_MAX_POOL_SIZE', '10'))
        self.min_pool_size = int(os.getenv('MONGODB_MIN_POOL_SIZE', '1'))
        self.max_idle_time_ms = int(os.getenv('MONGODB_MAX_IDLE_TIME_MS', '30000'))
        self.server_selection_timeout_ms = int(os.getenv('MONGODB_SERVER_SELECTION_TIMEOUT_MS', '5000'))

        logger.info(f"MongoDB service initialized for database: {self.database_name}")

    @property
    def client(self) -> MongoClient:
        """Get MongoDB client with connection pooling."""
        if self._client is None:
            try:
                self._client = MongoClient(
                    self.connection_string,
                    maxPoolSize=self.max_pool_size,
                    minPoolSize=self.min_pool_size,
                    maxIdleTimeMS=self.max_idle_time_ms,
                    serverSelectionTimeoutMS=self.server_selection_timeout_ms,
                    retryWrites=True,
                    retryReads=True
                )
                # Test connection
                self._client.admin.command('ping')
                logger.info("MongoDB connection established successfully")
            except (ConnectionFailure, ServerSelectionTimeoutError) as e:
                logger.error(f"Failed to connect to MongoDB: {e}")
                self._client = None
                raise

        return self._client

    @property
    def database(self) -> Database:
        """Get MongoDB database."""
        if self._database is None:
            self._database = self.client[self.database_name]
        return self._database

    def get_collection(self, collection_name: str) -> Collection:
        """Get MongoDB collection."""
        return self.database[collection_name]

    def close_connection(self) -> None:
        """Close MongoDB connection."""
        if self._client:
            self._client.close()
            self._client = None
            self._database = None
            logger.info("MongoDB connection closed")

    def health_check(self) -> Dict[str, Any]:
        """Check MongoDB connection health."""
        try:
            result = self.client.admin.command('ping')
            server_info = self.client.server_info()

            return {
                'status': 'healthy',
                'ping': result.get('ok') == 1,
                'version': server_info.get('version'),
                'database': self.database_name,
                'connection_pool_size': self.max_pool_size
            }
        except Exception as e:
            logger.error(f"MongoDB health check failed: {e}")
            return {
                'status': 'unhealthy',
                'error': str(e),
                'database': self.database_name
            }

    def validate_object_id(self, doc_id: Any) -> ObjectId:
        """Validate and convert string ID to ObjectId."""
        if isinstance(doc_id, ObjectId):
            return doc_id
        try:
            return ObjectId(doc_id)
        except (InvalidId, TypeError):
            raise ValueError(f"Invalid ObjectId format: {doc_id}")

    # Document operations

    def insert(self, collection: str, document: Dict) -> str:
        """Insert a new document, assigning an ObjectId when missing."""
        try:
            if "_id" not in document:
                document["_id"] = ObjectId()

            result = self.get_collection(collection).insert_one(document)

            logger.info(f"Created document in {collection}: {result.inserted_id}")
            return str(result.inserted_id)

        except DuplicateKeyError as e:
            logger.error(f"Duplicate key error in {collection}: {e}")
            raise ValueError("Document with this identifier already exists")
        except Exception as e:
            logger.error(f"Failed to create document in {collection}: {e}")
            raise

    def find_by_id(self, collection: str, doc_id: Any) -> Optional[Dict]:
        """Find a single document by ID; malformed IDs find nothing."""
        try:
            object_id = self.validate_object_id(doc_id)
        except ValueError as e:
            logger.debug(f"Invalid document ID {doc_id}: {e}")
            return None

        try:
            document = self.get_collection(collection).find_one({"_id": object_id})

            if document:
                logger.debug(f"Found document {doc_id} in {collection}")
            else:
                logger.debug(f"Document {doc_id} not found in {collection}")

            return document

        except Exception as e:
            logger.error(f"Failed to find document {doc_id} in {collection}: {e}")
            raise

    def replace_by_id(self, collection: str, doc_id: Any, document: Dict) -> Optional[Dict]:
        """Replace a whole document by ID and return the stored replacement."""
        try:
            object_id = self.validate_object_id(doc_id)
            replacement = {key: value for key, value in document.items() if key != "_id"}

            result = self.get_collection(collection).find_one_and_replace(
                {"_id": object_id},
                replacement,
                return_document=ReturnDocument.AFTER
            )

            if result is not None:
                logger.info(f"Replaced document {doc_id} in {collection}")
            else:
                logger.warning(f"No document replaced for {doc_id} in {collection}")

            return result

        except Exception as e:
            logger.error(f"Failed to replace document {doc_id} in {collection}: {e}")
            raise

    def delete_by_id(self, collection: str, doc_id: Any) -> Optional[Dict]:
        """Delete a document by ID and return the removed document."""
        try:
            object_id = self.validate_object_id(doc_id)
            result = self.get_collection(collection).find_one_and_delete({"_id": object_id})

            if result is not None:
                logger.info(f"Deleted document {doc_id} in {collection}")
            else:
                logger.warning(f"No document deleted for {doc_id} in {collection}")

            return result

        except Exception as e:
            logger.error(f"Failed to delete document {doc_id} in {collection}: {e}")
            raise

    # Array operations

    def add_to_set(self, collection: str, doc_id: Any, field: str, value: Any) -> bool:
        """Add ``value`` to an array field without creating duplicates."""
        try:
            object_id = self.validate_object_id(doc_id)
            result = self.get_collection(collection).update_one(
                {"_id": object_id},
                {"$addToSet": {field: value}}
            )

            if result.matched_count > 0:
                logger.info(f"Added {value} to {collection}.{field} of {doc_id}")
                return True

            logger.warning(f"No document matched {doc_id} in {collection} for $addToSet")
            return False

        except Exception as e:
            logger.error(f"Failed to update {field} of {doc_id} in {collection}: {e}")
            raise

    def pull(self, collection: str, doc_id: Any, field: str, values: List[Any]) -> bool:
        """Remove every entry in ``values`` from an array field."""
        try:
            object_id = self.validate_object_id(doc_id)
            result = self.get_collection(collection).update_one(
                {"_id": object_id},
                {"$pull": {field: {"$in": values}}}
            )

            if result.matched_count > 0:
                logger.info(f"Pulled {values} from {collection}.{field} of {doc_id}")
                return True

            logger.warning(f"No document matched {doc_id} in {collection} for $pull")
            return False

        except Exception as e:
            logger.error(f"Failed to update {field} of {doc_id} in {collection}: {e}")
            raise

    def paginate(self, collection: str, query: Dict, page: int = 1, page_size: int = 20,
                 text_search: Optional[str] = None, sort_by: str = "createdAt",
                 sort_order: int = DESCENDING) -> PaginationResult:
        """
        Paginate documents matching ``query``.

        With ``text_search`` the text index is queried and results are ordered
        by relevance score instead of ``sort_by``.
        """
        try:
            query = dict(query)
            projection = None
            if text_search:
                query["$text"] = {"$search": text_search}
                projection = {"score": {"$meta": "textScore"}}

            collection_obj = self.get_collection(collection)
            skip = (page - 1) * page_size

            total = collection_obj.count_documents(query)

            cursor = collection_obj.find(query, projection)
            if text_search:
                cursor = cursor.sort([("score", {"$meta": "textScore"})])
            else:
                cursor = cursor.sort(sort_by, sort_order)
            documents = list(cursor.skip(skip).limit(page_size))

            for document in documents:
                document.pop("score", None)

            logger.debug(f"Paginated {len(documents)} documents from {collection} (page {page})")
            return PaginationResult(documents, total, page, page_size)

        except Exception as e:
            logger.error(f"Failed to paginate documents in {collection}: {e}")
            raise

    # Index Management

    def create_indexes(self) -> None:
        """Create search and lookup indexes for forms and their owners."""
        try:
            logger.info("Creating MongoDB indexes...")

            forms = self.get_collection(FORMS_COLLECTION)
            forms.create_index(
                [("title", TEXT), ("description", TEXT), ("tags", TEXT)],
                name=FORM_SEARCH_INDEX,
                weights=FORM_SEARCH_WEIGHTS
            )
            forms.create_index([("createdAt", DESCENDING)])

            for owner_collection in (AGENCIES_COLLECTION, BUSINESSES_COLLECTION, WORKERS_COLLECTION):
                self.get_collection(owner_collection).create_index([(OWNER_FORMS_FIELD, ASCENDING)])

            logger.info("MongoDB indexes created successfully")

        except Exception as e:
            logger.error(f"Failed to create MongoDB indexes: {e}")
            raise


# Singleton instance for application use
_mongodb_service: Optional[MongoDBService] = None


def get_mongodb_service() -> MongoDBService:
    """Get singleton MongoDB service instance."""
    global _mongodb_service
    if _mongodb_service is None:
        _mongodb_service = MongoDBService()
    return _mongodb_service


def close_mongodb_connection() -> None:
    """Close MongoDB connection (for cleanup)."""
    global _mongodb_service
    if _mongodb_service:
        _mongodb_service.close_connection()
        _mongodb_service = None
