# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
MongoDB record store for users, issues, events, NGOs and profiles.

Every write touches a single document. Array fields are only ever appended
with ``$push``/``$addToSet`` and counters only move through ``$inc``/``$max``.
"""

import logging
from datetime import datetime
from typing import List, Dict, Optional, Any
from pymongo import MongoClient, ASCENDING, DESCENDING, ReturnDocument
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

USERS = "users"
ISSUES = "issues"
EVENTS = "events"
NGOS = "ngos"
PROFILES = "profiles"


class DuplicateRecordError(ValueError):
    """Raised when a unique index rejects a write."""
    pass


class MongoDBService:
    """MongoDB service with connection pooling and single-document updates."""

    def __init__(self, connection_string: str = 'mongodb://localhost:27017',
                 database_name: str = 'citybeatflow', client: Optional[MongoClient] = None,
                 max_pool_size: int = 10, server_selection_timeout_ms: int = 5000):
        """Initialize the service; the client connects lazily unless one is injected."""
        self.connection_string = connection_string
        self.database_name = database_name
        self._client: Optional[MongoClient] = client
        self._database: Optional[Database] = None
        self.max_pool_size = max_pool_size
        self.server_selection_timeout_ms = server_selection_timeout_ms

        logger.info(f"MongoDB service initialized for database: {self.database_name}")

    @property
    def client(self) -> MongoClient:
        """Get MongoDB client with connection pooling."""
        if self._client is None:
            try:
                self._client = MongoClient(
                    self.connection_string,
                    maxPoolSize=self.max_pool_size,
                    serverSelectionTimeoutMS=self.server_selection_timeout_ms,
                    retryWrites=True,
                    retryReads=True
                )
                self._client.admin.command('ping')
                logger.info("MongoDB connection established successfully")
            except (ConnectionFailure, ServerSelectionTimeoutError) as e:
                logger.error(f"Failed to connect to MongoDB: {e}")
                raise

        return self._client

    @property
    def database(self) -> Database:
        if self._database is None:
            self._database = self.client[self.database_name]
        return self._database

    def get_collection(self, collection_name: str) -> Collection:
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
                'database': self.database_name
            }
        except Exception as e:
            logger.error(f"MongoDB health check failed: {e}")
            return {
                'status': 'unhealthy',
                'error': str(e),
                'database': self.database_name
            }

    # Helpers

    @staticmethod
    def _validate_object_id(doc_id: str) -> ObjectId:
        """Validate and convert string ID to ObjectId."""
        try:
            return ObjectId(doc_id)
        except (InvalidId, TypeError):
            raise ValueError(f"Invalid ObjectId format: {doc_id}")

    @staticmethod
    def _to_record(document: Optional[Dict]) -> Optional[Dict]:
        """Expose ``_id`` as a string ``id``."""
        if document is None:
            return None
        if "_id" in document:
            document["id"] = str(document.pop("_id"))
        return document

    @staticmethod
    def _build_update(set_fields: Dict = None, push: Dict = None, inc: Dict = None,
                      maximum: Dict = None, add_to_set: Dict = None) -> Dict:
        """Assemble an update document, always bumping ``updatedAt``."""
        update = {"$set": dict(set_fields or {})}
        update["$set"]["updatedAt"] = datetime.utcnow()
        if push:
            update["$push"] = push
        if inc:
            update["$inc"] = inc
        if maximum:
            update["$max"] = maximum
        if add_to_set:
            update["$addToSet"] = add_to_set
        return update

    # CRUD operations

    def create(self, collection: str, document: Dict) -> Dict:
        """Insert a document and return it with its new ``id``."""
        try:
            now = datetime.utcnow()
            document = dict(document)
            document["createdAt"] = now
            document["updatedAt"] = now
            document["_id"] = ObjectId()

            result = self.get_collection(collection).insert_one(document)

            logger.info(f"Created document in {collection}: {result.inserted_id}")
            return self._to_record(document)

        except DuplicateKeyError as e:
            logger.warning(f"Duplicate key error in {collection}: {e}")
            raise DuplicateRecordError("Document with this identifier already exists")
        except Exception as e:
            logger.error(f"Failed to create document in {collection}: {e}")
            raise

    def find(self, collection: str, filters: Dict = None, sort_by: str = "createdAt",
             sort_order: int = DESCENDING) -> List[Dict]:
        """Find documents matching filters, newest first by default."""
        try:
            cursor = self.get_collection(collection).find(filters or {}).sort(sort_by, sort_order)
            documents = [self._to_record(doc) for doc in cursor]

            logger.debug(f"Found {len(documents)} documents in {collection}")
            return documents

        except Exception as e:
            logger.error(f"Failed to find documents in {collection}: {e}")
            raise

    def find_one(self, collection: str, doc_id: str) -> Optional[Dict]:
        """Find a single document by ID; malformed IDs match nothing."""
        try:
            object_id = self._validate_object_id(doc_id)
        except ValueError as e:
            logger.debug(f"Invalid document ID {doc_id}: {e}")
            return None
        return self.find_one_by(collection, {"_id": object_id})

    def find_one_by(self, collection: str, filters: Dict) -> Optional[Dict]:
        try:
            return self._to_record(self.get_collection(collection).find_one(filters))
        except Exception as e:
            logger.error(f"Failed to find document in {collection}: {e}")
            raise

    def update(self, collection: str, doc_id: str, return_original: bool = False,
               **operations) -> Optional[Dict]:
        """
        Atomically update one document by ID.

        Args:
            collection: Collection name
            doc_id: Document ID
            return_original: Return the pre-update document instead of the updated one
            **operations: ``set_fields``, ``push``, ``inc``, ``maximum``, ``add_to_set``

        Returns:
            The matched document, or None if no document has that ID
        """
        try:
            object_id = self._validate_object_id(doc_id)
        except ValueError as e:
            logger.debug(f"Invalid document ID {doc_id}: {e}")
            return None
        return self.update_by(collection, {"_id": object_id}, return_original, **operations)

    def update_by(self, collection: str, filters: Dict, return_original: bool = False,
                  **operations) -> Optional[Dict]:
        """Atomically update the first document matching filters."""
        try:
            document = self.get_collection(collection).find_one_and_update(
                filters,
                self._build_update(**operations),
                return_document=ReturnDocument.BEFORE if return_original else ReturnDocument.AFTER
            )

            if document is None:
                logger.debug(f"No document matched update in {collection}")
            return self._to_record(document)

        except DuplicateKeyError as e:
            logger.warning(f"Duplicate key error in {collection}: {e}")
            raise DuplicateRecordError("Document with this identifier already exists")
        except Exception as e:
            logger.error(f"Failed to update document in {collection}: {e}")
            raise

    def upsert_by(self, collection: str, filters: Dict, set_fields: Dict,
                  set_on_insert: Dict = None) -> Dict:
        """Update the matching document or insert one built from filters and fields."""
        try:
            now = datetime.utcnow()
            on_insert = dict(set_on_insert or {})
            on_insert["createdAt"] = now
            update = {"$set": dict(set_fields, updatedAt=now), "$setOnInsert": on_insert}

            document = self.get_collection(collection).find_one_and_update(
                filters,
                update,
                upsert=True,
                return_document=ReturnDocument.AFTER
            )
            return self._to_record(document)

        except Exception as e:
            logger.error(f"Failed to upsert document in {collection}: {e}")
            raise

    def count(self, collection: str, filters: Dict = None) -> int:
        try:
            return self.get_collection(collection).count_documents(filters or {})
        except Exception as e:
            logger.error(f"Failed to count documents in {collection}: {e}")
            raise

    # Index management

    def create_indexes(self) -> None:
        """Create unique and query indexes for all collections."""
        try:
            logger.info("Creating MongoDB indexes...")

            self.get_collection(USERS).create_index("email", unique=True)
            self.get_collection(NGOS).create_index("email", unique=True)
            self.get_collection(PROFILES).create_index("email")

            issues = self.get_collection(ISSUES)
            issues.create_index([("status", ASCENDING), ("reportedAt", ASCENDING)])
            issues.create_index([("reporterEmail", ASCENDING), ("createdAt", DESCENDING)])
            issues.create_index([("claimedByNGO", ASCENDING), ("createdAt", DESCENDING)])

            self.get_collection(EVENTS).create_index([("ngo", ASCENDING), ("createdAt", DESCENDING)])

            logger.info("MongoDB indexes created successfully")

        except Exception as e:
            logger.error(f"Failed to create MongoDB indexes: {e}")
            raise
