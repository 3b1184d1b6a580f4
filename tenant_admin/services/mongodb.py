# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
MongoDB connection management and index setup.
"""

import os
import logging
from typing import Any, Dict, Optional

from pymongo import MongoClient, ASCENDING, DESCENDING
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, PyMongoError, ServerSelectionTimeoutError

logger = logging.getLogger(__name__)

COLLECTIONS = (
    "tenants",
    "users",
    "persons",
    "contact_infos",
    "fiscal_addresses",
    "configurations",
    "configuration_values",
    "sessions",
    "security_alerts",
    "user_settings",
)


class MongoDBService:
    """MongoDB client holder with connection pooling."""

    def __init__(self, connection_string: str = None, database_name: str = None):
        self.connection_string = connection_string or os.getenv(
            'MONGODB_URI',
            'mongodb://localhost:27017/tenant_admin_dev'
        )
        self.database_name = database_name or os.getenv('MONGODB_DATABASE', 'tenant_admin_dev')
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
        """Get MongoDB client, connecting on first use."""
        if self._client is None:
            try:
                self._client = MongoClient(
                    self.connection_string,
                    maxPoolSize=self.max_pool_size,
                    minPoolSize=self.min_pool_size,
                    maxIdleTimeMS=self.max_idle_time_ms,
                    serverSelectionTimeoutMS=self.server_selection_timeout_ms,
                    retryWrites=True,
                    retryReads=True,
                    tz_aware=True
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
        except PyMongoError as e:
            logger.error(f"MongoDB health check failed: {e}")
            return {
                'status': 'unhealthy',
                'error': str(e),
                'database': self.database_name
            }

    # Index Management

    def create_indexes(self) -> None:
        """Create the unique keys and query indexes for every collection."""
        try:
            logger.info("Creating MongoDB indexes...")

            users = self.get_collection("users")
            users.create_index("email", unique=True)
            users.create_index([("tenantId", ASCENDING), ("isActive", ASCENDING)])

            persons = self.get_collection("persons")
            persons.create_index(
                [("tenantId", ASCENDING), ("identificationType", ASCENDING), ("identificationNumber", ASCENDING)],
                unique=True
            )
            persons.create_index([("tenantId", ASCENDING), ("isActive", ASCENDING)])
            persons.create_index([("tenantId", ASCENDING), ("personTypeId", ASCENDING)])
            persons.create_index([("tenantId", ASCENDING), ("createdAt", DESCENDING)])

            contacts = self.get_collection("contact_infos")
            contacts.create_index(
                [("tenantId", ASCENDING), ("email", ASCENDING)],
                unique=True,
                partialFilterExpression={"email": {"$type": "string"}}
            )
            contacts.create_index(
                [("tenantId", ASCENDING), ("phone", ASCENDING)],
                unique=True,
                partialFilterExpression={"phone": {"$type": "string"}}
            )
            contacts.create_index(
                "personId",
                unique=True,
                partialFilterExpression={"isPrimary": True},
                name="one_primary_contact_per_person"
            )
            contacts.create_index([("tenantId", ASCENDING), ("personId", ASCENDING)])

            addresses = self.get_collection("fiscal_addresses")
            addresses.create_index("personId", unique=True)
            addresses.create_index([("tenantId", ASCENDING), ("city", ASCENDING)])

            configurations = self.get_collection("configurations")
            configurations.create_index([("tenantId", ASCENDING), ("name", ASCENDING)], unique=True)
            configurations.create_index([("tenantId", ASCENDING), ("sortOrder", ASCENDING)])

            values = self.get_collection("configuration_values")
            values.create_index(
                [("tenantId", ASCENDING), ("configurationTypeId", ASCENDING), ("value", ASCENDING)],
                unique=True
            )
            values.create_index([("tenantId", ASCENDING), ("configurationTypeId", ASCENDING), ("sortOrder", ASCENDING)])

            sessions = self.get_collection("sessions")
            sessions.create_index([("userId", ASCENDING), ("createdAt", DESCENDING)])
            sessions.create_index("tenantId")
            sessions.create_index("expiresAt")

            alerts = self.get_collection("security_alerts")
            alerts.create_index([("tenantId", ASCENDING), ("createdAt", DESCENDING)])
            alerts.create_index([("tenantId", ASCENDING), ("status", ASCENDING)])
            alerts.create_index([("tenantId", ASCENDING), ("severity", ASCENDING)])

            settings = self.get_collection("user_settings")
            settings.create_index("userId", unique=True)

            logger.info("MongoDB indexes created successfully")

        except PyMongoError as e:
            logger.error(f"Failed to create MongoDB indexes: {e}")
            raise
