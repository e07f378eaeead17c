"""
Generic MongoDB connection manager using the Motor async driver.

This module provides async MongoDB connectivity that works with any database.
Index definitions are provided at connection time, keeping the database
infrastructure separate from application-specific collections.

Example:
    from common.database import MongoDB

    db = MongoDB()
    await db.connect(
        uri="mongodb://localhost:27017",
        database_name="myapp",
        indexes={"users": [IndexModel("email", unique=True)]},
    )

Singleton access:
    from common.database.mongodb import get_main_database

    main_db = get_main_database()
    users = main_db.get_collection("users")
"""

import logging
from typing import Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import IndexModel

logger = logging.getLogger(__name__)

# ─────────────────────────────────────────────────────────────────
# Singleton database instance
# ─────────────────────────────────────────────────────────────────

_main_database: Optional["MongoDB"] = None


def mask_uri(uri: str) -> str:
    """Strip credentials from a MongoDB URI for logging."""
    if "@" not in uri:
        return uri
    scheme, _, rest = uri.partition("://")
    return f"{scheme}://***@{rest.split('@')[-1]}"


class MongoDB:
    """Generic MongoDB connection manager - works with any database."""

    def __init__(self):
        self._client: Optional[AsyncIOMotorClient] = None
        self._database_name: Optional[str] = None

    async def connect(
        self,
        uri: str,
        database_name: str,
        indexes: Optional[Dict[str, List[IndexModel]]] = None,
        server_selection_timeout_ms: int = 5000,
    ) -> None:
        """
        Connect to MongoDB and create the provided indexes.

        Args:
            uri: MongoDB connection string
            database_name: Name of the database to use
            indexes: Mapping of collection name to index models
            server_selection_timeout_ms: Driver server selection timeout
        """
        logger.info(f"Connecting to MongoDB: {mask_uri(uri)}")
        logger.debug(f"Database name: {database_name}")

        try:
            self._client = AsyncIOMotorClient(
                uri,
                serverSelectionTimeoutMS=server_selection_timeout_ms,
                tz_aware=True,
            )
            self._database_name = database_name

            await self._client.admin.command("ping")

            for collection_name, models in (indexes or {}).items():
                logger.debug(f"Ensuring {len(models)} indexes on {collection_name}")
                await self._client[database_name][collection_name].create_indexes(models)

            logger.info(f"Successfully connected to MongoDB database: {database_name}")
        except Exception as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise

    async def disconnect(self) -> None:
        """Close the MongoDB connection."""
        if self._client:
            logger.info(f"Disconnecting from MongoDB database: {self._database_name}")
            self._client.close()
            self._client = None
            self._database_name = None
            logger.debug("MongoDB connection closed")

    async def ping(self) -> bool:
        """Check that the server answers."""
        if not self._client:
            return False
        try:
            await self._client.admin.command("ping")
            return True
        except Exception as e:
            logger.warning(f"MongoDB ping failed: {e}")
            return False

    @property
    def client(self) -> Optional[AsyncIOMotorClient]:
        """Get the underlying Motor client."""
        return self._client

    @property
    def database_name(self) -> Optional[str]:
        """Get the current database name."""
        return self._database_name

    @property
    def db(self) -> AsyncIOMotorDatabase:
        """Get the underlying Motor database instance."""
        if not self._client or not self._database_name:
            raise RuntimeError("Database not connected")
        return self._client[self._database_name]

    def get_collection(self, name: str):
        """
        Get a raw Motor collection for direct access.

        Args:
            name: Collection name

        Returns:
            AsyncIOMotorCollection instance
        """
        if not self._client or not self._database_name:
            logger.error("Attempted to get collection without database connection")
            raise RuntimeError("Database not connected")
        logger.debug(f"Getting collection: {name}")
        return self._client[self._database_name][name]


# ─────────────────────────────────────────────────────────────────
# Singleton initialization and getters
# ─────────────────────────────────────────────────────────────────

def set_main_database(db: "MongoDB") -> None:
    """
    Set the main database singleton from an existing MongoDB instance.

    Args:
        db: MongoDB instance to use as main database
    """
    global _main_database
    _main_database = db
    logger.info("Main database singleton set")


def get_main_database() -> "MongoDB":
    """
    Get the main application database singleton.

    Returns:
        MongoDB instance

    Raises:
        RuntimeError: If database not initialized
    """
    if _main_database is None:
        raise RuntimeError("Main database not initialized. Call set_main_database() first.")
    return _main_database
