"""MongoDB connection handle.

One MongoClient per process, created on first use. pymongo connects lazily,
so importing this module never touches the network.
"""

import logging

from pymongo import MongoClient
from pymongo.database import Database

from framelink.config import AppSettings, get_settings

logger = logging.getLogger(__name__)

CONTACTS_COLLECTION = "contacts"
UPLOADED_FILES_COLLECTION = "uploaded_files"
SERVER_SELECTION_TIMEOUT_MS = 5000

# Module-level singleton client
_client: MongoClient | None = None


def get_mongo_client(settings: AppSettings | None = None) -> MongoClient:
    """Get or create the global MongoClient.

    Args:
        settings: Optional settings. Loads from environment if not provided.

    Returns:
        The shared MongoClient instance.
    """
    global _client
    if _client is None:
        settings = settings or get_settings()
        _client = MongoClient(
            settings.mongodb_uri,
            tz_aware=True,
            serverSelectionTimeoutMS=SERVER_SELECTION_TIMEOUT_MS,
        )
        logger.info(f"Created MongoDB client for database {settings.mongodb_db!r}")
    return _client


def get_database() -> Database:
    """Return the application database."""
    settings = get_settings()
    return get_mongo_client(settings)[settings.mongodb_db]


def close_mongo_client() -> None:
    """Close the global client, if one was created."""
    global _client
    if _client is not None:
        _client.close()
        _client = None
        logger.info("Closed MongoDB client")
