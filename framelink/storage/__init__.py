"""MongoDB persistence for contact records and uploaded file metadata."""

from framelink.storage.database import (
    CONTACTS_COLLECTION,
    UPLOADED_FILES_COLLECTION,
    close_mongo_client,
    get_database,
)
from framelink.storage.repositories import (
    FILE_LIST_LIMIT,
    ContactRepository,
    UploadedFileRepository,
)

__all__ = [
    "CONTACTS_COLLECTION",
    "FILE_LIST_LIMIT",
    "UPLOADED_FILES_COLLECTION",
    "ContactRepository",
    "UploadedFileRepository",
    "close_mongo_client",
    "get_database",
]
