"""Repositories over the contacts and uploaded_files collections.

Methods are synchronous pymongo calls; async callers run them through
``run_in_threadpool``.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from pymongo import ASCENDING, DESCENDING
from pymongo.collection import Collection

from framelink.models.schemas import Citation, MetadataCache, UploadedFileSummary

logger = logging.getLogger(__name__)

FILE_LIST_LIMIT = 50


class ContactRepository:
    """Append-only store of answered contact questions."""

    def __init__(self, collection: Collection) -> None:
        self._collection = collection

    def insert(
        self,
        question: str,
        answer: str,
        citations: list[Citation],
        username: str | None = None,
    ) -> str:
        """Insert a conversation record.

        Returns:
            The new record id as a string.
        """
        now = datetime.now(UTC)
        result = self._collection.insert_one(
            {
                "username": username,
                "question": question,
                "answer": answer,
                "citations": [c.model_dump() for c in citations],
                "date": now.date().isoformat(),
                "created_at": now,
            }
        )
        return str(result.inserted_id)


class UploadedFileRepository:
    """Metadata records for files stored with OpenAI."""

    def __init__(self, collection: Collection) -> None:
        self._collection = collection

    def ensure_indexes(self) -> None:
        self._collection.create_index([("openai_file_id", ASCENDING)], unique=True)
        self._collection.create_index([("uploaded_at", DESCENDING)])

    def insert(
        self,
        openai_file_id: str,
        filename: str,
        original_filename: str,
        file_size: int,
        file_type: str,
        purpose: str,
        status: str | None,
        created_at: datetime,
        bytes_: int,
        metadata_cache: MetadataCache,
    ) -> str:
        """Insert the record of a freshly uploaded file.

        Returns:
            The new record id as a string.
        """
        result = self._collection.insert_one(
            {
                "openai_file_id": openai_file_id,
                "filename": filename,
                "original_filename": original_filename,
                "file_size": file_size,
                "file_type": file_type,
                "purpose": purpose,
                "status": status,
                "created_at": created_at,
                "uploaded_at": datetime.now(UTC),
                "bytes": bytes_,
                "metadata_cache": metadata_cache.model_dump(),
            }
        )
        return str(result.inserted_id)

    def list_recent(self, limit: int = FILE_LIST_LIMIT) -> list[UploadedFileSummary]:
        """Return the most recently uploaded files, newest first."""
        cursor = self._collection.find({}).sort("uploaded_at", DESCENDING).limit(limit)
        return [self._to_summary(doc) for doc in cursor]

    def list_file_ids(self) -> list[str]:
        """Return every known OpenAI file id."""
        cursor = self._collection.find({}, {"openai_file_id": 1})
        return [doc["openai_file_id"] for doc in cursor if doc.get("openai_file_id")]

    def display_names(self, file_ids: list[str]) -> dict[str, str]:
        """Map OpenAI file ids to their cached display names."""
        if not file_ids:
            return {}
        cursor = self._collection.find(
            {"openai_file_id": {"$in": file_ids}},
            {"openai_file_id": 1, "original_filename": 1, "metadata_cache": 1},
        )
        names: dict[str, str] = {}
        for doc in cursor:
            cache = doc.get("metadata_cache") or {}
            name = cache.get("display_name") or doc.get("original_filename")
            if name:
                names[doc["openai_file_id"]] = name
        return names

    def delete_by_openai_file_id(self, openai_file_id: str) -> int:
        """Delete the record of a file.

        Returns:
            Number of records deleted (0 or 1).
        """
        result = self._collection.delete_one({"openai_file_id": openai_file_id})
        return result.deleted_count

    @staticmethod
    def _to_summary(doc: dict[str, Any]) -> UploadedFileSummary:
        return UploadedFileSummary(
            id=str(doc["_id"]),
            openai_file_id=doc["openai_file_id"],
            filename=doc.get("filename") or doc.get("original_filename", ""),
            original_filename=doc.get("original_filename", ""),
            file_size=doc.get("file_size", 0),
            file_type=doc.get("file_type", ""),
            status=doc.get("status"),
            uploaded_at=doc["uploaded_at"],
            bytes=doc.get("bytes", doc.get("file_size", 0)),
            metadata_cache=doc.get("metadata_cache"),
        )
