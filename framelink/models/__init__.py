"""Pydantic models for API requests, responses and stream events.

Provides type safety, validation, and automatic OpenAPI documentation.

Models:
    - ContactRequest / ContactResponse: Contact Q&A payloads
    - Citation: Source document reference attached to an answer
    - DeltaEvent, CompleteEvent, FallbackEvent, FailedEvent: Streamed answer events
    - UploadResponse, FileListResponse, DeleteResponse: Upload utility payloads
"""

from framelink.models.schemas import (
    Citation,
    CompleteEvent,
    ContactRequest,
    ContactResponse,
    DeleteResponse,
    DeltaEvent,
    FailedEvent,
    FallbackEvent,
    FileListResponse,
    MetadataCache,
    StreamEvent,
    UploadedFileSummary,
    UploadResponse,
    client_event_adapter,
)

__all__ = [
    "Citation",
    "CompleteEvent",
    "ContactRequest",
    "ContactResponse",
    "DeleteResponse",
    "DeltaEvent",
    "FailedEvent",
    "FallbackEvent",
    "FileListResponse",
    "MetadataCache",
    "StreamEvent",
    "UploadResponse",
    "UploadedFileSummary",
    "client_event_adapter",
]
