from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, Field, TypeAdapter, field_validator


class Citation(BaseModel):
    """A source document excerpt the assistant used for an answer.

    Attributes:
        file_id: OpenAI file id of the cited document.
        text: Annotation marker as it appears in the answer text.
        quote: Quoted excerpt, when the API returns one.
        display_name: Original filename from the cached upload metadata.
    """

    file_id: str
    text: str = ""
    quote: str | None = None
    display_name: str | None = None


class ContactRequest(BaseModel):
    """Request payload for the contact endpoint.

    Attributes:
        question: The visitor's question. Blank values are rejected by the route.
        username: Optional name the visitor entered on the home page.
    """

    question: str = ""
    username: str | None = None

    @field_validator("question", mode="before")
    @classmethod
    def strip_question(cls, v: str | None) -> str:
        """Strip whitespace from question before validation."""
        if v is None:
            return ""
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("username", mode="before")
    @classmethod
    def blank_username_to_none(cls, v: str | None) -> str | None:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class ContactResponse(BaseModel):
    """Response from the contact endpoint in synchronous mode."""

    message: str
    answer: str
    citations: list[Citation] = Field(default_factory=list)
    id: str


# Stream events. Delta, Complete and Fallback go over the wire; Failed stays
# on the server side and is only logged.


class DeltaEvent(BaseModel):
    type: Literal["delta"] = "delta"
    content: str


class CompleteEvent(BaseModel):
    type: Literal["complete"] = "complete"
    citations: list[Citation] = Field(default_factory=list)


class FallbackEvent(BaseModel):
    type: Literal["fallback"] = "fallback"
    content: str


class FailedEvent(BaseModel):
    type: Literal["failed"] = "failed"
    reason: str


StreamEvent = DeltaEvent | CompleteEvent | FallbackEvent | FailedEvent

ClientStreamEvent = Annotated[
    DeltaEvent | CompleteEvent | FallbackEvent,
    Field(discriminator="type"),
]

client_event_adapter: TypeAdapter[DeltaEvent | CompleteEvent | FallbackEvent] = TypeAdapter(
    ClientStreamEvent
)


class MetadataCache(BaseModel):
    """Display metadata computed once at upload time.

    Attributes:
        display_name: Name shown in lists and citations.
        size_formatted: Human readable size, e.g. "12.3 KB".
        type_display: Short type label, e.g. "PDF".
        searchable_content: Lower-cased name for simple text search.
        page_count: Number of pages, PDFs only.
    """

    display_name: str
    size_formatted: str
    type_display: str
    searchable_content: str
    page_count: int | None = None


class UploadResponse(BaseModel):
    """Response after a file is stored with OpenAI and recorded locally."""

    message: str
    file_id: str
    filename: str
    mongo_id: str
    status: str | None = None
    bytes: int


class UploadedFileSummary(BaseModel):
    """One entry of the uploaded file listing."""

    id: str
    openai_file_id: str
    filename: str
    original_filename: str
    file_size: int
    file_type: str
    status: str | None = None
    uploaded_at: datetime
    bytes: int
    metadata_cache: MetadataCache | None = None


class FileListResponse(BaseModel):
    files: list[UploadedFileSummary] = Field(default_factory=list)


class DeleteResponse(BaseModel):
    message: str
    deleted_count: int
