"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - mongo_db: In-memory mongomock database
    - fake_gateway: Scriptable stand-in for the OpenAI assistant gateway
    - settings: Application settings with a small upload ceiling
    - app / async_client: FastAPI app with overridden dependencies and an HTTPX client
    - pdf_bytes: A valid two-page PDF built with pypdf
    - seed_file: Inserts uploaded-file records directly into the database
"""

import io
from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime
from typing import Any

import httpx
import mongomock
import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from openai.types import FileObject
from pypdf import PdfWriter

from framelink.api.app import create_app
from framelink.api.dependencies import (
    get_contact_repository,
    get_file_repository,
    get_gateway,
    get_optional_gateway,
)
from framelink.assistant.gateway import AssistantReply
from framelink.config import AppSettings, get_settings
from framelink.models.schemas import Citation, CompleteEvent, DeltaEvent
from framelink.storage.repositories import ContactRepository, UploadedFileRepository


def make_status_error(
    error_cls: type, status_code: int, url: str = "https://api.openai.com/v1/files"
):
    """Build an openai APIStatusError subclass with a real httpx response."""
    request = httpx.Request("POST", url)
    response = httpx.Response(status_code, request=request)
    return error_cls(f"HTTP {status_code}", response=response, body=None)


class FakeGateway:
    """In-memory gateway that records calls and replays scripted answers.

    Attributes:
        deltas: Text fragments streamed for every question.
        citations: Citations returned with the completed answer.
        error: Exception raised instead of answering, if set.
        fail_after: Number of deltas streamed before ``error`` is raised.
        upload_error / delete_error: Exceptions raised by file operations.
    """

    def __init__(self) -> None:
        self.deltas: list[str] = ["Hello", ", ", "how can I help?"]
        self.citations: list[Citation] = []
        self.error: Exception | None = None
        self.fail_after = 0
        self.upload_error: Exception | None = None
        self.delete_error: Exception | None = None
        self.asked: list[tuple[str, list[str]]] = []
        self.uploaded: list[tuple[str, bytes, str]] = []
        self.deleted: list[str] = []

    async def upload_file(self, filename: str, content: bytes, content_type: str) -> FileObject:
        if self.upload_error is not None:
            raise self.upload_error
        self.uploaded.append((filename, content, content_type))
        return FileObject(
            id=f"file-{len(self.uploaded):04d}",
            bytes=len(content),
            created_at=1_700_000_000,
            filename=filename,
            object="file",
            purpose="assistants",
            status="processed",
        )

    async def delete_file(self, file_id: str) -> None:
        if self.delete_error is not None:
            raise self.delete_error
        self.deleted.append(file_id)

    async def ask(self, question: str, file_ids: list[str]) -> AssistantReply:
        self.asked.append((question, file_ids))
        if self.error is not None:
            raise self.error
        return AssistantReply(text="".join(self.deltas), citations=self.citations)

    async def stream(
        self, question: str, file_ids: list[str]
    ) -> AsyncGenerator[DeltaEvent | CompleteEvent]:
        self.asked.append((question, file_ids))
        for i, delta in enumerate(self.deltas):
            if self.error is not None and i == self.fail_after:
                raise self.error
            yield DeltaEvent(content=delta)
        if self.error is not None:
            raise self.error
        yield CompleteEvent(citations=self.citations)


@pytest.fixture
def mongo_db() -> Any:
    """Fresh in-memory database per test."""
    return mongomock.MongoClient()["framelink_test"]


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(
        mongodb_uri="mongodb://localhost:27017",
        mongodb_db="framelink_test",
        max_upload_bytes=64 * 1024,
        contact_response_mode="stream",
    )


@pytest.fixture
def app(mongo_db: Any, fake_gateway: FakeGateway, settings: AppSettings) -> FastAPI:
    """FastAPI app wired to mongomock and the fake gateway."""
    application = create_app()
    application.dependency_overrides[get_contact_repository] = lambda: ContactRepository(
        mongo_db["contacts"]
    )
    application.dependency_overrides[get_file_repository] = lambda: UploadedFileRepository(
        mongo_db["uploaded_files"]
    )
    application.dependency_overrides[get_gateway] = lambda: fake_gateway
    application.dependency_overrides[get_optional_gateway] = lambda: fake_gateway
    application.dependency_overrides[get_settings] = lambda: settings
    return application


@pytest.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Yields:
        Configured AsyncClient for making test requests.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def pdf_bytes() -> bytes:
    """A valid two-page PDF."""
    writer = PdfWriter()
    writer.add_blank_page(width=612, height=792)
    writer.add_blank_page(width=612, height=792)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


@pytest.fixture
def seed_file(mongo_db: Any) -> Callable[..., str]:
    """Insert an uploaded-file record and return its OpenAI file id."""

    def _seed(
        openai_file_id: str,
        display_name: str = "handbook.pdf",
        uploaded_at: datetime | None = None,
    ) -> str:
        mongo_db["uploaded_files"].insert_one(
            {
                "openai_file_id": openai_file_id,
                "filename": display_name,
                "original_filename": display_name,
                "file_size": 2048,
                "file_type": "application/pdf",
                "purpose": "assistants",
                "status": "processed",
                "created_at": datetime(2024, 1, 1, tzinfo=UTC),
                "uploaded_at": uploaded_at or datetime.now(UTC),
                "bytes": 2048,
                "metadata_cache": {
                    "display_name": display_name,
                    "size_formatted": "2.0 KB",
                    "type_display": "PDF",
                    "searchable_content": display_name.lower(),
                    "page_count": 3,
                },
            }
        )
        return openai_file_id

    return _seed
