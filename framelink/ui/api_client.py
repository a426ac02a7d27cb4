"""HTTP client used by the pages to talk to the API.

The contact answer arrives either as an SSE stream of tagged events or, in
sync mode, as one JSON document. Both end in the same ``on_done`` callback.
"""

import logging
import os
from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager
from typing import Any

import httpx
from pydantic import ValidationError

from framelink.models.schemas import (
    Citation,
    CompleteEvent,
    ContactResponse,
    DeltaEvent,
    DeleteResponse,
    FallbackEvent,
    FileListResponse,
    UploadResponse,
    client_event_adapter,
)

logger = logging.getLogger(__name__)

API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")
DATA_PREFIX = "data: "


class ApiError(Exception):
    """Raised when the API answers with an error status."""

    def __init__(self, status_code: int, detail: str) -> None:
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail


@asynccontextmanager
async def _session(client: httpx.AsyncClient | None) -> AsyncGenerator[httpx.AsyncClient]:
    """Use the given client, or open a short-lived one against API_BASE_URL."""
    try:
        if client is not None:
            yield client
            return
        async with httpx.AsyncClient(base_url=API_BASE_URL, timeout=120.0) as owned:
            yield owned
    except httpx.RequestError as e:
        raise ApiError(0, f"Connection failed: {e}") from e


def _error_detail(response: httpx.Response) -> str:
    try:
        data: Any = response.json()
    except ValueError:
        return f"{response.status_code} {response.reason_phrase}"
    if isinstance(data, dict) and data.get("detail"):
        return str(data["detail"])
    return f"{response.status_code} {response.reason_phrase}"


def parse_stream_line(line: str) -> DeltaEvent | CompleteEvent | FallbackEvent | None:
    """Parse one SSE line into an event.

    Returns None for blank lines, non-data lines and malformed records.
    """
    if not line.startswith(DATA_PREFIX):
        return None
    payload = line[len(DATA_PREFIX) :].strip()
    if not payload:
        return None
    try:
        return client_event_adapter.validate_json(payload)
    except ValidationError as e:
        logger.warning(f"Skipping malformed stream event {payload!r}: {e}")
        return None


async def ask_question(
    question: str,
    username: str | None,
    on_delta: Callable[[str], None],
    on_done: Callable[[str, list[Citation]], None],
    on_error: Callable[[str], None],
    client: httpx.AsyncClient | None = None,
) -> None:
    """Send a question to /api/contact and report progress through callbacks.

    Args:
        question: The visitor's question.
        username: Optional visitor name.
        on_delta: Called with each streamed text fragment.
        on_done: Called once with the final answer and its citations.
        on_error: Called once with a readable error message.
        client: Optional preconfigured HTTP client.
    """
    try:
        async with (
            _session(client) as http,
            http.stream(
                "POST",
                "/api/contact",
                json={"question": question, "username": username},
                headers={"Accept": "text/event-stream, application/json"},
            ) as response,
        ):
            if response.is_error:
                await response.aread()
                on_error(_error_detail(response))
                return

            if "text/event-stream" not in response.headers.get("content-type", ""):
                await response.aread()
                try:
                    result = ContactResponse.model_validate_json(response.content)
                except ValidationError as e:
                    logger.warning(f"Unexpected contact response: {e}")
                    on_error("The server returned an unexpected response")
                    return
                on_done(result.answer, result.citations)
                return

            streamed = ""
            async for line in response.aiter_lines():
                event = parse_stream_line(line)
                if isinstance(event, DeltaEvent):
                    streamed += event.content
                    on_delta(event.content)
                elif isinstance(event, CompleteEvent):
                    on_done(streamed, event.citations)
                    return
                elif isinstance(event, FallbackEvent):
                    on_done(event.content, [])
                    return

            on_error("The answer stream ended unexpectedly")
    except ApiError as e:
        on_error(e.detail)


async def upload_document(
    filename: str,
    content: bytes,
    content_type: str,
    client: httpx.AsyncClient | None = None,
) -> UploadResponse:
    """Upload a document through the API.

    Raises:
        ApiError: If the API rejects the upload.
    """
    async with _session(client) as http:
        response = await http.post(
            "/api/upload",
            files={"file": (filename, content, content_type)},
        )
    if response.is_error:
        raise ApiError(response.status_code, _error_detail(response))
    return UploadResponse.model_validate(response.json())


async def list_documents(client: httpx.AsyncClient | None = None) -> FileListResponse:
    async with _session(client) as http:
        response = await http.get("/api/upload")
    if response.is_error:
        raise ApiError(response.status_code, _error_detail(response))
    return FileListResponse.model_validate(response.json())


async def delete_document(
    record_id: str,
    openai_file_id: str,
    client: httpx.AsyncClient | None = None,
) -> DeleteResponse:
    async with _session(client) as http:
        response = await http.delete(
            "/api/upload",
            params={"fileId": record_id, "openaiFileId": openai_file_id},
        )
    if response.is_error:
        raise ApiError(response.status_code, _error_detail(response))
    return DeleteResponse.model_validate(response.json())
