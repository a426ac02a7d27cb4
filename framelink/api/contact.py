"""Contact Q&A endpoint.

Answers either as a server-sent event stream or as a single JSON payload,
depending on ``CONTACT_RESPONSE_MODE``.
"""

import logging
from collections.abc import AsyncGenerator, AsyncIterator

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse
from pymongo.errors import PyMongoError

from framelink.api.dependencies import get_contact_service
from framelink.assistant.service import ContactService
from framelink.config import AppSettings, get_settings
from framelink.models.schemas import ContactRequest, ContactResponse, FailedEvent, StreamEvent

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/contact", tags=["contact"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def require_question(payload: ContactRequest) -> ContactRequest:
    """Reject blank questions before any service is resolved.

    Raises:
        HTTPException: 400 if the question is missing or blank.
    """
    if not payload.question:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Question is required",
        )
    return payload


def format_sse(event: StreamEvent) -> str:
    """Serialize one event as an SSE data frame."""
    return f"data: {event.model_dump_json()}\n\n"


async def sse_frames(events: AsyncIterator[StreamEvent]) -> AsyncGenerator[str]:
    """Relay client-facing events as SSE frames.

    Failed events are server-side only and never reach the client.
    """
    async for event in events:
        if isinstance(event, FailedEvent):
            continue
        yield format_sse(event)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ContactResponse,
    responses={200: {"content": {"text/event-stream": {}}}},
)
async def submit_question(
    payload: ContactRequest = Depends(require_question),
    settings: AppSettings = Depends(get_settings),
    service: ContactService = Depends(get_contact_service),
) -> ContactResponse | StreamingResponse:
    """Answer a support question.

    Streams ``delta`` frames followed by ``complete`` (or a single
    ``fallback`` frame) in stream mode; returns the stored answer in sync mode.

    Raises:
        400: Question missing or blank.
        503: OpenAI API key not configured.
        500: Database failure on the critical path.
    """
    try:
        if settings.contact_response_mode == "stream":
            events = await service.open_stream(payload)
            return StreamingResponse(
                sse_frames(events),
                media_type="text/event-stream",
                headers=SSE_HEADERS,
            )

        result = await service.answer(payload)
    except PyMongoError as e:
        logger.exception("Database error while answering contact question")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from e

    return ContactResponse(
        message="Your question has been answered",
        answer=result.answer,
        citations=result.citations,
        id=result.id,
    )
