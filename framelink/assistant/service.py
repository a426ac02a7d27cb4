"""Contact Q&A service: answer a question, relay the stream, persist the record.

Every upstream failure is handled once, here, by substituting the canned
fallback answer. Nothing is retried.
"""

import logging
from collections.abc import AsyncGenerator

import httpx
from fastapi.concurrency import run_in_threadpool
from openai import OpenAIError
from pydantic import BaseModel, Field
from pymongo.errors import PyMongoError

from framelink.assistant.fallback import fallback_answer
from framelink.assistant.gateway import AssistantGateway, AssistantRunError
from framelink.models.schemas import (
    Citation,
    CompleteEvent,
    ContactRequest,
    DeltaEvent,
    FailedEvent,
    FallbackEvent,
    StreamEvent,
)
from framelink.storage.repositories import ContactRepository, UploadedFileRepository

logger = logging.getLogger(__name__)

# Mid-stream transport and stream-state failures surface as httpx or
# RuntimeError, not as OpenAIError
UPSTREAM_ERRORS = (OpenAIError, AssistantRunError, httpx.HTTPError, RuntimeError)


class ContactResult(BaseModel):
    """Outcome of a synchronous contact question."""

    id: str
    answer: str
    citations: list[Citation] = Field(default_factory=list)
    used_fallback: bool = False


class ContactService:
    """Answers contact questions with the assistant and records them."""

    def __init__(
        self,
        gateway: AssistantGateway,
        contacts: ContactRepository,
        files: UploadedFileRepository,
    ) -> None:
        self._gateway = gateway
        self._contacts = contacts
        self._files = files

    async def context_file_ids(self) -> list[str]:
        """Return the ids of every uploaded document.

        Raises:
            PyMongoError: If the uploaded files cannot be read.
        """
        return await run_in_threadpool(self._files.list_file_ids)

    async def answer(self, request: ContactRequest) -> ContactResult:
        """Answer a question in one round trip and persist the exchange.

        Args:
            request: Validated contact request.

        Returns:
            ContactResult with the stored record id.

        Raises:
            PyMongoError: If the context lookup or the record insert fails.
        """
        file_ids = await self.context_file_ids()

        try:
            reply = await self._gateway.ask(request.question, file_ids)
            answer = reply.text
            citations = await self._with_display_names(reply.citations)
            used_fallback = False
        except UPSTREAM_ERRORS as e:
            logger.error(f"Assistant run failed, using fallback answer: {e}")
            answer = fallback_answer(request.question)
            citations = []
            used_fallback = True

        record_id = await run_in_threadpool(
            self._contacts.insert,
            question=request.question,
            answer=answer,
            citations=citations,
            username=request.username,
        )
        return ContactResult(
            id=record_id,
            answer=answer,
            citations=citations,
            used_fallback=used_fallback,
        )

    async def open_stream(self, request: ContactRequest) -> AsyncGenerator[StreamEvent]:
        """Prepare the streamed answer for a question.

        The retrieval context is read before the stream starts, so a database
        failure still surfaces as an ordinary error response.

        Args:
            request: Validated contact request.

        Returns:
            Async generator of stream events.

        Raises:
            PyMongoError: If the uploaded files cannot be read.
        """
        file_ids = await self.context_file_ids()
        return self._relay(request, file_ids)

    async def _relay(
        self,
        request: ContactRequest,
        file_ids: list[str],
    ) -> AsyncGenerator[StreamEvent]:
        accumulated: list[str] = []
        citations: list[Citation] = []

        try:
            async for event in self._gateway.stream(request.question, file_ids):
                if isinstance(event, DeltaEvent):
                    accumulated.append(event.content)
                    yield event
                elif isinstance(event, CompleteEvent):
                    citations = event.citations
        except UPSTREAM_ERRORS as e:
            logger.error(f"Assistant stream failed, using fallback answer: {e}")
            yield FailedEvent(reason=str(e))
            content = fallback_answer(request.question)
            await self._persist_quietly(request, content, [])
            yield FallbackEvent(content=content)
            return

        citations = await self._with_display_names(citations)
        await self._persist_quietly(request, "".join(accumulated), citations)
        yield CompleteEvent(citations=citations)

    async def _with_display_names(self, citations: list[Citation]) -> list[Citation]:
        if not citations:
            return citations
        try:
            names = await run_in_threadpool(
                self._files.display_names, [c.file_id for c in citations]
            )
        except PyMongoError as e:
            logger.warning(f"Could not load display names for citations: {e}")
            return citations
        return [c.model_copy(update={"display_name": names.get(c.file_id)}) for c in citations]

    async def _persist_quietly(
        self,
        request: ContactRequest,
        answer: str,
        citations: list[Citation],
    ) -> None:
        try:
            record_id = await run_in_threadpool(
                self._contacts.insert,
                question=request.question,
                answer=answer,
                citations=citations,
                username=request.username,
            )
            logger.info(f"Saved contact record {record_id}")
        except PyMongoError:
            logger.exception("Failed to save contact record")
