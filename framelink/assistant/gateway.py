"""OpenAI gateway for the support assistant, uploaded files and answer runs.

Architecture Decisions:

1. **Assistants API with file_search** - Uploaded documents live in the OpenAI
   Files API. Each question opens a new thread whose single user message
   attaches every known file for ``file_search``, so answers can cite them.

2. **Memoized assistant id** - The assistant is a remote resource configured
   once (model, instructions, tools). Its id is cached on the gateway and
   ``ensure_assistant`` verifies it, recreating the assistant when the cached
   id no longer exists upstream. There is no lock: two concurrent first
   requests may each create an assistant, which is harmless.

3. **Singleton Pattern** - One AsyncOpenAI client and one cached assistant id
   per process, shared by all requests through ``get_assistant_gateway``.

4. **Event Generator** - The streaming run is exposed as an async generator of
   ``DeltaEvent`` items followed by one ``CompleteEvent``. Failures propagate
   as exceptions; choosing the fallback answer is the caller's job.
"""

import logging
from collections.abc import AsyncGenerator, Iterable
from typing import Any

import httpx
from openai import AsyncOpenAI, NotFoundError
from openai.types import FileObject
from pydantic import BaseModel, Field

from framelink.assistant.config import AssistantConfig, get_assistant_config
from framelink.models.schemas import Citation, CompleteEvent, DeltaEvent

logger = logging.getLogger(__name__)

FILE_PURPOSE = "assistants"
FILE_SEARCH_TOOL = {"type": "file_search"}


class ServiceNotConfiguredError(Exception):
    """Raised when the OpenAI API key is missing."""

    pass


class AssistantRunError(Exception):
    """Raised when an assistant run ends in a state other than completed."""

    pass


class AssistantReply(BaseModel):
    """Final text and citations of a completed run."""

    text: str
    citations: list[Citation] = Field(default_factory=list)


def extract_reply(messages: Iterable[Any]) -> AssistantReply:
    """Collect assistant text and file citations from thread messages.

    Args:
        messages: Thread messages in chronological order.

    Returns:
        AssistantReply with the concatenated text and file citations.
    """
    parts: list[str] = []
    citations: list[Citation] = []

    for message in messages:
        if getattr(message, "role", None) != "assistant":
            continue
        for content in message.content:
            if content.type != "text":
                continue
            parts.append(content.text.value)
            for annotation in content.text.annotations or []:
                if annotation.type != "file_citation":
                    continue
                file_citation = annotation.file_citation
                citations.append(
                    Citation(
                        file_id=file_citation.file_id,
                        text=annotation.text,
                        quote=getattr(file_citation, "quote", None),
                    )
                )

    return AssistantReply(text="\n\n".join(parts), citations=citations)


class AssistantGateway:
    """Thin wrapper over AsyncOpenAI for the calls this application makes.

    Wraps the SDK with:
    - Lazy, self-healing assistant creation
    - File upload and deletion for retrieval documents
    - One-shot and streaming question runs
    """

    def __init__(
        self,
        config: AssistantConfig | None = None,
        client: AsyncOpenAI | None = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            config: Optional assistant configuration.
                    Loads from environment if not provided.
            client: Optional preconfigured SDK client.

        Raises:
            ServiceNotConfiguredError: If no API key is available.
        """
        self._config = config or get_assistant_config()
        if client is None:
            if not self._config.is_configured:
                raise ServiceNotConfiguredError("OpenAI API key not configured")
            client = self._create_client()
        self._client = client
        self._assistant_id: str | None = self._config.assistant_id

    def _create_client(self) -> AsyncOpenAI:
        return AsyncOpenAI(
            api_key=self._config.api_key,
            base_url=self._config.base_url,
        )

    @property
    def assistant_id(self) -> str | None:
        return self._assistant_id

    async def ensure_assistant(self) -> str:
        """Return a valid assistant id, creating the assistant if needed.

        Returns:
            Id of an assistant that exists upstream.
        """
        if self._assistant_id:
            try:
                assistant = await self._client.beta.assistants.retrieve(self._assistant_id)
                return assistant.id
            except NotFoundError:
                logger.warning(
                    f"Cached assistant {self._assistant_id} not found upstream, recreating"
                )
                self._assistant_id = None

        assistant = await self._client.beta.assistants.create(
            model=self._config.model_name,
            name=self._config.name,
            instructions=self._config.instructions,
            tools=[FILE_SEARCH_TOOL],
        )
        self._assistant_id = assistant.id
        logger.info(f"Created assistant {assistant.id} on model {self._config.model_name}")
        return assistant.id

    async def upload_file(self, filename: str, content: bytes, content_type: str) -> FileObject:
        """Store a document with the Files API for retrieval."""
        file = await self._client.files.create(
            file=(filename, content, content_type),
            purpose=FILE_PURPOSE,
        )
        logger.info(f"Uploaded {filename} to OpenAI as {file.id}")
        return file

    async def delete_file(self, file_id: str) -> None:
        await self._client.files.delete(file_id)
        logger.info(f"Deleted OpenAI file {file_id}")

    async def _create_thread(self, question: str, file_ids: list[str]) -> str:
        thread = await self._client.beta.threads.create(
            messages=[
                {
                    "role": "user",
                    "content": question,
                    "attachments": [
                        {"file_id": file_id, "tools": [FILE_SEARCH_TOOL]} for file_id in file_ids
                    ],
                }
            ]
        )
        return thread.id

    async def ask(self, question: str, file_ids: list[str]) -> AssistantReply:
        """Run the assistant on a question and wait for the answer.

        Args:
            question: The visitor's question.
            file_ids: OpenAI file ids attached as retrieval context.

        Returns:
            AssistantReply with the answer text and citations.

        Raises:
            AssistantRunError: If the run does not complete.
            openai.OpenAIError: On any API failure.
        """
        assistant_id = await self.ensure_assistant()
        thread_id = await self._create_thread(question, file_ids)

        run = await self._client.beta.threads.runs.create_and_poll(
            thread_id=thread_id,
            assistant_id=assistant_id,
        )
        if run.status != "completed":
            raise AssistantRunError(f"Run {run.id} ended with status {run.status}")

        messages = await self._client.beta.threads.messages.list(
            thread_id=thread_id,
            run_id=run.id,
            order="asc",
        )
        return extract_reply(messages.data)

    async def stream(
        self,
        question: str,
        file_ids: list[str],
    ) -> AsyncGenerator[DeltaEvent | CompleteEvent]:
        """Run the assistant on a question, streaming the answer.

        Args:
            question: The visitor's question.
            file_ids: OpenAI file ids attached as retrieval context.

        Yields:
            DeltaEvent for each text fragment, then one CompleteEvent.

        Raises:
            AssistantRunError: If the run does not complete.
            openai.OpenAIError: On any API failure.
        """
        assistant_id = await self.ensure_assistant()
        thread_id = await self._create_thread(question, file_ids)

        try:
            async with self._client.beta.threads.runs.stream(
                thread_id=thread_id,
                assistant_id=assistant_id,
            ) as stream:
                async for text in stream.text_deltas:
                    if text:
                        yield DeltaEvent(content=text)
                run = await stream.get_final_run()
                messages = await stream.get_final_messages()
        except (httpx.HTTPError, RuntimeError) as e:
            # The SDK does not wrap transport errors raised while reading the
            # body, nor its own stream-state errors
            raise AssistantRunError(f"Run stream on thread {thread_id} broke: {e}") from e

        if run.status != "completed":
            raise AssistantRunError(f"Run {run.id} ended with status {run.status}")

        yield CompleteEvent(citations=extract_reply(messages).citations)


# Module-level singleton instance
_gateway: AssistantGateway | None = None


def get_assistant_gateway() -> AssistantGateway:
    """Get or create the global assistant gateway.

    Uses singleton pattern so the cached assistant id is shared.

    Returns:
        The AssistantGateway instance.

    Raises:
        ServiceNotConfiguredError: If no API key is set.
    """
    global _gateway
    if _gateway is None:
        _gateway = AssistantGateway()
    return _gateway
