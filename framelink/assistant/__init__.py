"""OpenAI assistant integration for the contact Q&A flow.

Handles answers grounded in uploaded documents, with a canned fallback when
the assistant is unavailable.

Responsibilities:
    - Assistant creation and reuse (model, instructions, file_search tool)
    - File upload and deletion in the OpenAI Files API
    - One-shot and streamed runs with citation extraction
    - Keyword-based fallback answers
    - Persisting each answered question

Maintains clean separation from the HTTP layer.
"""

from framelink.assistant.config import AssistantConfig, get_assistant_config
from framelink.assistant.fallback import fallback_answer
from framelink.assistant.gateway import (
    AssistantGateway,
    AssistantReply,
    AssistantRunError,
    ServiceNotConfiguredError,
    get_assistant_gateway,
)
from framelink.assistant.service import ContactResult, ContactService

__all__ = [
    "AssistantConfig",
    "AssistantGateway",
    "AssistantReply",
    "AssistantRunError",
    "ContactResult",
    "ContactService",
    "ServiceNotConfiguredError",
    "fallback_answer",
    "get_assistant_config",
    "get_assistant_gateway",
]
