"""Assistant configuration with environment variable loading.

Pydantic-based configuration for the OpenAI assistant gateway.
Supports OpenAI and OpenAI-compatible APIs via custom base URL.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from .env file
load_dotenv()

DEFAULT_INSTRUCTIONS = (
    "You are the FrameLink support assistant for Centro Médico de Algés. "
    "Answer questions using the attached documents whenever they are relevant, "
    "cite the documents you rely on, and say so plainly when the documents do not "
    "cover the question. Be concise and friendly."
)


class AssistantConfig(BaseModel):
    """Configuration for the OpenAI assistant.

    An empty API key is allowed: the application still starts, and the
    handlers that need the assistant report that the service is not configured.

    Attributes:
        api_key: API key for OpenAI access.
        base_url: API base URL (None for OpenAI default).
        model_name: Model the assistant runs on.
        assistant_id: Existing assistant to reuse instead of creating one.
        name: Display name of a newly created assistant.
        instructions: System instructions of a newly created assistant.
    """

    api_key: str = Field(
        default_factory=lambda: os.getenv("OPENAI_API_KEY", ""),
        description="API key for OpenAI",
    )
    base_url: str | None = Field(
        default_factory=lambda: os.getenv("OPENAI_BASE_URL") or None,
        description="API base URL (None for OpenAI default)",
    )
    model_name: str = Field(
        default_factory=lambda: os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
        description="Model to use",
    )
    assistant_id: str | None = Field(
        default_factory=lambda: os.getenv("OPENAI_ASSISTANT_ID") or None,
        description="Pre-provisioned assistant id",
    )
    name: str = Field(default="FrameLink Support Assistant")
    instructions: str = Field(default=DEFAULT_INSTRUCTIONS)

    @field_validator("api_key")
    @classmethod
    def strip_api_key(cls, v: str) -> str:
        """Strip surrounding whitespace so a blank key counts as missing."""
        return v.strip()

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


def get_assistant_config() -> AssistantConfig:
    """Create assistant configuration from environment.

    Returns:
        Configured AssistantConfig instance.
    """
    return AssistantConfig()
