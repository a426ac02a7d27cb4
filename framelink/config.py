"""Application settings loaded from the environment.

Covers the storage connection, upload limits and the contact response mode.
Assistant credentials live in :mod:`framelink.assistant.config`.
"""

import os
from functools import lru_cache
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

# OpenAI Files API ceiling
DEFAULT_MAX_UPLOAD_BYTES = 512 * 1024 * 1024

ResponseMode = Literal["stream", "sync"]


class AppSettings(BaseModel):
    """Runtime settings for the HTTP layer and storage.

    Attributes:
        mongodb_uri: MongoDB connection string.
        mongodb_db: Database holding the contacts and uploaded_files collections.
        max_upload_bytes: Size ceiling for a single uploaded file.
        contact_response_mode: "stream" for SSE answers, "sync" for a JSON answer.
    """

    mongodb_uri: str = Field(
        default_factory=lambda: os.getenv("MONGODB_URI", "mongodb://localhost:27017"),
    )
    mongodb_db: str = Field(
        default_factory=lambda: os.getenv("MONGODB_DB", "framelink"),
    )
    max_upload_bytes: int = Field(
        default_factory=lambda: int(
            os.getenv("MAX_UPLOAD_BYTES", str(DEFAULT_MAX_UPLOAD_BYTES))
        ),
        ge=1,
    )
    contact_response_mode: ResponseMode = Field(
        default_factory=lambda: os.getenv("CONTACT_RESPONSE_MODE", "stream").lower(),
    )


@lru_cache
def get_settings() -> AppSettings:
    """Return the process-wide settings, read once from the environment."""
    return AppSettings()
