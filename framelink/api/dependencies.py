"""FastAPI dependency providers.

Tests swap these out through ``app.dependency_overrides``.
"""

import logging

from fastapi import Depends, HTTPException, status

from framelink.assistant.gateway import (
    AssistantGateway,
    ServiceNotConfiguredError,
    get_assistant_gateway,
)
from framelink.assistant.service import ContactService
from framelink.storage.database import (
    CONTACTS_COLLECTION,
    UPLOADED_FILES_COLLECTION,
    get_database,
)
from framelink.storage.repositories import ContactRepository, UploadedFileRepository

logger = logging.getLogger(__name__)


def get_contact_repository() -> ContactRepository:
    return ContactRepository(get_database()[CONTACTS_COLLECTION])


def get_file_repository() -> UploadedFileRepository:
    return UploadedFileRepository(get_database()[UPLOADED_FILES_COLLECTION])


def get_gateway() -> AssistantGateway:
    """Return the assistant gateway or fail with 503.

    Raises:
        HTTPException: 503 if the OpenAI API key is not configured.
    """
    try:
        return get_assistant_gateway()
    except ServiceNotConfiguredError as e:
        logger.error(f"Assistant unavailable: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        ) from e


def get_optional_gateway() -> AssistantGateway | None:
    """Return the assistant gateway, or None if it is not configured."""
    try:
        return get_assistant_gateway()
    except ServiceNotConfiguredError:
        return None


def get_contact_service(
    gateway: AssistantGateway = Depends(get_gateway),
    contacts: ContactRepository = Depends(get_contact_repository),
    files: UploadedFileRepository = Depends(get_file_repository),
) -> ContactService:
    return ContactService(gateway=gateway, contacts=contacts, files=files)
