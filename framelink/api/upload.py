"""Document upload endpoints.

Handles file validation, forwarding to the OpenAI Files API, and the
matching metadata records in MongoDB.
"""

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from openai import APIStatusError, OpenAIError, RateLimitError
from pymongo.errors import PyMongoError

from framelink.api.dependencies import get_file_repository, get_gateway, get_optional_gateway
from framelink.assistant.gateway import AssistantGateway
from framelink.config import AppSettings, get_settings
from framelink.models.schemas import DeleteResponse, FileListResponse, UploadResponse
from framelink.storage.repositories import FILE_LIST_LIMIT, UploadedFileRepository
from framelink.uploads.validation import (
    UploadValidationError,
    ValidatedUpload,
    build_metadata_cache,
    check_upload_size,
    validate_upload,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/upload", tags=["upload"])


async def validated_upload(
    file: UploadFile | None = File(default=None),
    settings: AppSettings = Depends(get_settings),
) -> ValidatedUpload:
    """Read and validate the uploaded file.

    Args:
        file: The uploaded file (multipart/form-data field ``file``).
        settings: Application settings holding the size ceiling.

    Returns:
        The validated upload.

    Raises:
        HTTPException: 400 if the file is missing, empty, too large,
            of an unsupported type, or an unreadable PDF.
    """
    if file is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No file provided",
        )

    try:
        # The multipart parser already knows the size; skip reading oversized files
        if file.size is not None:
            check_upload_size(file.size, settings.max_upload_bytes)
        content = await file.read()
        return validate_upload(
            filename=file.filename,
            content_type=file.content_type,
            content=content,
            max_bytes=settings.max_upload_bytes,
        )
    except UploadValidationError as e:
        logger.warning(f"Rejected upload {file.filename!r}: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e


@router.post("", status_code=status.HTTP_201_CREATED, response_model=UploadResponse)
async def upload_file(
    upload: ValidatedUpload = Depends(validated_upload),
    gateway: AssistantGateway = Depends(get_gateway),
    files: UploadedFileRepository = Depends(get_file_repository),
) -> UploadResponse:
    """Upload a document for use as retrieval context.

    Returns:
        UploadResponse with the OpenAI file id and the MongoDB record id.

    Raises:
        400: Missing, empty, oversized or unsupported file.
        413: OpenAI rejected the file as too large.
        429: OpenAI rate limit exceeded.
        503: OpenAI API key not configured.
        500: Any other OpenAI or database failure.
    """
    try:
        remote = await gateway.upload_file(upload.filename, upload.content, upload.content_type)
    except RateLimitError as e:
        logger.warning(f"OpenAI rate limit while uploading {upload.filename}: {e}")
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Rate limit exceeded. Please try again later.",
        ) from e
    except APIStatusError as e:
        logger.error(f"OpenAI API error while uploading {upload.filename}: {e}")
        if e.status_code == status.HTTP_413_REQUEST_ENTITY_TOO_LARGE:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail="File too large for OpenAI API",
            ) from e
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to upload file to OpenAI",
        ) from e
    except OpenAIError as e:
        logger.error(f"OpenAI request failed while uploading {upload.filename}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to upload file to OpenAI",
        ) from e

    try:
        mongo_id = await run_in_threadpool(
            files.insert,
            openai_file_id=remote.id,
            filename=remote.filename,
            original_filename=upload.filename,
            file_size=upload.size,
            file_type=upload.content_type,
            purpose=remote.purpose,
            status=remote.status,
            created_at=datetime.fromtimestamp(remote.created_at, UTC),
            bytes_=remote.bytes,
            metadata_cache=build_metadata_cache(upload),
        )
    except PyMongoError as e:
        logger.exception(f"Failed to record upload {remote.id}")
        # Without a record the file could never be listed or deleted
        try:
            await gateway.delete_file(remote.id)
        except OpenAIError as cleanup_error:
            logger.warning(f"Could not remove orphaned OpenAI file {remote.id}: {cleanup_error}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save file metadata",
        ) from e

    logger.info(f"Stored {upload.filename} as {remote.id} (record {mongo_id})")
    return UploadResponse(
        message="File uploaded successfully",
        file_id=remote.id,
        filename=remote.filename,
        mongo_id=mongo_id,
        status=remote.status,
        bytes=remote.bytes,
    )


@router.get("", response_model=FileListResponse)
async def list_files(
    files: UploadedFileRepository = Depends(get_file_repository),
) -> FileListResponse:
    """List the most recently uploaded files, newest first."""
    try:
        recent = await run_in_threadpool(files.list_recent, FILE_LIST_LIMIT)
    except PyMongoError as e:
        logger.exception("Failed to fetch uploaded files")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch files",
        ) from e
    return FileListResponse(files=recent)


@router.delete("", response_model=DeleteResponse)
async def delete_file(
    file_id: str | None = Query(default=None, alias="fileId"),
    openai_file_id: str | None = Query(default=None, alias="openaiFileId"),
    gateway: AssistantGateway | None = Depends(get_optional_gateway),
    files: UploadedFileRepository = Depends(get_file_repository),
) -> DeleteResponse:
    """Delete a file from OpenAI (best effort) and from the database.

    Raises:
        400: fileId or openaiFileId missing.
        404: No record for the OpenAI file id.
        500: Database failure.
    """
    if not file_id or not openai_file_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="File ID and OpenAI File ID are required",
        )

    if gateway is not None:
        try:
            await gateway.delete_file(openai_file_id)
        except OpenAIError as e:
            # Continue with the database record even if OpenAI deletion fails
            logger.warning(f"OpenAI file deletion failed for {openai_file_id}: {e}")

    try:
        deleted = await run_in_threadpool(files.delete_by_openai_file_id, openai_file_id)
    except PyMongoError as e:
        logger.exception(f"Failed to delete record for {openai_file_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete file",
        ) from e

    if deleted == 0:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="File not found in database",
        )

    return DeleteResponse(message="File deleted successfully", deleted_count=deleted)
