"""Upload validation for documents sent to the assistant.

Responsibilities:
    - Size ceiling and MIME type allow-list checks
    - PDF integrity check and page count with pypdf
    - Cached display metadata (name, size, type label)

Runs before any OpenAI call or database write.
"""

from framelink.uploads.validation import (
    ALLOWED_CONTENT_TYPES,
    UploadValidationError,
    ValidatedUpload,
    build_metadata_cache,
    check_upload_size,
    validate_upload,
)

__all__ = [
    "ALLOWED_CONTENT_TYPES",
    "UploadValidationError",
    "ValidatedUpload",
    "build_metadata_cache",
    "check_upload_size",
    "validate_upload",
]
