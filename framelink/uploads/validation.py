"""Upload validation using pypdf for PDF integrity checks.

Checks presence, size and MIME type of an uploaded file before anything is
sent to OpenAI, and builds the display metadata cached alongside the record.
"""

import io
import logging

from pydantic import BaseModel, Field
from pypdf import PdfReader
from pypdf.errors import PdfReadError

from framelink.models.schemas import MetadataCache

logger = logging.getLogger(__name__)

# Constants
PDF_CONTENT_TYPE = "application/pdf"
PDF_MAGIC_BYTES = b"%PDF"

ALLOWED_CONTENT_TYPES: dict[str, str] = {
    "text/plain": "TXT",
    "application/json": "JSON",
    PDF_CONTENT_TYPE: "PDF",
    "text/csv": "CSV",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "DOCX",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": "XLSX",
    "text/markdown": "MD",
}


class UploadValidationError(Exception):
    """Raised when an uploaded file is rejected before any remote call."""

    pass


class ValidatedUpload(BaseModel):
    """An uploaded file that passed validation.

    Attributes:
        filename: Original filename as sent by the client.
        content_type: MIME type from the multipart part.
        content: Raw file bytes.
        page_count: Number of pages for PDFs, None otherwise.
    """

    filename: str
    content_type: str
    content: bytes
    page_count: int | None = Field(default=None, ge=1)

    @property
    def size(self) -> int:
        return len(self.content)


def _format_size(size: int) -> str:
    return f"{size / 1024:.1f} KB"


def _describe_limit(max_bytes: int) -> str:
    if max_bytes >= 1024 * 1024:
        return f"{max_bytes // (1024 * 1024)}MB"
    return f"{max_bytes} bytes"


def check_upload_size(size: int, max_bytes: int) -> None:
    """Reject files larger than the size ceiling.

    Raises:
        UploadValidationError: If size exceeds max_bytes.
    """
    if size > max_bytes:
        raise UploadValidationError(f"File size exceeds {_describe_limit(max_bytes)} limit")


def count_pdf_pages(content: bytes) -> int:
    """Open PDF bytes with pypdf and return the page count.

    Args:
        content: Raw bytes of the PDF file.

    Returns:
        Number of pages in the document.

    Raises:
        UploadValidationError: If the bytes are not a readable PDF.
    """
    if not content.lstrip()[:10].startswith(PDF_MAGIC_BYTES):
        raise UploadValidationError("Invalid PDF: file does not start with PDF header")

    try:
        reader = PdfReader(io.BytesIO(content))
        pages = len(reader.pages)
    except PdfReadError as e:
        raise UploadValidationError(f"Corrupt or invalid PDF: {e}") from e
    except Exception as e:
        raise UploadValidationError(f"Failed to read PDF: {e}") from e

    if pages == 0:
        raise UploadValidationError("PDF contains no pages")

    return pages


def validate_upload(
    filename: str | None,
    content_type: str | None,
    content: bytes,
    max_bytes: int,
) -> ValidatedUpload:
    """Validate an uploaded file.

    Args:
        filename: The uploaded filename.
        content_type: MIME type declared for the multipart part.
        content: Raw file bytes.
        max_bytes: Size ceiling in bytes.

    Returns:
        ValidatedUpload ready to forward to OpenAI.

    Raises:
        UploadValidationError: If the file is missing, empty, too large,
            of an unsupported type, or an unreadable PDF.
    """
    if not filename:
        raise UploadValidationError("No file provided")

    if not content:
        raise UploadValidationError("Uploaded file is empty")

    check_upload_size(len(content), max_bytes)

    content_type = (content_type or "").split(";")[0].strip().lower()
    if content_type not in ALLOWED_CONTENT_TYPES:
        supported = ", ".join(ALLOWED_CONTENT_TYPES)
        raise UploadValidationError(
            f"File type {content_type or 'unknown'} not supported. Supported types: {supported}"
        )

    page_count = None
    if content_type == PDF_CONTENT_TYPE:
        page_count = count_pdf_pages(content)

    return ValidatedUpload(
        filename=filename,
        content_type=content_type,
        content=content,
        page_count=page_count,
    )


def build_metadata_cache(upload: ValidatedUpload) -> MetadataCache:
    """Compute the display metadata stored with the upload record.

    Args:
        upload: The validated upload.

    Returns:
        MetadataCache for lists and citation display names.
    """
    return MetadataCache(
        display_name=upload.filename,
        size_formatted=_format_size(upload.size),
        type_display=ALLOWED_CONTENT_TYPES.get(upload.content_type, "FILE"),
        searchable_content=upload.filename.lower(),
        page_count=upload.page_count,
    )
