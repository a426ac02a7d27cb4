"""Unit tests for upload validation."""

import pytest
import pytest_check as check

from framelink.uploads.validation import (
    ALLOWED_CONTENT_TYPES,
    UploadValidationError,
    ValidatedUpload,
    build_metadata_cache,
    check_upload_size,
    count_pdf_pages,
    validate_upload,
)

LIMIT = 1024


class TestValidateUploadValid:
    """Tests for accepted files."""

    @pytest.mark.parametrize("content_type", list(ALLOWED_CONTENT_TYPES))
    def test_accepts_allowed_types(self, content_type: str, pdf_bytes: bytes) -> None:
        content = pdf_bytes if content_type == "application/pdf" else b"some content"

        result = validate_upload("doc", content_type, content, max_bytes=len(pdf_bytes))

        check.equal(result.content_type, content_type)
        check.equal(result.size, len(content))

    def test_counts_pdf_pages(self, pdf_bytes: bytes) -> None:
        result = validate_upload("a.pdf", "application/pdf", pdf_bytes, max_bytes=10**6)

        assert result.page_count == 2

    def test_non_pdf_has_no_page_count(self) -> None:
        result = validate_upload("a.txt", "text/plain", b"hello", max_bytes=LIMIT)

        assert result.page_count is None

    def test_normalizes_content_type_parameters(self) -> None:
        result = validate_upload("a.txt", "Text/Plain; charset=utf-8", b"hello", max_bytes=LIMIT)

        assert result.content_type == "text/plain"

    def test_accepts_file_at_exact_limit(self) -> None:
        result = validate_upload("a.txt", "text/plain", b"x" * LIMIT, max_bytes=LIMIT)

        assert result.size == LIMIT


class TestValidateUploadRejection:
    """Tests for rejected files."""

    def test_rejects_missing_filename(self) -> None:
        with pytest.raises(UploadValidationError, match="No file provided"):
            validate_upload(None, "text/plain", b"hello", max_bytes=LIMIT)

    def test_rejects_empty_content(self) -> None:
        with pytest.raises(UploadValidationError, match="empty"):
            validate_upload("a.txt", "text/plain", b"", max_bytes=LIMIT)

    def test_rejects_oversized_file(self) -> None:
        with pytest.raises(UploadValidationError, match="exceeds 1024 bytes limit"):
            validate_upload("a.txt", "text/plain", b"x" * (LIMIT + 1), max_bytes=LIMIT)

    def test_size_is_checked_before_type(self) -> None:
        with pytest.raises(UploadValidationError, match="exceeds"):
            validate_upload("a.png", "image/png", b"x" * (LIMIT + 1), max_bytes=LIMIT)

    @pytest.mark.parametrize("content_type", ["image/png", "application/zip", None, ""])
    def test_rejects_unsupported_type(self, content_type: str | None) -> None:
        with pytest.raises(UploadValidationError, match="not supported") as exc_info:
            validate_upload("a.bin", content_type, b"data", max_bytes=LIMIT)

        assert "text/plain" in str(exc_info.value)

    def test_rejects_pdf_without_header(self) -> None:
        with pytest.raises(UploadValidationError, match="Invalid PDF"):
            validate_upload("a.pdf", "application/pdf", b"not a pdf", max_bytes=LIMIT)

    def test_rejects_truncated_pdf(self) -> None:
        with pytest.raises(UploadValidationError, match="Corrupt|Failed|no pages"):
            count_pdf_pages(b"%PDF-1.4\n1 0 obj\n<<")


class TestCheckUploadSize:
    def test_megabyte_limits_are_described_in_mb(self) -> None:
        with pytest.raises(UploadValidationError, match="512MB"):
            check_upload_size(512 * 1024 * 1024 + 1, 512 * 1024 * 1024)

    def test_within_limit_passes(self) -> None:
        check_upload_size(10, 10)


class TestBuildMetadataCache:
    def test_pdf_metadata(self, pdf_bytes: bytes) -> None:
        upload = validate_upload("Clinic Handbook.pdf", "application/pdf", pdf_bytes, 10**6)

        cache = build_metadata_cache(upload)

        check.equal(cache.display_name, "Clinic Handbook.pdf")
        check.equal(cache.type_display, "PDF")
        check.equal(cache.searchable_content, "clinic handbook.pdf")
        check.equal(cache.page_count, 2)
        check.is_true(cache.size_formatted.endswith(" KB"))

    def test_size_formatting(self) -> None:
        upload = ValidatedUpload(filename="a.csv", content_type="text/csv", content=b"x" * 1536)

        cache = build_metadata_cache(upload)

        check.equal(cache.size_formatted, "1.5 KB")
        check.equal(cache.type_display, "CSV")
        check.is_none(cache.page_count)
