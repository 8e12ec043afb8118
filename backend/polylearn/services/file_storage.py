"""File storage — PDFs for submitted resources on the local filesystem."""

import logging
import re
import uuid
from pathlib import Path
from typing import Optional

from polylearn.config import settings
from polylearn.errors import NotFoundError, StorageError, ValidationError
from polylearn.models.upload import RESOURCE_QUESTION_PAPER, RESOURCE_STUDY_NOTE

logger = logging.getLogger(__name__)

SUBDIRECTORIES = {
    RESOURCE_QUESTION_PAPER: "question-papers",
    RESOURCE_STUDY_NOTE: "study-notes",
}

PDF_CONTENT_TYPE = "application/pdf"
PDF_MAGIC = b"%PDF"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def _safe_name(original_name: str) -> str:
    name = Path(original_name or "upload.pdf").name
    name = _UNSAFE_CHARS.sub("_", name).strip("._") or "upload"
    if not name.lower().endswith(".pdf"):
        name = f"{name}.pdf"
    return name[-120:]


class FileStorageService:
    """Stores resource files under ``<root>/<question-papers|study-notes>/``."""

    def __init__(self, base_path: Optional[str] = None, max_bytes: Optional[int] = None):
        self.base_path = Path(base_path or settings.UPLOAD_DIR)
        self.max_bytes = max_bytes if max_bytes is not None else settings.MAX_UPLOAD_BYTES

    def validate(self, content: bytes, content_type: Optional[str] = None) -> None:
        """Reject anything that is not a non-empty PDF within the size limit."""
        if not content:
            raise ValidationError("PDF file is required")
        if len(content) > self.max_bytes:
            limit_mb = self.max_bytes // (1024 * 1024)
            raise ValidationError(f"File too large (max {limit_mb}MB)")
        if content_type != PDF_CONTENT_TYPE and not content.startswith(PDF_MAGIC):
            raise ValidationError("Only PDF files are allowed")

    def save(self, content: bytes, filename: str, resource_type: str, content_type: Optional[str] = None) -> str:
        """Persist file bytes and return the stored path."""
        if resource_type not in SUBDIRECTORIES:
            raise ValidationError(f"Unknown resource type '{resource_type}'")
        self.validate(content, content_type)

        target_dir = self.base_path / SUBDIRECTORIES[resource_type]
        file_path = target_dir / f"{uuid.uuid4()}-{_safe_name(filename)}"
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            file_path.write_bytes(content)
        except OSError as e:
            logger.error("Failed to store %s: %s", file_path, e)
            raise StorageError("Could not store uploaded file") from e
        return str(file_path)

    def resolve(self, stored_path: str) -> Path:
        """Return the on-disk path for a stored file, checking it still exists."""
        path = Path(stored_path)
        if not path.is_file():
            raise NotFoundError("File not found on disk")
        return path

    def delete(self, stored_path: str) -> None:
        """Remove a stored file. Missing files are treated as already deleted."""
        path = Path(stored_path)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.error("Failed to delete %s: %s", path, e)
            raise StorageError("Could not delete stored file") from e


file_storage = FileStorageService()
