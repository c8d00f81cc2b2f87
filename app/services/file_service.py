"""File handling service for medical report uploads."""
import logging
import uuid
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Optional

from fastapi import Request, UploadFile
from PIL import Image, UnidentifiedImageError

from app.errors import NotFound, ValidationError

logger = logging.getLogger(__name__)

# Accepted media types and the extension used for the stored copy
ALLOWED_TYPES = {
    "application/pdf": ".pdf",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
}

# Pillow format names expected for each image media type
IMAGE_FORMATS = {
    "image/jpeg": "JPEG",
    "image/jpg": "JPEG",
    "image/png": "PNG",
}


@dataclass
class StoredFile:
    """Result of persisting an upload."""

    name: str  # Generated storage name, relative to the upload dir
    original_filename: Optional[str]
    content_type: str
    size: int


class FileService:
    """Service for storing, locating and deleting report files on local disk."""

    def __init__(self, upload_dir: str = "uploads/reports", max_upload_bytes: int = 10 * 1024 * 1024):
        self.upload_dir = Path(upload_dir)
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        self.max_upload_bytes = max_upload_bytes

    async def save_report_file(self, file: Optional[UploadFile]) -> StoredFile:
        """
        Validate an uploaded report file and save it under a generated name.

        The user-supplied filename is kept only as display metadata; it never
        influences where the file is written.

        Args:
            file: Uploaded file from FastAPI

        Returns:
            StoredFile describing the saved copy

        Raises:
            ValidationError: If the file is missing, too large, of a disallowed
                type, or its content does not match the declared type
        """
        if file is None or not file.filename:
            raise ValidationError("File is required")

        content_type = (file.content_type or "").lower()
        if content_type not in ALLOWED_TYPES:
            raise ValidationError("Only PDF and image files (JPEG, PNG) are allowed")

        # Read one byte past the limit to detect oversized uploads
        contents = await file.read(self.max_upload_bytes + 1)
        if len(contents) > self.max_upload_bytes:
            limit_mb = self.max_upload_bytes // (1024 * 1024)
            raise ValidationError(f"File size too large. Maximum {limit_mb}MB allowed.")
        if not contents:
            raise ValidationError("Uploaded file is empty")

        self._check_content(contents, content_type)

        name = f"{uuid.uuid4().hex}{ALLOWED_TYPES[content_type]}"
        with open(self.upload_dir / name, "wb") as f:
            f.write(contents)

        logger.info("Stored report file %s (%d bytes)", name, len(contents))
        return StoredFile(
            name=name,
            original_filename=Path(file.filename).name,
            content_type=content_type,
            size=len(contents),
        )

    def _check_content(self, contents: bytes, content_type: str) -> None:
        """Reject uploads whose bytes do not match the declared media type."""
        if content_type == "application/pdf":
            if not contents.startswith(b"%PDF-"):
                raise ValidationError("File content does not match a PDF document")
            return

        try:
            with Image.open(BytesIO(contents)) as img:
                image_format = img.format
                img.verify()
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            raise ValidationError(f"File content is not a valid image: {e}")

        if image_format != IMAGE_FORMATS[content_type]:
            raise ValidationError(
                f"File content is {image_format}, expected {IMAGE_FORMATS[content_type]}"
            )

    def resolve_path(self, name: str) -> Path:
        """
        Map a storage name to its path inside the upload dir.

        Raises:
            NotFound: If the name is not a plain file name or the file is missing
        """
        if not name or Path(name).name != name:
            raise NotFound("File not found")
        path = self.upload_dir / name
        if not path.is_file():
            raise NotFound("File not found")
        return path

    def delete_file(self, name: str) -> bool:
        """
        Delete a stored file.

        Args:
            name: Storage name returned by save_report_file

        Returns:
            True if deleted, False if file not found
        """
        if not name or Path(name).name != name:
            return False
        path = self.upload_dir / name
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False


def get_file_service(request: Request) -> FileService:
    """FastAPI dependency returning the file service built at startup."""
    return request.app.state.file_service
