# backend/app/db/storage.py
"""
File storage on local disk.

- UploadStore: backs POST /api/upload/{resume,image}; validates type and size
  and returns the public URL the file is served from.
- LocalStorage: StorageBucket implementation for the configured backend.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional

from app.core.utils import epoch_ms
from .base import Response, StorageBucket

logger = logging.getLogger(__name__)

RESUME_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}
RESUME_MAX_BYTES = 10 * 1024 * 1024
IMAGE_MAX_BYTES = 5 * 1024 * 1024
CHUNK_SIZE = 64 * 1024


class UploadError(Exception):
    """Upload rejected or failed; aborts the submission that needed it."""

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass
class StoredFile:
    url: str
    filename: str
    size: int
    mimetype: str

    def as_dict(self) -> dict:
        return {"url": self.url, "filename": self.filename, "size": self.size, "mimetype": self.mimetype}


def _unique_name(prefix: str, original: str) -> str:
    return f"{prefix}-{epoch_ms()}-{random.randint(0, 10**9)}{Path(original or '').suffix}"


class UploadStore:
    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)
        self.resumes_dir = self.root / "resumes"

    def _write(self, dst: Path, fileobj: BinaryIO, limit: int) -> int:
        """Stream to disk in chunks; stops reading once `limit` is exceeded."""
        dst.parent.mkdir(parents=True, exist_ok=True)
        size = 0
        try:
            with dst.open("wb") as f:
                for chunk in iter(lambda: fileobj.read(CHUNK_SIZE), b""):
                    size += len(chunk)
                    if size > limit:
                        raise UploadError(f"File too large (max {limit // (1024 * 1024)}MB)", status_code=413)
                    f.write(chunk)
        except UploadError:
            dst.unlink(missing_ok=True)
            raise
        return size

    def save_resume(self, filename: str, content_type: Optional[str], fileobj: BinaryIO) -> StoredFile:
        if not filename:
            raise UploadError("No valid resume file provided. Please upload a PDF, DOC, or DOCX file.")
        if content_type not in RESUME_TYPES:
            logger.warning("Rejected resume upload: %s (%s)", filename, content_type)
            raise UploadError("Only PDF, DOC, and DOCX files are allowed")
        name = _unique_name("resume", filename)
        size = self._write(self.resumes_dir / name, fileobj, RESUME_MAX_BYTES)
        logger.info("Resume upload successful: %s -> %s", filename, name)
        return StoredFile(url=f"/api/files/resume/{name}", filename=filename, size=size, mimetype=content_type)

    def save_image(self, filename: str, content_type: Optional[str], fileobj: BinaryIO) -> StoredFile:
        if not filename:
            raise UploadError(
                "No valid image file provided. Please upload a valid image file (PNG, JPG, GIF, etc.)"
            )
        if not (content_type or "").startswith("image/"):
            logger.warning("Rejected image upload: %s (%s)", filename, content_type)
            raise UploadError("Only image files are allowed")
        name = _unique_name("image", filename)
        size = self._write(self.root / name, fileobj, IMAGE_MAX_BYTES)
        logger.info("Image upload successful: %s -> %s", filename, name)
        return StoredFile(url=f"/api/uploads/{name}", filename=filename, size=size, mimetype=content_type or "")

    def delete_image(self, url: Optional[str]) -> bool:
        if not url or not url.startswith("/api/uploads/"):
            return False
        path = self.root / Path(url).name
        if path.is_file():
            path.unlink()
            logger.info("Deleted image: %s", path.name)
            return True
        return False

    def resume_path(self, filename: str) -> Optional[Path]:
        """Resolve a stored resume by name; None for unknown or escaping names."""
        if not filename or Path(filename).name != filename:
            return None
        path = self.resumes_dir / filename
        return path if path.is_file() else None


class LocalStorage(StorageBucket):
    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def upload(self, path: str, filename: str, content: bytes = b"") -> Response:
        rel = Path(path or "") / f"{epoch_ms()}-{Path(filename).name}"
        dst = self.root / rel
        try:
            dst.parent.mkdir(parents=True, exist_ok=True)
            dst.write_bytes(content)
        except OSError as e:
            return Response.fail(str(e))
        return Response(data={"path": rel.as_posix()})

    def get_public_url(self, path: str) -> Response:
        return Response(data={"publicUrl": f"/api/uploads/{path}"})


__all__ = [
    "UploadStore", "UploadError", "StoredFile", "LocalStorage",
    "RESUME_TYPES", "RESUME_MAX_BYTES", "IMAGE_MAX_BYTES", "CHUNK_SIZE",
]
