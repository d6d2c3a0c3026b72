# backend/app/routes/uploads.py
"""
File endpoints:
  POST   /api/upload/resume        (multipart field `resume`)
  POST   /api/upload/image         (multipart field `image`)
  DELETE /api/upload/image         ({"url": "/api/uploads/<name>"})
  GET    /api/files/resume/{name}  (download)
Uploaded images are served statically from /api/uploads (mounted in main).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, File, UploadFile
from fastapi.responses import FileResponse, JSONResponse

from app.db.storage import UploadError, UploadStore
from .deps import get_uploads

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def _fail(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@router.post("/upload/resume")
def upload_resume(resume: UploadFile | None = File(default=None), uploads: UploadStore = Depends(get_uploads)):
    if resume is None or not resume.filename:
        logger.warning("Upload rejected: no resume file provided")
        return _fail("No valid resume file provided. Please upload a PDF, DOC, or DOCX file.", 400)
    try:
        stored = uploads.save_resume(resume.filename, resume.content_type, resume.file)
    except UploadError as e:
        return _fail(str(e), e.status_code)
    except OSError as e:
        logger.error("Error uploading resume: %s", e)
        return _fail("Failed to upload resume", 500)
    return {"success": True, "data": stored.as_dict()}


@router.post("/upload/image")
def upload_image(image: UploadFile | None = File(default=None), uploads: UploadStore = Depends(get_uploads)):
    if image is None or not image.filename:
        return _fail("No valid image file provided. Please upload a valid image file (PNG, JPG, GIF, etc.)", 400)
    try:
        stored = uploads.save_image(image.filename, image.content_type, image.file)
    except UploadError as e:
        return _fail(str(e), e.status_code)
    except OSError as e:
        logger.error("Error uploading image: %s", e)
        return _fail("Failed to upload image", 500)
    return {"success": True, "data": stored.as_dict()}


@router.delete("/upload/image")
def delete_image(payload: Optional[Dict[str, Any]] = Body(default=None), uploads: UploadStore = Depends(get_uploads)):
    try:
        uploads.delete_image((payload or {}).get("url"))
    except OSError as e:
        logger.error("Error deleting image: %s", e)
        return _fail("Failed to delete image", 500)
    return {"success": True, "message": "Image deleted successfully"}


@router.get("/files/resume/{filename}")
def download_resume(filename: str, uploads: UploadStore = Depends(get_uploads)):
    path = uploads.resume_path(filename)
    if path is None:
        return _fail("File not found", 404)
    return FileResponse(path, media_type="application/pdf", filename=filename)


__all__ = ["router"]
