# Media storage on S3 / MinIO
import logging
import os
import pathlib
import uuid
from functools import lru_cache
from typing import Dict, Optional

from minio import Minio
from minio.error import S3Error

from .core.config import get_settings
from .core.exceptions import DependencyFailure, ValidationError

logger = logging.getLogger(__name__)

MAX_FILES = 10
MAX_FILE_SIZE = 20 * 1024 * 1024  # 20MB

ALLOWED_EXT = {".jpg", ".jpeg", ".png", ".webp", ".mp4", ".mov", ".avi"}
ALLOWED_MIME = {
    "image/jpeg", "image/png", "image/webp",
    "video/mp4", "video/quicktime", "video/x-msvideo",
}


@lru_cache()
def get_client() -> Minio:
    """MinIO client built from settings on first use"""
    s = get_settings()
    if not s.S3_ENDPOINT:
        raise DependencyFailure("storage", "Storage is not configured")

    # Local MinIO is plain http unless told otherwise
    secure = s.S3_SECURE or not (
        s.S3_ENDPOINT.startswith("minio") or s.S3_ENDPOINT.startswith("localhost")
    )
    client_kwargs = {
        "access_key": s.S3_ACCESS_KEY,
        "secret_key": s.S3_SECRET_KEY,
        "secure": secure,
    }
    if s.S3_REGION:
        client_kwargs["region"] = s.S3_REGION
    return Minio(s.S3_ENDPOINT, **client_kwargs)


def public_url(object_name: str) -> str:
    """Browser-facing URL of a stored object"""
    s = get_settings()
    endpoint = s.PUBLIC_S3_ENDPOINT or s.S3_ENDPOINT
    if endpoint.startswith(("http://", "https://")):
        return f"{endpoint.rstrip('/')}/{s.S3_BUCKET}/{object_name}"
    scheme = "https" if s.S3_SECURE else "http"
    return f"{scheme}://{endpoint}/{s.S3_BUCKET}/{object_name}"


def media_type(content_type: Optional[str]) -> str:
    return "video" if (content_type or "").startswith("video/") else "image"


def _file_size(upload_file) -> int:
    size = getattr(upload_file, "size", None)
    if size is not None:
        return size
    upload_file.file.seek(0, os.SEEK_END)
    size = upload_file.file.tell()
    upload_file.file.seek(0)
    return size


def validate_upload(upload_file) -> str:
    """Check extension, MIME type and size; returns the lowercased extension"""
    ext = pathlib.Path(upload_file.filename or "").suffix.lower()
    if ext not in ALLOWED_EXT or upload_file.content_type not in ALLOWED_MIME:
        raise ValidationError("File format not allowed", field="files")
    if _file_size(upload_file) > MAX_FILE_SIZE:
        raise ValidationError("File too large (max 20MB)", field="files")
    return ext


def upload_media(upload_file) -> Dict[str, str]:
    """Upload FastAPI UploadFile → returns ``{url, type}``"""
    ext = validate_upload(upload_file)
    object_name = f"media/{uuid.uuid4().hex}{ext}"
    upload_file.file.seek(0)
    try:
        get_client().put_object(
            bucket_name=get_settings().S3_BUCKET,
            object_name=object_name,
            data=upload_file.file,
            length=-1,                      # multipart
            part_size=10*1024*1024,
            content_type=upload_file.content_type
        )
    except S3Error as exc:
        logger.error("Upload of %s failed: %s", upload_file.filename, exc)
        raise DependencyFailure("storage", "Could not store the file") from exc
    return {"url": public_url(object_name), "type": media_type(upload_file.content_type)}

