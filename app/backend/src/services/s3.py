"""Invoice document storage on S3, or on local disk in ``local`` mode."""

from __future__ import annotations

import re
from datetime import date
from io import BytesIO
from pathlib import Path

import boto3
import structlog
from botocore.client import BaseClient
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

from app.backend.src.core.config import get_settings
from app.backend.src.core.errors import StorageError

LOGGER = structlog.get_logger(__name__)

_MISSING_OBJECT_CODES = {"404", "NoSuchKey", "NotFound"}


def _local_bucket_root() -> Path:
    settings = get_settings()
    root = Path(settings.local_storage_path)
    root.mkdir(parents=True, exist_ok=True)
    return root


def _is_local_mode() -> bool:
    return get_settings().aws_s3_bucket.lower() == "local"


def _local_path(key: str) -> Path:
    return _local_bucket_root() / sanitize_object_key(key)


def _client() -> BaseClient:
    settings = get_settings()
    client_kwargs: dict[str, object] = {
        "config": Config(
            signature_version="s3v4",
            s3={"addressing_style": "virtual"},
        ),
        "region_name": settings.aws_region,
    }

    if settings.aws_access_key_id and settings.aws_secret_access_key:
        client_kwargs["aws_access_key_id"] = settings.aws_access_key_id
        client_kwargs["aws_secret_access_key"] = settings.aws_secret_access_key

    return boto3.client("s3", **client_kwargs)


def sanitize_object_key(key: str) -> str:
    """Collapse duplicate slashes and strip a leading slash."""

    sanitized = re.sub(r"/+", "/", str(key or "").strip())
    return sanitized.lstrip("/")


def build_invoice_key(invoice_number: str, issue_date: date) -> str:
    """Return the storage key for an invoice PDF."""

    safe_number = re.sub(r"[^A-Za-z0-9._-]+", "_", invoice_number).strip("_")
    return f"invoices/{issue_date.year:04d}/invoice_{safe_number}.pdf"


def upload_bytes(data: bytes, *, key: str, content_type: str = "application/pdf") -> str:
    """Persist ``data`` under ``key`` and return the key."""

    settings = get_settings()
    object_key = sanitize_object_key(key)

    if _is_local_mode():
        destination = _local_path(object_key)
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_bytes(data)
        except OSError as exc:
            LOGGER.error("local_store_failed", key=object_key, error=str(exc))
            raise StorageError("Failed to store document", details={"key": object_key}) from exc
        LOGGER.info("stored_local", key=object_key, path=str(destination))
        return object_key

    try:
        _client().upload_fileobj(
            Fileobj=BytesIO(data),
            Bucket=settings.aws_s3_bucket,
            Key=object_key,
            ExtraArgs={"ContentType": content_type},
        )
    except (BotoCoreError, ClientError, NoCredentialsError) as exc:
        LOGGER.error("s3_upload_failed", key=object_key, error=str(exc))
        raise StorageError("Failed to store document", details={"key": object_key}) from exc

    LOGGER.info("uploaded_s3", bucket=settings.aws_s3_bucket, key=object_key)
    return object_key


def object_exists(key: str) -> bool:
    """Return ``True`` when an object is stored under ``key``."""

    if _is_local_mode():
        return _local_path(key).is_file()

    try:
        _client().head_object(
            Bucket=get_settings().aws_s3_bucket, Key=sanitize_object_key(key)
        )
    except ClientError as exc:
        if exc.response.get("Error", {}).get("Code") in _MISSING_OBJECT_CODES:
            return False
        raise StorageError("Failed to look up document", details={"key": key}) from exc
    except BotoCoreError as exc:
        raise StorageError("Failed to look up document", details={"key": key}) from exc
    return True


def download_bytes(key: str) -> bytes:
    """Return the stored bytes for ``key``."""

    object_key = sanitize_object_key(key)
    if _is_local_mode():
        try:
            return _local_path(object_key).read_bytes()
        except OSError as exc:
            raise StorageError("Failed to read document", details={"key": object_key}) from exc

    buffer = BytesIO()
    try:
        _client().download_fileobj(
            Bucket=get_settings().aws_s3_bucket, Key=object_key, Fileobj=buffer
        )
    except (BotoCoreError, ClientError) as exc:
        LOGGER.error("s3_download_failed", key=object_key, error=str(exc))
        raise StorageError("Failed to read document", details={"key": object_key}) from exc
    return buffer.getvalue()


def delete_object(key: str) -> None:
    """Remove the object stored under ``key``; missing objects are ignored."""

    object_key = sanitize_object_key(key)
    if _is_local_mode():
        _local_path(object_key).unlink(missing_ok=True)
        LOGGER.info("deleted_local", key=object_key)
        return

    try:
        _client().delete_object(Bucket=get_settings().aws_s3_bucket, Key=object_key)
    except (BotoCoreError, ClientError) as exc:
        LOGGER.error("s3_delete_failed", key=object_key, error=str(exc))
        raise StorageError("Failed to delete document", details={"key": object_key}) from exc
    LOGGER.info("deleted_s3", key=object_key)


def discard_object(key: str | None) -> None:
    """Best-effort removal of a stored document; failures are logged only."""

    if not key:
        return
    try:
        delete_object(key)
    except StorageError as exc:
        LOGGER.error("document_cleanup_failed", key=key, error=exc.message)


def generate_presigned_url(
    key: str,
    *,
    expires_in: int = 3600,
    download_name: str | None = None,
) -> str:
    """Generate a presigned download URL for a stored invoice PDF."""

    settings = get_settings()
    sanitized_key = sanitize_object_key(key)

    if _is_local_mode():
        return _local_path(sanitized_key).resolve().as_uri()

    params: dict[str, str] = {
        "Bucket": settings.aws_s3_bucket,
        "Key": sanitized_key,
        "ResponseContentType": "application/pdf",
    }
    if download_name:
        safe_name = re.sub(r"[^A-Za-z0-9._-]+", "_", download_name)
        params["ResponseContentDisposition"] = f'attachment; filename="{safe_name}"'

    try:
        return _client().generate_presigned_url(
            "get_object",
            Params=params,
            ExpiresIn=expires_in,
        )
    except (BotoCoreError, ClientError) as exc:
        LOGGER.error("presign_failed", key=sanitized_key, error=str(exc))
        raise StorageError("Failed to generate download URL", details={"key": sanitized_key}) from exc


__all__ = [
    "build_invoice_key",
    "delete_object",
    "discard_object",
    "download_bytes",
    "generate_presigned_url",
    "object_exists",
    "sanitize_object_key",
    "upload_bytes",
]
