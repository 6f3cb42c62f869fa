from __future__ import annotations
import re
import secrets
import string
import time
import structlog
from gridrr_admin.errors import StorageError
from gridrr_admin.schemas.upload import UploadResult
from gridrr_admin.services.storage import ObjectStorage

log = structlog.get_logger()

_BASE36 = string.digits + string.ascii_lowercase


def make_file_name(original: str, now_ms: int | None = None) -> str:
    """`<epoch ms>-<8 random base36 chars>.<original extension>`."""
    ext = original.rsplit(".", 1)[-1]
    ts = now_ms if now_ms is not None else int(time.time() * 1000)
    token = "".join(secrets.choice(_BASE36) for _ in range(8))
    return f"{ts}-{token}.{ext}"


def join_path(folder: str, name: str) -> str:
    return re.sub(r"/{2,}", "/", f"{folder}/{name}")


def upload_file(storage: ObjectStorage, data: bytes, filename: str, content_type: str, folder: str) -> UploadResult:
    file_name = make_file_name(filename)
    path = join_path(folder, file_name)
    log.info("upload_started", bucket=storage.bucket, path=path, size=len(data), content_type=content_type)
    try:
        storage.put_bytes(path, data, content_type, overwrite=False)
    except StorageError as e:
        log.error("upload_failed", path=path, error=str(e))
        return UploadResult(success=False, error=str(e) or "Unknown error occurred")
    url = storage.public_url(path)
    log.info("upload_succeeded", path=path, url=url)
    return UploadResult(success=True, path=path, url=url, file_name=file_name)


def delete_file(storage: ObjectStorage, path: str) -> UploadResult:
    try:
        storage.remove(path)
    except StorageError as e:
        log.error("delete_failed", path=path, error=str(e))
        return UploadResult(success=False, path=path, error=str(e) or "Unknown error occurred")
    log.info("file_deleted", path=path)
    return UploadResult(success=True, path=path)
