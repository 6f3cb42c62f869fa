from __future__ import annotations
import io
from dataclasses import dataclass
from functools import lru_cache
import structlog
from minio import Minio
from minio.error import MinioException, S3Error
from urllib3.exceptions import HTTPError as TransportError
from gridrr_admin.config import Settings, settings
from gridrr_admin.errors import StorageError

log = structlog.get_logger()

MISSING_CODES = {"NoSuchKey", "NoSuchObject", "ResourceNotFound"}

# anything the client can raise for a failed request
STORAGE_ERRORS = (MinioException, TransportError)


def _parse_endpoint(ep: str) -> tuple[str, bool]:
    # Return (host:port, secure)
    secure = ep.startswith("https://")
    host = ep.replace("http://", "").replace("https://", "").rstrip("/")
    return host, secure


@dataclass
class StoredObject:
    path: str
    size: int
    url: str


class ObjectStorage:
    def __init__(self, client: Minio, bucket: str, public_base: str, region: str | None = None, cache_seconds: int = 3600):
        self.client = client
        self.bucket = bucket
        self.public_base = public_base.rstrip("/")
        self.region = region
        self.cache_seconds = cache_seconds

    @classmethod
    def from_settings(cls, cfg: Settings) -> "ObjectStorage":
        host, secure = _parse_endpoint(cfg.storage_endpoint)
        client = Minio(
            endpoint=host,
            access_key=cfg.storage_access_key,
            secret_key=cfg.storage_secret_key,
            secure=secure,
            region=cfg.storage_region or None,
        )
        public_base = cfg.storage_public_url or f"{cfg.storage_endpoint.rstrip('/')}/{cfg.storage_bucket}"
        return cls(client, cfg.storage_bucket, public_base, region=cfg.storage_region, cache_seconds=cfg.storage_cache_seconds)

    def ensure_bucket(self) -> bool:
        """Check (and create) the bucket. Diagnostic only: failures are logged, never raised."""
        try:
            if not self.client.bucket_exists(bucket_name=self.bucket):
                self.client.make_bucket(bucket_name=self.bucket, location=self.region)
                log.info("bucket_created", bucket=self.bucket)
            else:
                log.info("bucket_ok", bucket=self.bucket)
            return True
        except S3Error as e:
            log.warning("bucket_check_failed", bucket=self.bucket, code=e.code, error=str(e))
        except (OSError, MinioException, TransportError) as e:
            log.warning("bucket_unreachable", bucket=self.bucket, error=str(e))
        return False

    def exists(self, path: str) -> bool:
        try:
            self.client.stat_object(bucket_name=self.bucket, object_name=path)
            return True
        except S3Error as e:
            if e.code in MISSING_CODES:
                return False
            raise StorageError(str(e)) from e
        except STORAGE_ERRORS as e:
            raise StorageError(str(e)) from e

    def put_bytes(self, path: str, data: bytes, content_type: str, *, overwrite: bool = False) -> None:
        if not overwrite and self.exists(path):
            raise StorageError(f"The resource already exists: {path}")
        try:
            self.client.put_object(
                bucket_name=self.bucket,
                object_name=path,
                data=io.BytesIO(data),
                length=len(data),
                content_type=content_type,
                metadata={"Cache-Control": f"max-age={self.cache_seconds}"},
            )
        except STORAGE_ERRORS as e:
            raise StorageError(str(e)) from e

    def remove(self, path: str) -> None:
        try:
            self.client.remove_object(bucket_name=self.bucket, object_name=path)
        except STORAGE_ERRORS as e:
            raise StorageError(str(e)) from e

    def list(self, prefix: str = "") -> list[StoredObject]:
        try:
            objs = self.client.list_objects(bucket_name=self.bucket, prefix=prefix or None, recursive=True)
            return [StoredObject(path=o.object_name, size=o.size or 0, url=self.public_url(o.object_name)) for o in objs]
        except STORAGE_ERRORS as e:
            raise StorageError(str(e)) from e

    def usage_bytes(self) -> int:
        return sum(o.size for o in self.list())

    def public_url(self, path: str) -> str:
        return f"{self.public_base}/{path.lstrip('/')}"


@lru_cache(maxsize=1)
def get_storage() -> ObjectStorage:
    return ObjectStorage.from_settings(settings)


def check_bucket() -> bool:
    """Startup diagnostic: a misconfigured endpoint is logged, not raised."""
    try:
        storage = get_storage()
    except ValueError as e:
        log.error("storage_misconfigured", endpoint=settings.storage_endpoint, error=str(e))
        return False
    return storage.ensure_bucket()
