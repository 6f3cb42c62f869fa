from __future__ import annotations
import io
from PIL import Image, UnidentifiedImageError
from gridrr_admin.errors import MediaRejected

IMAGE_PREFIX = "image/"
VIDEO_PREFIX = "video/"


def check_media(content_type: str | None, size: int | None, *, prefix: str, max_bytes: int, kind: str) -> None:
    """Reject by declared type and size before anything is sent to storage."""
    if not content_type or not content_type.startswith(prefix):
        raise MediaRejected(f"Please upload {'an' if kind[0] in 'aeiou' else 'a'} {kind} file")
    if size is not None and size > max_bytes:
        raise MediaRejected(f"{kind.capitalize()} file size should be less than {max_bytes // (1024 * 1024)}MB")


def sniff_image(data: bytes) -> str | None:
    # Use PIL to confirm the bytes actually decode as an image
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()
            return Image.MIME.get(img.format or "")
    except (UnidentifiedImageError, OSError, SyntaxError):
        return None
