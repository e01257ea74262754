"""
Image upload to a public blob store.

MediaUploader turns an UploadedMedia into a public URL:
1. builds an object key from the upload time, a random suffix and the original filename
2. writes the bytes in one (non-resumable) request
3. marks the object public and returns its URL
Any failure, including a timeout, is raised as UploadError.
"""
from __future__ import annotations

import asyncio
import logging
import re
import secrets
import time
from typing import Optional, Protocol

from firebase_admin import storage

from chatbot.core.errors import UploadError
from chatbot.schemas.chat import UploadedMedia

logger = logging.getLogger(__name__)

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


class BlobStore(Protocol):
    def put(self, key: str, data: bytes, content_type: str) -> str:
        """Write bytes, make them public, return the public URL (blocking)."""
        ...


def safe_filename(name: str) -> str:
    base = (name or "").replace("\\", "/").rsplit("/", 1)[-1]
    cleaned = _UNSAFE.sub("_", base).strip("._")
    return cleaned[:100] or "upload"


def make_object_key(original_name: str, *, prefix: str = "", now_ms: Optional[int] = None) -> str:
    # timestamp + filename alone collides for same-name uploads in the same millisecond
    ts = now_ms if now_ms is not None else int(time.time() * 1000)
    key = f"{ts}-{secrets.token_hex(4)}-{safe_filename(original_name)}"
    return f"{prefix.strip('/')}/{key}" if prefix.strip("/") else key


class FirebaseBlobStore:
    def __init__(self, bucket_name: Optional[str] = None, *, bucket=None) -> None:
        if bucket is None:
            bucket = storage.bucket(bucket_name or None)
        self._bucket = bucket

    def put(self, key: str, data: bytes, content_type: str) -> str:
        blob = self._bucket.blob(key)
        # small payloads go up in a single multipart request, no resumable session
        blob.upload_from_string(data, content_type=content_type)
        blob.make_public()
        return blob.public_url


class MediaUploader:
    def __init__(self, store: BlobStore, *, prefix: str = "", timeout: float = 30.0) -> None:
        self._store = store
        self._prefix = prefix
        self._timeout = timeout

    async def upload(self, media: UploadedMedia) -> str:
        key = make_object_key(media.original_name, prefix=self._prefix)
        try:
            url = await asyncio.wait_for(
                asyncio.to_thread(self._store.put, key, media.buffer, media.mime_type),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as e:
            raise UploadError(f"upload of {key} timed out after {self._timeout}s") from e
        except Exception as e:
            raise UploadError(f"upload of {key} failed: {e}") from e
        if not url:
            raise UploadError(f"upload of {key} returned no URL")
        logger.info("uploaded image %s (%d bytes)", key, len(media.buffer))
        return url
