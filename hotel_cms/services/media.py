import base64
import json
import logging
import mimetypes
import os
import uuid
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, Optional

import cloudinary
import cloudinary.uploader
import requests

from ..config import settings
from ..errors import StorageError, UploadRejected

logger = logging.getLogger(__name__)


@dataclass
class StoredFile:
    url: str
    key: str
    name: Optional[str] = None
    size: Optional[int] = None


@dataclass
class DeleteResult:
    success: bool
    deleted_count: int = 0


@dataclass
class UploadedFile:
    """Raw file received from a multipart request, not yet stored."""

    data: bytes
    filename: Optional[str] = None
    content_type: Optional[str] = None


def _sniff_media_type(data: bytes) -> tuple[str, str] | None:
    """Return (kind, extension) if bytes look like a common image or video, else None."""
    if not data or len(data) < 12:
        return None
    if data.startswith(b"\xFF\xD8\xFF"):
        return "image", "jpg"
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image", "png"
    if data[:6] in (b"GIF87a", b"GIF89a"):
        return "image", "gif"
    if data.startswith(b"RIFF") and data[8:12] == b"WEBP":
        return "image", "webp"
    if data[4:8] == b"ftyp":
        brand = data[8:12]
        if brand in (b"qt  ",):
            return "video", "mov"
        if brand.startswith(b"avi") or brand.startswith(b"hei") or brand.startswith(b"mif"):
            return "image", "avif" if brand.startswith(b"avi") else "heic"
        return "video", "mp4"
    if data.startswith(b"\x1A\x45\xDF\xA3"):
        return "video", "webm"
    return None


def classify_upload(data: bytes, content_type: str | None, filename: str | None = None) -> tuple[str, str]:
    """Apply the upload policy and return (kind, content_type).

    Images up to UPLOAD_IMAGE_MAX_MB and videos up to UPLOAD_VIDEO_MAX_MB are
    accepted; anything else raises ``UploadRejected``.
    """
    if not data:
        raise UploadRejected("No file provided")

    ctype = (content_type or "").split(";")[0].strip().lower()
    if not ctype or ctype == "application/octet-stream":
        sniffed = _sniff_media_type(data)
        if sniffed:
            kind, ext = sniffed
            ctype = mimetypes.types_map.get(f".{ext}", f"{kind}/{ext}")
        elif filename:
            ctype = mimetypes.guess_type(filename)[0] or ""

    if ctype.startswith("image/"):
        if len(data) > settings.UPLOAD_IMAGE_MAX_BYTES:
            raise UploadRejected(f"Image file too large. Maximum size is {settings.UPLOAD_IMAGE_MAX_MB}MB.")
        return "image", ctype
    if ctype.startswith("video/"):
        if len(data) > settings.UPLOAD_VIDEO_MAX_BYTES:
            raise UploadRejected(f"Video file too large. Maximum size is {settings.UPLOAD_VIDEO_MAX_MB}MB.")
        return "video", ctype
    raise UploadRejected("Only image and video files are allowed")


def _normalize_keys(keys: str | Iterable[str]) -> list[str]:
    if isinstance(keys, str):
        keys = [keys]
    # de-duplicate, keep order
    return list(dict.fromkeys(k for k in keys if k))


class StorageBackend:
    """Contract the orchestrators rely on.

    ``upload`` is atomic and returns a permanent key. ``delete`` is idempotent:
    keys that are already gone do not raise.
    """

    name = "base"

    def upload(self, data: bytes, filename: str | None, content_type: str | None) -> StoredFile:
        raise NotImplementedError

    def delete(self, keys: str | Iterable[str]) -> DeleteResult:
        raise NotImplementedError


class UploadThingStorage(StorageBackend):
    name = "uploadthing"
    API_VERSION = "6.4.0"

    def __init__(self, api_key: str, api_url: str = "https://api.uploadthing.com", timeout: int = 60):
        if not api_key:
            raise StorageError("UploadThing is not configured")
        self.api_key = api_key
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_settings(cls) -> "UploadThingStorage":
        api_key = settings.UPLOADTHING_SECRET
        if not api_key and settings.UPLOADTHING_TOKEN:
            # v7 tokens are base64 JSON: {"apiKey": ..., "appId": ..., "regions": [...]}
            try:
                token = json.loads(base64.b64decode(settings.UPLOADTHING_TOKEN))
                api_key = token.get("apiKey", "")
            except (ValueError, TypeError) as e:
                raise StorageError(f"Invalid UPLOADTHING_TOKEN: {e}")
        return cls(api_key, settings.UPLOADTHING_API_URL, settings.UPLOADTHING_TIMEOUT)

    def _headers(self) -> dict[str, str]:
        return {
            "X-Uploadthing-Api-Key": self.api_key,
            "X-Uploadthing-Version": self.API_VERSION,
            "Content-Type": "application/json",
        }

    def _post(self, path: str, payload: dict) -> dict:
        try:
            response = requests.post(
                f"{self.api_url}{path}", headers=self._headers(), json=payload, timeout=self.timeout
            )
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            raise StorageError(f"UploadThing request {path} failed: {e}")
        except ValueError as e:
            raise StorageError(f"UploadThing returned invalid JSON for {path}: {e}")

    def upload(self, data, filename, content_type) -> StoredFile:
        name = filename or uuid.uuid4().hex
        presigned = self._post(
            "/v6/uploadFiles",
            {
                "files": [{"name": name, "size": len(data), "type": content_type or "application/octet-stream"}],
                "acl": "public-read",
                "contentDisposition": "inline",
            },
        )
        try:
            target = presigned["data"][0]
            key = target["key"]
        except (KeyError, IndexError, TypeError):
            raise StorageError(f"Unexpected UploadThing response: {presigned}")

        try:
            response = requests.post(
                target["url"],
                data=target.get("fields") or {},
                files={"file": (name, data, content_type)},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise StorageError(f"UploadThing file transfer failed: {e}")

        url = target.get("fileUrl") or f"https://utfs.io/f/{key}"
        logger.info("Uploaded %s to UploadThing as %s", name, key)
        return StoredFile(url=url, key=key, name=name, size=len(data))

    def delete(self, keys) -> DeleteResult:
        file_keys = _normalize_keys(keys)
        if not file_keys:
            return DeleteResult(success=True)
        res = self._post("/v6/deleteFiles", {"fileKeys": file_keys})
        return DeleteResult(success=bool(res.get("success")), deleted_count=int(res.get("deletedCount", 0)))


class CloudinaryStorage(StorageBackend):
    name = "cloudinary"

    def __init__(self, cloudinary_url: str, folder: str = "hotel"):
        if not cloudinary_url:
            raise StorageError("Cloudinary is not configured")
        cloudinary.config(cloudinary_url=cloudinary_url)
        self.folder = folder

    def upload(self, data, filename, content_type) -> StoredFile:
        kind = "video" if (content_type or "").startswith("video/") else "image"
        try:
            upload_res = cloudinary.uploader.upload(
                data,
                folder=self.folder,
                public_id=uuid.uuid4().hex,
                resource_type=kind,
                overwrite=True,
            )
        except Exception as e:
            raise StorageError(f"Cloudinary upload failed: {e}")
        # Prefer secure_url
        url = upload_res.get("secure_url") or upload_res.get("url")
        key = upload_res.get("public_id")
        if not url or not key:
            raise StorageError("Cloudinary upload returned no URL")
        return StoredFile(url=url, key=key, name=filename, size=upload_res.get("bytes", len(data)))

    def delete(self, keys) -> DeleteResult:
        deleted = 0
        success = True
        for key in _normalize_keys(keys):
            try:
                result = "not found"
                # The key alone does not say whether it was an image or a video
                for resource_type in ("image", "video"):
                    result = cloudinary.uploader.destroy(key, resource_type=resource_type, invalidate=True).get("result")
                    if result == "ok":
                        deleted += 1
                        break
                if result not in ("ok", "not found"):
                    success = False
            except Exception as e:
                raise StorageError(f"Cloudinary delete of {key} failed: {e}")
        return DeleteResult(success=success, deleted_count=deleted)


class LocalStorage(StorageBackend):
    """Files on local disk, served from /static/uploads. For development."""

    name = "local"

    def __init__(self, directory: str, url_prefix: str = "/static/uploads"):
        self.directory = directory
        self.url_prefix = url_prefix.rstrip("/")

    def upload(self, data, filename, content_type) -> StoredFile:
        sniffed = _sniff_media_type(data)
        ext = sniffed[1] if sniffed else (mimetypes.guess_extension(content_type or "") or ".bin").lstrip(".")
        key = f"{uuid.uuid4().hex}.{ext}"
        try:
            os.makedirs(self.directory, exist_ok=True)
            with open(os.path.join(self.directory, key), "wb") as f:
                f.write(data)
        except OSError as e:
            raise StorageError(f"Could not write upload: {e}")
        return StoredFile(url=f"{self.url_prefix}/{key}", key=key, name=filename, size=len(data))

    def delete(self, keys) -> DeleteResult:
        deleted = 0
        for key in _normalize_keys(keys):
            path = os.path.join(self.directory, os.path.basename(key))
            try:
                os.remove(path)
                deleted += 1
            except FileNotFoundError:
                continue
            except OSError as e:
                raise StorageError(f"Could not delete {key}: {e}")
        return DeleteResult(success=True, deleted_count=deleted)


def build_storage(backend: str | None = None) -> StorageBackend:
    backend = (backend or settings.STORAGE_BACKEND).lower()
    if backend == "uploadthing":
        return UploadThingStorage.from_settings()
    if backend == "cloudinary":
        return CloudinaryStorage(settings.CLOUDINARY_URL, settings.CLOUDINARY_FOLDER)
    if backend == "local":
        return LocalStorage(settings.LOCAL_UPLOAD_DIR)
    raise StorageError(f"Unknown storage backend: {backend}")


@lru_cache(maxsize=1)
def get_storage() -> StorageBackend:
    """FastAPI dependency returning the configured storage backend."""
    storage = build_storage()
    logger.info("Using %s file storage", storage.name)
    return storage


def save_upload(storage: StorageBackend, data: bytes, filename: str | None, content_type: str | None,
                allowed: tuple[str, ...] = ("image", "video")) -> StoredFile:
    """Check the upload policy, then store the file. Failures raise and abort the caller."""
    kind, ctype = classify_upload(data, content_type, filename)
    if kind not in allowed:
        raise UploadRejected(f"Only {' and '.join(allowed)} files are allowed")
    return storage.upload(data, filename, ctype)


def purge_files(storage: StorageBackend, keys: str | Iterable[str], reason: str = "") -> bool:
    """Best-effort delete of storage objects.

    Never raises: the database is the source of truth, so a failed delete
    only leaves an orphaned file behind and is logged.
    """
    file_keys = _normalize_keys(keys)
    if not file_keys:
        return True
    try:
        result = storage.delete(file_keys)
    except Exception:
        logger.exception("Failed to delete %d file(s) from storage (%s): %s", len(file_keys), reason, file_keys)
        return False
    if not result.success:
        logger.warning("Storage reported incomplete delete (%s): %s", reason, file_keys)
        return False
    logger.info("Deleted %d file(s) from storage (%s)", len(file_keys), reason)
    return True
