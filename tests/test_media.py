"""Tests for the upload policy, storage backends and best-effort cleanup."""

import base64
import json
from unittest.mock import Mock, patch

import pytest
import requests

from hotel_cms.config import settings
from hotel_cms.errors import StorageError, UploadRejected
from hotel_cms.services.media import (
    DeleteResult,
    LocalStorage,
    UploadThingStorage,
    classify_upload,
    purge_files,
    save_upload,
)

from .fakes import PNG_BYTES, FakeStorage

MP4_BYTES = b"\x00\x00\x00\x18ftypmp42" + b"\x00" * 32


class TestClassifyUpload:
    """Type and size policy for uploads."""

    def test_image_by_content_type(self):
        assert classify_upload(PNG_BYTES, "image/png") == ("image", "image/png")

    def test_video_by_content_type(self):
        assert classify_upload(MP4_BYTES, "video/mp4") == ("video", "video/mp4")

    def test_sniffs_octet_stream(self):
        kind, ctype = classify_upload(PNG_BYTES, "application/octet-stream")
        assert kind == "image"
        assert ctype == "image/png"

    def test_falls_back_to_filename(self):
        kind, _ = classify_upload(b"not-really-an-image-but-named-so", None, "photo.jpg")
        assert kind == "image"

    def test_empty_rejected(self):
        with pytest.raises(UploadRejected, match="No file provided"):
            classify_upload(b"", "image/png")

    def test_other_types_rejected(self):
        with pytest.raises(UploadRejected):
            classify_upload(b"%PDF-1.4 plus some more bytes", "application/pdf")

    def test_image_too_large(self, monkeypatch):
        monkeypatch.setattr(settings, "UPLOAD_IMAGE_MAX_BYTES", 10)
        with pytest.raises(UploadRejected, match="too large"):
            classify_upload(PNG_BYTES, "image/png")

    def test_video_limit_is_separate(self, monkeypatch):
        monkeypatch.setattr(settings, "UPLOAD_IMAGE_MAX_BYTES", 10)
        assert classify_upload(MP4_BYTES, "video/mp4")[0] == "video"

    def test_rejection_is_client_error(self):
        assert UploadRejected("x").status_code == 400


class TestSaveUpload:
    def test_video_not_allowed_for_images_only(self):
        storage = FakeStorage()
        with pytest.raises(UploadRejected):
            save_upload(storage, MP4_BYTES, "clip.mp4", "video/mp4", allowed=("image",))
        assert storage.uploads == []

    def test_stores_file(self):
        storage = FakeStorage()
        stored = save_upload(storage, PNG_BYTES, "a.png", "image/png")
        assert stored.key == "up-1"
        assert stored.url == "https://utfs.io/f/up-1"


class TestPurgeFiles:
    """Best-effort deletion never raises."""

    def test_swallows_exceptions(self):
        storage = FakeStorage()
        storage.fail_deletes = True
        assert purge_files(storage, ["a", "b"], reason="test") is False
        assert storage.delete_calls == [["a", "b"]]

    def test_reports_incomplete_delete(self):
        storage = Mock()
        storage.delete.return_value = DeleteResult(success=False)
        assert purge_files(storage, "a") is False

    def test_empty_keys_skip_storage(self):
        storage = FakeStorage()
        assert purge_files(storage, [None, ""]) is True
        assert storage.delete_calls == []

    def test_deduplicates_keys(self):
        storage = FakeStorage()
        assert purge_files(storage, ["a", "a", "b"]) is True
        assert storage.delete_calls == [["a", "b"]]


class TestLocalStorage:
    def test_upload_then_delete(self, tmp_path):
        storage = LocalStorage(str(tmp_path / "uploads"))
        stored = storage.upload(PNG_BYTES, "room.png", "image/png")
        assert stored.key.endswith(".png")
        assert stored.url == f"/static/uploads/{stored.key}"
        assert (tmp_path / "uploads" / stored.key).read_bytes() == PNG_BYTES

        result = storage.delete(stored.key)
        assert result.success and result.deleted_count == 1
        assert not (tmp_path / "uploads" / stored.key).exists()

    def test_delete_missing_is_idempotent(self, tmp_path):
        result = LocalStorage(str(tmp_path)).delete(["gone.png"])
        assert result.success and result.deleted_count == 0


class TestUploadThingStorage:
    """REST calls against the storage API, with requests mocked."""

    def _response(self, payload):
        response = Mock()
        response.json.return_value = payload
        response.raise_for_status.return_value = None
        return response

    def test_requires_api_key(self):
        with pytest.raises(StorageError):
            UploadThingStorage("")

    def test_token_decoding(self, monkeypatch):
        token = base64.b64encode(json.dumps({"apiKey": "sk_live_x", "appId": "app"}).encode()).decode()
        monkeypatch.setattr(settings, "UPLOADTHING_SECRET", "")
        monkeypatch.setattr(settings, "UPLOADTHING_TOKEN", token)
        assert UploadThingStorage.from_settings().api_key == "sk_live_x"

    def test_delete_posts_file_keys(self):
        storage = UploadThingStorage("sk_test")
        with patch("hotel_cms.services.media.requests.post") as post:
            post.return_value = self._response({"success": True, "deletedCount": 2})
            result = storage.delete(["k1", "k2"])

        assert result == DeleteResult(success=True, deleted_count=2)
        args, kwargs = post.call_args
        assert args[0] == "https://api.uploadthing.com/v6/deleteFiles"
        assert kwargs["json"] == {"fileKeys": ["k1", "k2"]}
        assert kwargs["headers"]["X-Uploadthing-Api-Key"] == "sk_test"

    def test_upload_uses_presigned_target(self):
        storage = UploadThingStorage("sk_test")
        presigned = {"data": [{"key": "KEY1", "url": "https://bucket.example/upload", "fields": {"a": "b"}}]}
        with patch("hotel_cms.services.media.requests.post") as post:
            post.side_effect = [self._response(presigned), self._response({})]
            stored = storage.upload(PNG_BYTES, "room.png", "image/png")

        assert stored.key == "KEY1"
        assert stored.url == "https://utfs.io/f/KEY1"
        assert post.call_args_list[1].args[0] == "https://bucket.example/upload"

    def test_network_failure_raises_storage_error(self):
        storage = UploadThingStorage("sk_test")
        with patch("hotel_cms.services.media.requests.post", side_effect=requests.exceptions.ConnectionError("down")):
            with pytest.raises(StorageError):
                storage.delete("k1")
