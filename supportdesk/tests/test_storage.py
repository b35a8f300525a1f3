"""
Unit tests for AttachmentStorage
"""
import pytest
from types import SimpleNamespace
from unittest.mock import MagicMock

from supportdesk.exceptions import AttachmentValidationException, StorageException
from supportdesk.models.schemas import FileAttachment
from supportdesk.services.storage import AttachmentStorage


@pytest.fixture
def storage_client():
    client = MagicMock()
    client.storage.list_buckets.return_value = []
    bucket = client.storage.from_.return_value
    bucket.upload.side_effect = lambda path, content, options: SimpleNamespace(path=path)
    bucket.create_signed_url.return_value = {"signedURL": "https://example.supabase.co/sign/abc"}
    return client


@pytest.fixture
def storage(storage_client):
    return AttachmentStorage(storage_client, clock=lambda: 1760000000.5)


class TestEnsureBucket:
    """Bucket bootstrap"""

    @pytest.mark.asyncio
    async def test_creates_missing_bucket(self, storage, storage_client):
        created = await storage.ensure_bucket()

        assert created is True
        storage_client.storage.create_bucket.assert_called_once_with(
            "ticket-attachments",
            options={
                "public": False,
                "file_size_limit": 5242880,
                "allowed_mime_types": ["image/*", "application/pdf"],
            }
        )

    @pytest.mark.asyncio
    async def test_existing_bucket_is_left_alone(self, storage, storage_client):
        storage_client.storage.list_buckets.return_value = [SimpleNamespace(name="ticket-attachments")]

        assert await storage.ensure_bucket() is False
        storage_client.storage.create_bucket.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_error_is_not_raised(self, storage, storage_client):
        storage_client.storage.create_bucket.side_effect = RuntimeError(
            "new row violates row-level security policy"
        )

        assert await storage.ensure_bucket() is False
        storage_client.storage.create_bucket.assert_called_once()

    @pytest.mark.asyncio
    async def test_listing_error_skips_creation(self, storage, storage_client):
        storage_client.storage.list_buckets.side_effect = RuntimeError("forbidden")

        assert await storage.ensure_bucket() is False
        storage_client.storage.create_bucket.assert_not_called()


class TestUpload:
    """File upload"""

    @pytest.mark.asyncio
    async def test_upload_path_layout(self, storage, storage_client):
        result = await storage.upload("user-1", "ticket-9", "screenshot.png", b"\x89PNG", "image/png")

        assert result == FileAttachment(
            name="screenshot.png",
            path="user-1/ticket-9/1760000000500-screenshot.png",
            type="image/png",
            size=4
        )
        storage_client.storage.from_.assert_called_with("ticket-attachments")
        options = storage_client.storage.from_.return_value.upload.call_args[0][2]
        assert options["cache-control"] == "3600"
        assert options["upsert"] == "false"

    @pytest.mark.asyncio
    async def test_directory_components_stripped(self, storage):
        result = await storage.upload("user-1", "ticket-9", "../../etc/passwd.pdf", b"%PDF", "application/pdf")

        assert result.path == "user-1/ticket-9/1760000000500-passwd.pdf"

    @pytest.mark.asyncio
    async def test_rejects_oversized_file(self, storage, storage_client):
        with pytest.raises(AttachmentValidationException, match="less than 5MB"):
            await storage.upload("u", "t", "big.pdf", b"x" * (5242880 + 1), "application/pdf")

        storage_client.storage.from_.return_value.upload.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content_type", ["text/plain", "application/zip", None])
    async def test_rejects_disallowed_types(self, storage, content_type):
        with pytest.raises(AttachmentValidationException, match="Only images and PDFs"):
            await storage.upload("u", "t", "file.bin", b"data", content_type)

    @pytest.mark.asyncio
    async def test_upload_failure_is_reraised(self, storage, storage_client):
        storage_client.storage.from_.return_value.upload.side_effect = RuntimeError("duplicate")

        with pytest.raises(StorageException, match="duplicate"):
            await storage.upload("u", "t", "a.png", b"png", "image/png")

    @pytest.mark.asyncio
    async def test_upload_without_path_fails(self, storage, storage_client):
        storage_client.storage.from_.return_value.upload.side_effect = None
        storage_client.storage.from_.return_value.upload.return_value = SimpleNamespace(path=None)

        with pytest.raises(StorageException, match="no path returned"):
            await storage.upload("u", "t", "a.png", b"png", "image/png")


class TestSignedUrl:
    """Download links"""

    @pytest.mark.asyncio
    async def test_signed_url_valid_for_five_minutes(self, storage, storage_client):
        url = await storage.signed_url("user-1/ticket-9/1-a.png")

        assert url == "https://example.supabase.co/sign/abc"
        storage_client.storage.from_.return_value.create_signed_url.assert_called_once_with(
            "user-1/ticket-9/1-a.png", 300
        )

    @pytest.mark.asyncio
    async def test_signed_url_camel_case_key(self, storage, storage_client):
        storage_client.storage.from_.return_value.create_signed_url.return_value = {
            "signedUrl": "https://example.supabase.co/sign/xyz"
        }

        assert await storage.signed_url("p") == "https://example.supabase.co/sign/xyz"

    @pytest.mark.asyncio
    async def test_empty_path_rejected(self, storage):
        with pytest.raises(StorageException, match="File path is required"):
            await storage.signed_url("")

    @pytest.mark.asyncio
    async def test_missing_url_raises(self, storage, storage_client):
        storage_client.storage.from_.return_value.create_signed_url.return_value = {}

        with pytest.raises(StorageException, match="Failed to generate signed URL"):
            await storage.signed_url("p")
