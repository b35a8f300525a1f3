"""
Attachment storage on Supabase Storage

- Private bucket, created on startup if missing
- Files stored as {user_id}/{ticket_id}/{epoch_ms}-{name}
- Downloads go through short-lived signed URLs
"""
import asyncio
import time
from typing import Callable, Optional

from supportdesk.exceptions import StorageException
from supportdesk.models.schemas import FileAttachment
from supportdesk.utils.logger import get_logger
from supportdesk.utils.validators import (
    BUCKET_MIME_TYPES,
    storage_safe_name,
    validate_attachment,
)

logger = get_logger(__name__)

DEFAULT_BUCKET = "ticket-attachments"
DEFAULT_MAX_BYTES = 5242880  # 5MB
DEFAULT_SIGNED_URL_TTL = 300  # 5 minutes
UPLOAD_CACHE_CONTROL = "3600"


class AttachmentStorage:
    """Ticket attachments bucket"""

    def __init__(
        self,
        client,
        bucket: str = DEFAULT_BUCKET,
        max_bytes: int = DEFAULT_MAX_BYTES,
        signed_url_ttl: int = DEFAULT_SIGNED_URL_TTL,
        clock: Callable[[], float] = time.time
    ):
        self.client = client
        self.bucket = bucket
        self.max_bytes = max_bytes
        self.signed_url_ttl = signed_url_ttl
        self._clock = clock

    async def ensure_bucket(self) -> bool:
        """
        Create the attachments bucket if it does not exist.

        Best effort: a failed listing or creation is logged and reported
        as False, never raised.

        Returns:
            True if the bucket was created
        """
        try:
            buckets = await asyncio.to_thread(self.client.storage.list_buckets)
        except Exception as e:
            logger.warning(f"Could not list storage buckets: {e}")
            return False

        if any(getattr(b, "name", None) == self.bucket for b in buckets or []):
            return False

        try:
            await asyncio.to_thread(
                self.client.storage.create_bucket,
                self.bucket,
                options={
                    "public": False,
                    "file_size_limit": self.max_bytes,
                    "allowed_mime_types": BUCKET_MIME_TYPES,
                }
            )
        except Exception as e:
            logger.warning(f"Could not create storage bucket '{self.bucket}': {e}")
            return False

        logger.info(f"Created storage bucket '{self.bucket}'")
        return True

    def build_path(self, user_id: str, ticket_id: str, filename: str) -> str:
        timestamp = int(self._clock() * 1000)
        return f"{user_id}/{ticket_id}/{timestamp}-{storage_safe_name(filename)}"

    async def upload(
        self,
        user_id: str,
        ticket_id: str,
        filename: str,
        content: bytes,
        content_type: Optional[str]
    ) -> FileAttachment:
        """
        Validate and upload one file

        Raises:
            AttachmentValidationException: Too large or wrong type
            StorageException: Upload failed
        """
        validate_attachment(len(content), content_type, self.max_bytes)
        path = self.build_path(user_id, ticket_id, filename)

        try:
            response = await asyncio.to_thread(
                self.client.storage.from_(self.bucket).upload,
                path,
                content,
                {
                    "cache-control": UPLOAD_CACHE_CONTROL,
                    "upsert": "false",
                    "content-type": content_type,
                }
            )
        except Exception as e:
            logger.error(f"Failed to upload file: {e}")
            raise StorageException(f"Upload failed: {e}", {"path": path}) from e

        stored_path = getattr(response, "path", None)
        if not stored_path:
            logger.error(f"Upload returned no path for {path}")
            raise StorageException("Upload failed - no path returned", {"path": path})

        return FileAttachment(
            name=filename,
            path=stored_path,
            type=content_type,
            size=len(content)
        )

    async def signed_url(self, path: str) -> str:
        """
        Short-lived download URL for a stored file

        Raises:
            StorageException: Missing path or no URL returned
        """
        if not path:
            raise StorageException("File path is required")

        try:
            data = await asyncio.to_thread(
                self.client.storage.from_(self.bucket).create_signed_url,
                path,
                self.signed_url_ttl
            )
        except Exception as e:
            logger.error(f"Failed to get download URL: {e}")
            raise StorageException(f"Failed to get download URL: {e}", {"path": path}) from e

        url = None
        if isinstance(data, dict):
            url = data.get("signedURL") or data.get("signedUrl")
        if not url:
            raise StorageException("Failed to generate signed URL", {"path": path})
        return url
