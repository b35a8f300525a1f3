"""
Input validation utilities
"""
from typing import Optional

from supportdesk.exceptions import AttachmentValidationException

ALLOWED_MIME_PREFIXES = ("image/",)
ALLOWED_MIME_TYPES = ("application/pdf",)
BUCKET_MIME_TYPES = ["image/*", "application/pdf"]


def sanitize_input(text: str, max_length: int = 10000) -> str:
    """
    Sanitize user input

    Args:
        text: Input text to sanitize
        max_length: Maximum allowed length

    Returns:
        Sanitized text
    """
    # Remove null bytes
    text = text.replace('\x00', '')

    # Truncate to max length
    if len(text) > max_length:
        text = text[:max_length]

    return text.strip()


def is_allowed_mime_type(content_type: Optional[str]) -> bool:
    """Images and PDFs only"""
    if not content_type:
        return False
    return content_type.startswith(ALLOWED_MIME_PREFIXES) or content_type in ALLOWED_MIME_TYPES


def validate_attachment(size: int, content_type: Optional[str], max_bytes: int) -> None:
    """
    Reject attachments before they reach storage

    Raises:
        AttachmentValidationException: If too large or not an image/PDF
    """
    if size > max_bytes:
        raise AttachmentValidationException(
            f"File size must be less than {max_bytes // (1024 * 1024)}MB",
            {"size": size, "max_bytes": max_bytes}
        )
    if not is_allowed_mime_type(content_type):
        raise AttachmentValidationException(
            "Only images and PDFs are allowed",
            {"content_type": content_type}
        )


def storage_safe_name(filename: str) -> str:
    """Strip directory components so a file name cannot escape its folder"""
    name = filename.replace("\\", "/").rsplit("/", 1)[-1].strip()
    return name or "upload"
