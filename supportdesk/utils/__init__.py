"""
Utility functions
"""
from supportdesk.utils.logger import setup_logger, get_logger
from supportdesk.utils.validators import (
    sanitize_input,
    validate_attachment,
    is_allowed_mime_type,
)

__all__ = [
    "setup_logger",
    "get_logger",
    "sanitize_input",
    "validate_attachment",
    "is_allowed_mime_type",
]
