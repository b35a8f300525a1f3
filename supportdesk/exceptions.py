"""
Application exceptions

Connectivity and triage failures never surface as exceptions (they degrade
to a safe default). Everything below represents a real operation failure
that the caller has to report.
"""
from typing import Any, Dict, Optional


class SupportDeskError(Exception):
    """Base exception for all application errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class BackendUnavailableException(SupportDeskError):
    """Backend could not be reached when an operation required it"""


class RepositoryException(SupportDeskError):
    """Insert/update/select against the backend failed"""


class TicketNotFoundException(RepositoryException):
    """No ticket with the requested id"""

    def __init__(self, ticket_id: str):
        self.ticket_id = ticket_id
        super().__init__(f"Ticket '{ticket_id}' not found", {"ticket_id": ticket_id})


class StorageException(SupportDeskError):
    """File storage call failed"""


class AttachmentValidationException(StorageException):
    """Attachment rejected before upload (size or type)"""
