"""
Ticket Service

Coordinates connection guard, triage, repository and storage for the
dashboard:

1. initialize(): connect, make sure the attachments bucket exists, load
   tickets. Failures are captured in the result for the retry screen.
2. Intake channels (chat, voice, file upload) triage the text and open a
   ticket before anything else happens.
3. Ticket mutations pass through and re-raise data errors.
"""
from dataclasses import dataclass
from typing import List, Optional, Sequence

from supportdesk.exceptions import SupportDeskError
from supportdesk.models.schemas import (
    AIAnalysis,
    Category,
    Channel,
    ChatReply,
    FileAttachment,
    InitResult,
    Priority,
    Ticket,
    TicketCreate,
    TicketStatus,
    TicketUpdate,
)
from supportdesk.repositories.ticket_repository import TicketRepository
from supportdesk.services.connection import ConnectionGuard
from supportdesk.services.storage import AttachmentStorage
from supportdesk.services.triage import TriageEngine, suggest_response
from supportdesk.utils.logger import get_logger
from supportdesk.utils.validators import sanitize_input, validate_attachment

logger = get_logger(__name__)

CHAT_TITLE_LENGTH = 50
VOICE_TICKET_TITLE = "Voice Ticket"
# No speech-to-text yet; voice tickets carry this description
VOICE_PLACEHOLDER = "Voice ticket placeholder"
FILE_TICKET_TITLE = "File Upload Ticket"


@dataclass
class UploadedFile:
    """File received from a client, before it is stored"""
    filename: str
    content: bytes
    content_type: Optional[str]


def chat_title(message: str) -> str:
    return message[:CHAT_TITLE_LENGTH] + "..."


class TicketService:
    """Service layer used by the HTTP routes"""

    def __init__(
        self,
        repository: TicketRepository,
        triage: TriageEngine,
        storage: AttachmentStorage,
        guard: ConnectionGuard
    ):
        self.repository = repository
        self.triage = triage
        self.storage = storage
        self.guard = guard

    async def initialize(self) -> InitResult:
        """
        Connect, prepare storage and load tickets.

        Never raises: errors end up in InitResult.error.
        """
        connected = False
        try:
            connected = await self.guard.ensure_connection()
            if not connected:
                raise SupportDeskError("Failed to connect to the backend")

            await self.storage.ensure_bucket()
            tickets = await self.repository.list_tickets()

            return InitResult(
                connected=True,
                tickets=tickets,
                model_loaded=self.triage.model_loaded
            )
        except Exception as e:
            message = e.message if isinstance(e, SupportDeskError) else "Failed to initialize"
            logger.error(f"Failed to initialize: {e}")
            return InitResult(
                connected=connected,
                model_loaded=self.triage.model_loaded,
                error=message
            )

    async def retry_connection(self) -> InitResult:
        return await self.initialize()

    async def analyze_ticket(self, text: str) -> AIAnalysis:
        return await self.triage.analyze(text)

    async def create_ticket(self, ticket: TicketCreate) -> Ticket:
        try:
            return await self.repository.create(ticket)
        except Exception as e:
            logger.error(f"Failed to create ticket: {e}")
            raise

    async def update_ticket(self, ticket_id: str, updates: TicketUpdate) -> Ticket:
        try:
            return await self.repository.update(ticket_id, updates)
        except Exception as e:
            logger.error(f"Failed to update ticket: {e}")
            raise

    async def complete_ticket(self, ticket_id: str) -> Ticket:
        """Agent marks a resolved ticket as completed"""
        return await self.update_ticket(
            ticket_id, TicketUpdate(status=TicketStatus.COMPLETED)
        )

    async def fetch_tickets(self, status: Optional[TicketStatus] = None) -> List[Ticket]:
        try:
            return await self.repository.list_tickets(status=status)
        except Exception as e:
            logger.error(f"Failed to fetch tickets: {e}")
            raise

    async def get_ticket(self, ticket_id: str) -> Optional[Ticket]:
        return await self.repository.get_by_id(ticket_id)

    async def download_url(self, path: str) -> str:
        return await self.storage.signed_url(path)

    # ------------------------------------------------------------------
    # Intake channels
    # ------------------------------------------------------------------

    async def submit_chat(self, user_id: str, message: str) -> ChatReply:
        """
        Support assistant message: triage it, open a ticket, reply.
        """
        message = sanitize_input(message)
        analysis = await self.triage.analyze(message)

        ticket = await self.create_ticket(TicketCreate(
            title=chat_title(message),
            description=message,
            category=analysis.category,
            priority=analysis.priority,
            status=TicketStatus.OPEN,
            user_id=user_id,
            channel=Channel.WEB,
            sentiment_score=analysis.sentiment
        ))

        return ChatReply(
            reply=suggest_response(analysis),
            priority=analysis.priority,
            ticket=ticket
        )

    async def submit_voice(self, user_id: str, transcription: Optional[str] = None) -> Ticket:
        """Voice recording intake; uses the placeholder text without a transcription"""
        text = sanitize_input(transcription or "") or VOICE_PLACEHOLDER
        analysis = await self.triage.analyze(text)

        return await self.create_ticket(TicketCreate(
            title=VOICE_TICKET_TITLE,
            description=text,
            category=analysis.category,
            priority=analysis.priority,
            status=TicketStatus.OPEN,
            user_id=user_id,
            channel=Channel.VOICE,
            sentiment_score=analysis.sentiment
        ))

    async def submit_files(self, user_id: str, files: Sequence[UploadedFile]) -> Ticket:
        """
        File upload intake: open a ticket, store each file under it, and
        record the attachments on the ticket.

        If an upload fails, the files stored before it are still recorded
        on the ticket and the error is re-raised.
        """
        if not files:
            raise SupportDeskError("At least one file is required")
        for f in files:
            validate_attachment(len(f.content), f.content_type, self.storage.max_bytes)

        ticket = await self.create_ticket(TicketCreate(
            title=FILE_TICKET_TITLE,
            description=f"Uploaded {len(files)} file(s)",
            category=Category.GENERAL,
            priority=Priority.MEDIUM,
            status=TicketStatus.OPEN,
            user_id=user_id,
            channel=Channel.WEB
        ))

        attachments: List[FileAttachment] = []
        try:
            for f in files:
                attachments.append(await self.storage.upload(
                    user_id, ticket.id, f.filename, f.content, f.content_type
                ))
        except Exception as e:
            logger.error(
                f"Upload failed for ticket {ticket.id} after "
                f"{len(attachments)} of {len(files)} file(s): {e}"
            )
            # Keep the ticket pointing at whatever was stored
            if attachments:
                await self.update_ticket(ticket.id, TicketUpdate(attachments=attachments))
            raise

        return await self.update_ticket(ticket.id, TicketUpdate(attachments=attachments))
