"""
Unit tests for TicketService (initialization and intake channels)
"""
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from supportdesk.exceptions import (
    AttachmentValidationException,
    RepositoryException,
    StorageException,
)
from supportdesk.models.schemas import (
    AIAnalysis,
    Channel,
    FileAttachment,
    Priority,
    Ticket,
    TicketStatus,
)
from supportdesk.services.ticket_service import (
    VOICE_PLACEHOLDER,
    TicketService,
    UploadedFile,
    chat_title,
)
from supportdesk.services.storage import AttachmentStorage
from supportdesk.services.triage import TriageEngine


@pytest.fixture
def repository(ticket_row):
    repo = MagicMock()
    repo.create = AsyncMock(side_effect=lambda t: Ticket(**ticket_row(
        id="new-ticket", **t.model_dump(mode="json", exclude_none=True)
    )))
    repo.update = AsyncMock(side_effect=lambda tid, u: Ticket(**ticket_row(
        id=tid, **u.model_dump(mode="json", exclude_unset=True)
    )))
    repo.list_tickets = AsyncMock(return_value=[Ticket(**ticket_row())])
    return repo


@pytest.fixture
def storage():
    store = MagicMock()
    store.max_bytes = 5242880
    store.ensure_bucket = AsyncMock(return_value=False)
    store.upload = AsyncMock(side_effect=lambda user_id, ticket_id, name, content, ctype: FileAttachment(
        name=name, path=f"{user_id}/{ticket_id}/1-{name}", type=ctype, size=len(content)
    ))
    store.signed_url = AsyncMock(return_value="https://signed")
    return store


@pytest.fixture
def triage():
    engine = MagicMock(spec=TriageEngine)
    engine.model_loaded = True
    engine.analyze = AsyncMock(return_value=AIAnalysis(
        category="billing", priority=Priority.HIGH, sentiment=-0.4
    ))
    return engine


@pytest.fixture
def service(repository, triage, storage, connected_guard):
    return TicketService(repository, triage, storage, connected_guard)


class TestInitialize:
    """Dashboard load"""

    @pytest.mark.asyncio
    async def test_initialize_success(self, service, storage, repository):
        result = await service.initialize()

        assert result.connected is True
        assert result.error is None
        assert result.model_loaded is True
        assert len(result.tickets) == 1
        storage.ensure_bucket.assert_awaited_once()
        repository.list_tickets.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_initialize_disconnected(self, repository, triage, storage, disconnected_guard):
        service = TicketService(repository, triage, storage, disconnected_guard)

        result = await service.initialize()

        assert result.connected is False
        assert result.error == "Failed to connect to the backend"
        assert result.tickets == []
        storage.ensure_bucket.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_initialize_fetch_error_is_captured(self, service, repository):
        repository.list_tickets.side_effect = RepositoryException("Failed fetching tickets: boom")

        result = await service.initialize()

        assert result.connected is True
        assert result.error == "Failed fetching tickets: boom"

    @pytest.mark.asyncio
    async def test_bucket_creation_failure_still_loads_tickets(self, repository, triage, connected_guard):
        client = MagicMock()
        client.storage.list_buckets.return_value = []
        client.storage.create_bucket.side_effect = RuntimeError("row-level security")
        service = TicketService(repository, triage, AttachmentStorage(client), connected_guard)

        result = await service.initialize()

        assert result.connected is True
        assert result.error is None
        assert len(result.tickets) == 1
        repository.list_tickets.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_retry_runs_initialize_again(self, service, connected_guard):
        await service.initialize()
        await service.retry_connection()

        assert connected_guard.ensure_connection.await_count == 2


class TestChatIntake:
    """Support assistant messages"""

    @pytest.mark.asyncio
    async def test_chat_creates_triaged_ticket(self, service, repository, triage):
        message = "My invoice payment failed, this is urgent and I need it fixed today please"

        reply = await service.submit_chat("user-42", message)

        created = repository.create.call_args[0][0]
        assert created.title == message[:50] + "..."
        assert created.description == message
        assert created.category == "billing"
        assert created.priority == Priority.HIGH
        assert created.status == TicketStatus.OPEN
        assert created.channel == Channel.WEB
        assert created.user_id == "user-42"
        assert created.sentiment_score == -0.4
        triage.analyze.assert_awaited_once_with(message)

        assert reply.priority == Priority.HIGH
        assert reply.ticket.id == "new-ticket"
        assert "high priority" in reply.reply

    @pytest.mark.asyncio
    async def test_chat_write_failure_propagates(self, service, repository):
        repository.create.side_effect = RepositoryException("insert failed")

        with pytest.raises(RepositoryException):
            await service.submit_chat("user-42", "help")

    def test_chat_title_short_message(self):
        assert chat_title("Hi") == "Hi..."


class TestVoiceIntake:
    """Voice recordings"""

    @pytest.mark.asyncio
    async def test_voice_without_transcription_uses_placeholder(self, service, repository, triage):
        ticket = await service.submit_voice("user-42")

        created = repository.create.call_args[0][0]
        assert created.title == "Voice Ticket"
        assert created.description == VOICE_PLACEHOLDER
        assert created.channel == Channel.VOICE
        triage.analyze.assert_awaited_once_with(VOICE_PLACEHOLDER)
        assert ticket.channel == Channel.VOICE

    @pytest.mark.asyncio
    async def test_voice_with_transcription(self, service, repository):
        await service.submit_voice("user-42", "  my delivery never arrived  ")

        created = repository.create.call_args[0][0]
        assert created.description == "my delivery never arrived"


class TestFileIntake:
    """File uploads"""

    @pytest.mark.asyncio
    async def test_files_attached_to_new_ticket(self, service, repository, storage):
        files = [
            UploadedFile("a.png", b"png-bytes", "image/png"),
            UploadedFile("b.pdf", b"%PDF-1.7", "application/pdf"),
        ]

        ticket = await service.submit_files("user-42", files)

        created = repository.create.call_args[0][0]
        assert created.title == "File Upload Ticket"
        assert created.description == "Uploaded 2 file(s)"
        assert created.category == "general"
        assert created.priority == Priority.MEDIUM
        assert storage.upload.await_count == 2
        storage.upload.assert_any_await("user-42", "new-ticket", "a.png", b"png-bytes", "image/png")

        update_id, updates = repository.update.call_args[0]
        assert update_id == "new-ticket"
        assert [a.path for a in updates.attachments] == [
            "user-42/new-ticket/1-a.png",
            "user-42/new-ticket/1-b.pdf",
        ]
        assert len(ticket.attachments) == 2

    @pytest.mark.asyncio
    async def test_failed_upload_keeps_stored_attachments(self, service, repository, storage):
        stored = FileAttachment(name="a.png", path="user-42/new-ticket/1-a.png", type="image/png", size=9)
        storage.upload.side_effect = [stored, StorageException("Upload failed: timeout")]
        files = [
            UploadedFile("a.png", b"png-bytes", "image/png"),
            UploadedFile("b.pdf", b"%PDF-1.7", "application/pdf"),
        ]

        with pytest.raises(StorageException, match="timeout"):
            await service.submit_files("user-42", files)

        repository.create.assert_awaited_once()
        repository.update.assert_awaited_once()
        update_id, updates = repository.update.call_args[0]
        assert update_id == "new-ticket"
        assert updates.attachments == [stored]

    @pytest.mark.asyncio
    async def test_first_upload_failure_records_nothing(self, service, repository, storage):
        storage.upload.side_effect = StorageException("Upload failed: timeout")

        with pytest.raises(StorageException):
            await service.submit_files("user-42", [UploadedFile("a.png", b"png", "image/png")])

        repository.update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_file_rejected_before_ticket_created(self, service, repository):
        files = [UploadedFile("notes.txt", b"text", "text/plain")]

        with pytest.raises(AttachmentValidationException):
            await service.submit_files("user-42", files)

        repository.create.assert_not_awaited()


class TestPassThrough:
    """Thin wrappers"""

    @pytest.mark.asyncio
    async def test_complete_ticket(self, service, repository):
        ticket = await service.complete_ticket("ticket-7")

        _, updates = repository.update.call_args[0]
        assert updates.status == TicketStatus.COMPLETED
        assert ticket.status == TicketStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_analyze_delegates_to_triage(self, service, triage):
        result = await service.analyze_ticket("refund")

        assert result.category == "billing"
        triage.analyze.assert_awaited_once_with("refund")

    @pytest.mark.asyncio
    async def test_update_failure_logged_and_reraised(self, service, repository):
        repository.update.side_effect = RepositoryException("update failed")

        with patch("supportdesk.services.ticket_service.logger") as mock_logger:
            with pytest.raises(RepositoryException):
                await service.update_ticket("t", MagicMock())

        mock_logger.error.assert_called_once()
