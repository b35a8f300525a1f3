"""
Intake API Routes

Every channel triages the incoming text and opens a ticket:
- POST /api/intake/chat  - support assistant message, returns the reply
- POST /api/intake/voice - voice recording (placeholder transcription)
- POST /api/intake/files - multipart file upload, images and PDFs only
"""
from typing import List

from fastapi import APIRouter, Depends, File, UploadFile, status

from supportdesk.dependencies import get_ticket_service
from supportdesk.models.schemas import ChatReply, ChatRequest, Ticket, VoiceRequest
from supportdesk.services.ticket_service import TicketService, UploadedFile
from supportdesk.utils.auth import AuthenticatedUser, get_current_user

router = APIRouter(prefix="/api/intake", tags=["intake"])


@router.post("/chat", response_model=ChatReply, status_code=status.HTTP_201_CREATED)
async def submit_chat(
    request: ChatRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    service: TicketService = Depends(get_ticket_service)
):
    return await service.submit_chat(user.id, request.message)


@router.post("/voice", response_model=Ticket, status_code=status.HTTP_201_CREATED)
async def submit_voice(
    request: VoiceRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    service: TicketService = Depends(get_ticket_service)
):
    return await service.submit_voice(user.id, request.transcription)


@router.post("/files", response_model=Ticket, status_code=status.HTTP_201_CREATED)
async def submit_files(
    files: List[UploadFile] = File(...),
    user: AuthenticatedUser = Depends(get_current_user),
    service: TicketService = Depends(get_ticket_service)
):
    uploads = [
        UploadedFile(
            filename=f.filename or "upload",
            content=await f.read(),
            content_type=f.content_type
        )
        for f in files
    ]
    return await service.submit_files(user.id, uploads)
