"""
Attachment download routes
"""
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from supportdesk.dependencies import get_ticket_service
from supportdesk.services.ticket_service import TicketService
from supportdesk.utils.auth import get_current_user

router = APIRouter(
    prefix="/api/attachments",
    tags=["attachments"],
    dependencies=[Depends(get_current_user)]
)


class SignedUrlResponse(BaseModel):
    """Short-lived download URL"""
    path: str
    signed_url: str
    expires_in: int


@router.get("/signed-url", response_model=SignedUrlResponse)
async def signed_url(
    path: str = Query(..., min_length=1),
    service: TicketService = Depends(get_ticket_service)
):
    url = await service.download_url(path)
    return SignedUrlResponse(
        path=path,
        signed_url=url,
        expires_in=service.storage.signed_url_ttl
    )
