"""
Ticket-related API routes
"""
from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional

from supportdesk.dependencies import get_ticket_service
from supportdesk.exceptions import TicketNotFoundException
from supportdesk.models.schemas import (
    AIAnalysis,
    AnalyzeRequest,
    InitResult,
    Ticket,
    TicketCreate,
    TicketStatus,
    TicketUpdate,
)
from supportdesk.services.ticket_service import TicketService
from supportdesk.utils.auth import AuthenticatedUser, get_current_user

router = APIRouter(
    prefix="/api/tickets",
    tags=["tickets"],
    dependencies=[Depends(get_current_user)]
)


@router.get("", response_model=List[Ticket])
async def list_tickets(
    status_filter: Optional[TicketStatus] = Query(None, alias="status"),
    service: TicketService = Depends(get_ticket_service)
):
    """
    List tickets, newest first
    """
    return await service.fetch_tickets(status=status_filter)


@router.post("", response_model=Ticket, status_code=status.HTTP_201_CREATED)
async def create_ticket(
    ticket: TicketCreate,
    service: TicketService = Depends(get_ticket_service)
):
    """
    Create a ticket with caller-supplied classification
    """
    return await service.create_ticket(ticket)


@router.post("/analyze", response_model=AIAnalysis)
async def analyze_ticket(
    request: AnalyzeRequest,
    service: TicketService = Depends(get_ticket_service)
):
    """
    Triage text without creating a ticket
    """
    return await service.analyze_ticket(request.text)


@router.post("/initialize", response_model=InitResult)
async def initialize(
    service: TicketService = Depends(get_ticket_service)
):
    """
    Dashboard load / "Retry Connection": connect, prepare storage, list tickets
    """
    return await service.retry_connection()


@router.get("/{ticket_id}", response_model=Ticket)
async def get_ticket(
    ticket_id: str,
    service: TicketService = Depends(get_ticket_service)
):
    """
    Get ticket details
    """
    ticket = await service.get_ticket(ticket_id)
    if ticket is None:
        raise TicketNotFoundException(ticket_id)
    return ticket


@router.patch("/{ticket_id}", response_model=Ticket)
async def update_ticket(
    ticket_id: str,
    updates: TicketUpdate,
    service: TicketService = Depends(get_ticket_service)
):
    """
    Update status, assignment or triage fields
    """
    return await service.update_ticket(ticket_id, updates)


@router.post("/{ticket_id}/assign", response_model=Ticket)
async def assign_to_me(
    ticket_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    service: TicketService = Depends(get_ticket_service)
):
    """
    Assign the ticket to the calling agent and move it to in_progress
    """
    return await service.update_ticket(
        ticket_id,
        TicketUpdate(agent_id=user.id, status=TicketStatus.IN_PROGRESS)
    )


@router.post("/{ticket_id}/complete", response_model=Ticket)
async def complete_ticket(
    ticket_id: str,
    service: TicketService = Depends(get_ticket_service)
):
    """
    Mark a resolved ticket as completed
    """
    return await service.complete_ticket(ticket_id)
