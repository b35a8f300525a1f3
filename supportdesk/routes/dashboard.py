"""
Dashboard routes - counters, priority trend, agent presence
"""
from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends

from supportdesk.dependencies import get_agent_directory, get_ticket_service
from supportdesk.models.schemas import AgentPresence, TicketStats
from supportdesk.services.dashboard import AgentDirectory, compute_stats
from supportdesk.services.ticket_service import TicketService
from supportdesk.utils.auth import get_current_user

router = APIRouter(
    prefix="/api/dashboard",
    tags=["dashboard"],
    dependencies=[Depends(get_current_user)]
)


@router.get("/stats", response_model=TicketStats)
async def ticket_stats(
    service: TicketService = Depends(get_ticket_service),
    directory: AgentDirectory = Depends(get_agent_directory)
):
    now = datetime.now(timezone.utc)
    tickets = await service.fetch_tickets()
    active = await directory.count_active(now)
    return compute_stats(tickets, now, active_agents=active)


@router.get("/agents", response_model=List[AgentPresence])
async def active_agents(
    service: TicketService = Depends(get_ticket_service),
    directory: AgentDirectory = Depends(get_agent_directory)
):
    resolved = await service.repository.list_resolved()
    return await directory.list_agents(resolved, datetime.now(timezone.utc))
