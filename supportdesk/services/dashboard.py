"""
Dashboard aggregates

- Ticket counters and a 7-day priority trend (computed from a ticket list)
- Agent presence from profiles + last sign-in, with today's resolved tickets
"""
import asyncio
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

from supportdesk.exceptions import RepositoryException
from supportdesk.models.schemas import (
    AgentPresence,
    AgentState,
    Priority,
    Ticket,
    TicketStats,
    TicketStatus,
)
from supportdesk.utils.logger import get_logger

logger = get_logger(__name__)

TREND_DAYS = 7
ONLINE_MINUTES = 5
AWAY_MINUTES = 30


def _same_day(a: datetime, b: datetime) -> bool:
    if a.tzinfo and b.tzinfo:
        a = a.astimezone(b.tzinfo)
    return a.date() == b.date()


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def compute_stats(
    tickets: Iterable[Ticket],
    now: datetime,
    active_agents: int = 0
) -> TicketStats:
    """
    Counters by status plus tickets created per priority over the last 7 days.

    The trend is oldest day first, each entry labelled with the weekday
    abbreviation ("Mon", "Tue", ...). active_agents is the number of agents
    not offline, counted by the caller from AgentDirectory.
    """
    tickets = list(tickets)
    stats = TicketStats(total=len(tickets), active_agents=active_agents)

    trend: List[Dict[str, Any]] = []
    for offset in range(TREND_DAYS - 1, -1, -1):
        day = now - timedelta(days=offset)
        trend.append({"day": day.strftime("%a"), **{p.value: 0 for p in Priority}})

    for ticket in tickets:
        if ticket.status == TicketStatus.OPEN:
            stats.open += 1
        elif ticket.status == TicketStatus.IN_PROGRESS:
            stats.in_progress += 1
        elif ticket.status == TicketStatus.RESOLVED:
            stats.resolved += 1
            if _same_day(ticket.updated_at, now):
                stats.resolved_today += 1

        day_index = (now - ticket.created_at) // timedelta(days=1)
        if 0 <= day_index < TREND_DAYS:
            trend[TREND_DAYS - 1 - day_index][Priority(ticket.priority).value] += 1

    stats.priority_trend = trend
    return stats


def agent_status(last_seen: Optional[datetime], now: datetime) -> AgentState:
    """online under 5 minutes, away under 30, otherwise offline"""
    if last_seen is None:
        return AgentState.OFFLINE

    minutes = (now - last_seen) // timedelta(minutes=1)
    if minutes < ONLINE_MINUTES:
        return AgentState.ONLINE
    if minutes < AWAY_MINUTES:
        return AgentState.AWAY
    return AgentState.OFFLINE


class AgentDirectory:
    """Agents from the profiles table joined to auth users"""

    def __init__(self, client, profiles_table: str = "profiles"):
        self.client = client
        self.profiles_table = profiles_table

    async def fetch_agent_profiles(self) -> List[Dict[str, Any]]:
        query = self.client.table(self.profiles_table)\
            .select("id, user_id, role, users:user_id (email, last_sign_in_at)")\
            .eq("role", "agent")
        try:
            response = await asyncio.to_thread(query.execute)
        except Exception as e:
            logger.error(f"Error fetching agents: {e}")
            raise RepositoryException(f"Failed fetching agents: {e}") from e
        return response.data or []

    async def list_agents(
        self,
        resolved_tickets: Iterable[Ticket],
        now: datetime
    ) -> List[AgentPresence]:
        """
        Agent presence with tickets each agent resolved today

        Profiles without a joined user row are skipped.
        """
        resolved_tickets = list(resolved_tickets)
        agents = []

        for profile in await self.fetch_agent_profiles():
            user = profile.get("users")
            if not user:
                continue

            agent_id = profile["user_id"]
            last_seen = _parse_timestamp(user.get("last_sign_in_at"))
            agents.append(AgentPresence(
                id=agent_id,
                email=user.get("email", ""),
                last_seen=last_seen,
                status=agent_status(last_seen, now),
                resolved_tickets=[
                    t for t in resolved_tickets
                    if t.agent_id == agent_id and _same_day(t.updated_at, now)
                ]
            ))

        return agents

    async def count_active(self, now: datetime) -> int:
        """Agents that are online or away"""
        agents = await self.list_agents([], now)
        return sum(1 for a in agents if a.status != AgentState.OFFLINE)
