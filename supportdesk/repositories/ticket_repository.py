"""
Ticket Repository for CRUD operations on the tickets table

Features:
- Every call is gated by the Connection Guard
- Create/update stamp created_at/updated_at
- Listing newest first
- Data errors are logged and re-raised; there is no safe default for a
  lost write
"""
import asyncio
from datetime import datetime, timezone
from typing import Callable, List, Optional

from supportdesk.exceptions import (
    BackendUnavailableException,
    RepositoryException,
    TicketNotFoundException,
)
from supportdesk.models.schemas import Ticket, TicketCreate, TicketStatus, TicketUpdate
from supportdesk.services.connection import ConnectionGuard
from supportdesk.utils.logger import get_logger

logger = get_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TicketRepository:
    """Repository for tickets table operations"""

    def __init__(
        self,
        client,
        guard: ConnectionGuard,
        table_name: str = "tickets",
        now: Callable[[], datetime] = utc_now
    ):
        """
        Initialize repository with Supabase client

        Args:
            client: Supabase client instance
            guard: Connection guard consulted before each operation
            table_name: Tickets table
            now: Timestamp source
        """
        self.client = client
        self.guard = guard
        self.table_name = table_name
        self._now = now
        logger.info(f"TicketRepository initialized for table: {self.table_name}")

    async def _require_connection(self) -> None:
        if not await self.guard.ensure_connection():
            raise BackendUnavailableException("Backend is not reachable")

    async def _execute(self, query, operation: str):
        try:
            return await asyncio.to_thread(query.execute)
        except Exception as e:
            logger.error(f"Error {operation}: {e}")
            raise RepositoryException(f"Failed {operation}: {e}") from e

    async def create(self, ticket: TicketCreate) -> Ticket:
        """
        Insert a new ticket

        Args:
            ticket: Ticket fields supplied by the caller

        Returns:
            Stored Ticket (with server-assigned id)
        """
        await self._require_connection()

        timestamp = self._now().isoformat()
        data = ticket.model_dump(mode="json", exclude_none=True)
        data["created_at"] = timestamp
        data["updated_at"] = timestamp

        response = await self._execute(
            self.client.table(self.table_name).insert(data),
            "creating ticket"
        )
        if not response.data:
            logger.error("Insert returned no ticket row")
            raise RepositoryException("Failed to create ticket")

        result = Ticket(**response.data[0])
        logger.info(f"Created ticket: {result.id}")
        return result

    async def update(self, ticket_id: str, updates: TicketUpdate) -> Ticket:
        """
        Apply a partial update

        Args:
            ticket_id: Ticket id
            updates: Fields to change (unset fields are left alone)

        Returns:
            Updated Ticket

        Raises:
            TicketNotFoundException: No row matched the id
        """
        await self._require_connection()

        data = updates.model_dump(mode="json", exclude_unset=True)
        data["updated_at"] = self._now().isoformat()

        response = await self._execute(
            self.client.table(self.table_name).update(data).eq("id", ticket_id),
            f"updating ticket {ticket_id}"
        )
        if not response.data:
            raise TicketNotFoundException(ticket_id)

        logger.info(f"Updated ticket {ticket_id}: {sorted(data)}")
        return Ticket(**response.data[0])

    async def get_by_id(self, ticket_id: str) -> Optional[Ticket]:
        """Ticket by id, or None"""
        await self._require_connection()

        response = await self._execute(
            self.client.table(self.table_name).select("*").eq("id", ticket_id),
            f"fetching ticket {ticket_id}"
        )
        if not response.data:
            return None
        return Ticket(**response.data[0])

    async def list_tickets(
        self,
        status: Optional[TicketStatus] = None,
        limit: Optional[int] = None
    ) -> List[Ticket]:
        """
        Tickets newest first

        Args:
            status: Optional status filter
            limit: Optional maximum number of rows
        """
        await self._require_connection()

        query = self.client.table(self.table_name).select("*")
        if status:
            query = query.eq("status", TicketStatus(status).value)
        query = query.order("created_at", desc=True)
        if limit:
            query = query.limit(limit)

        response = await self._execute(query, "fetching tickets")
        return [Ticket(**row) for row in response.data or []]

    async def list_resolved(self) -> List[Ticket]:
        """Resolved tickets, most recently updated first"""
        await self._require_connection()

        query = self.client.table(self.table_name)\
            .select("*")\
            .eq("status", TicketStatus.RESOLVED.value)\
            .order("updated_at", desc=True)

        response = await self._execute(query, "fetching resolved tickets")
        return [Ticket(**row) for row in response.data or []]
