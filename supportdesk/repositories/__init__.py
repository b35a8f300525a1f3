"""
Repositories package for database operations

Provides repository classes for CRUD operations on:
- tickets table (TicketRepository)
"""
from supportdesk.repositories.ticket_repository import TicketRepository

__all__ = [
    "TicketRepository",
]
