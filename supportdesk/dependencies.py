"""
FastAPI dependencies

Application-scoped objects are built once in the lifespan handler and kept
on app.state; routes reach them through these providers so tests can
override them.
"""
from fastapi import Request

from supportdesk.services.connection import ConnectionGuard
from supportdesk.services.dashboard import AgentDirectory
from supportdesk.services.ticket_service import TicketService


def get_supabase(request: Request):
    return request.app.state.supabase


def get_connection_guard(request: Request) -> ConnectionGuard:
    return request.app.state.connection_guard


def get_ticket_service(request: Request) -> TicketService:
    return request.app.state.ticket_service


def get_agent_directory(request: Request) -> AgentDirectory:
    return request.app.state.agent_directory
