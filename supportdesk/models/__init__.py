"""
Pydantic models for SupportDesk
"""

from supportdesk.models.schemas import (
    # Enums
    Priority,
    TicketStatus,
    Channel,
    Category,
    AgentState,

    # Database Models
    FileAttachment,
    Ticket,
    TicketCreate,
    TicketUpdate,

    # API Models
    AIAnalysis,
    AnalyzeRequest,
    ChatRequest,
    VoiceRequest,
    ChatReply,
    ConnectionStatus,
    InitResult,
    TicketStats,
    AgentPresence,
)

__all__ = [
    # Enums
    "Priority",
    "TicketStatus",
    "Channel",
    "Category",
    "AgentState",

    # Database Models
    "FileAttachment",
    "Ticket",
    "TicketCreate",
    "TicketUpdate",

    # API Models
    "AIAnalysis",
    "AnalyzeRequest",
    "ChatRequest",
    "VoiceRequest",
    "ChatReply",
    "ConnectionStatus",
    "InitResult",
    "TicketStats",
    "AgentPresence",
]
