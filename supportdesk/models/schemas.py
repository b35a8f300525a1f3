"""
Pydantic models for SupportDesk

Ticket rows mirror the Supabase `tickets` table. AIAnalysis is transient:
it is produced per triage call and copied onto the ticket being created.
"""
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, List

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ============================================================================
# Enums
# ============================================================================

class Priority(str, Enum):
    """Valid ticket priorities"""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class TicketStatus(str, Enum):
    """Valid ticket statuses (any state may follow any other)"""
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    COMPLETED = "completed"


class Channel(str, Enum):
    """Channel a ticket arrived through"""
    EMAIL = "email"
    WEB = "web"
    SOCIAL = "social"
    VOICE = "voice"


class Category:
    """Known triage categories. Ticket.category itself is a free string."""
    BILLING = "billing"
    TECHNICAL = "technical"
    SERVICE = "service"
    GENERAL = "general"


class AgentState(str, Enum):
    """Presence derived from last sign-in"""
    ONLINE = "online"
    AWAY = "away"
    OFFLINE = "offline"


# ============================================================================
# Database Models (matching Supabase tables)
# ============================================================================

class FileAttachment(BaseModel):
    """
    File stored in the attachments bucket.

    Attributes:
        name: Original file name
        path: Storage path inside the bucket
        type: MIME type
        size: Size in bytes
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    path: str = Field(..., min_length=1)
    type: str
    size: int = Field(..., ge=0)


class TicketBase(BaseModel):
    """Fields shared by stored tickets and create payloads"""
    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    priority: Priority = Priority.MEDIUM
    status: TicketStatus = TicketStatus.OPEN
    category: str = Category.GENERAL
    user_id: str = Field(..., min_length=1)
    agent_id: Optional[str] = None
    channel: Channel = Channel.WEB
    sentiment_score: Optional[float] = None
    satisfaction_score: Optional[float] = None
    attachments: Optional[List[FileAttachment]] = None
    ai_summary: Optional[str] = None
    ai_category: Optional[str] = None
    response_time: Optional[float] = None


class TicketCreate(TicketBase):
    """Payload for creating a ticket; id and timestamps are assigned on insert"""


class Ticket(TicketBase):
    """
    Ticket model matching the `tickets` table in Supabase.

    Invariant: updated_at >= created_at.
    """
    model_config = ConfigDict(from_attributes=True, use_enum_values=False)

    id: str
    created_at: datetime
    updated_at: datetime

    @model_validator(mode="after")
    def validate_timestamps(self) -> "Ticket":
        if self.updated_at < self.created_at:
            raise ValueError("updated_at must not be earlier than created_at")
        return self


class TicketUpdate(BaseModel):
    """
    Partial update. Only explicitly set fields are written.

    Status transitions are not constrained; agents may set any status.
    """
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    priority: Optional[Priority] = None
    status: Optional[TicketStatus] = None
    category: Optional[str] = None
    agent_id: Optional[str] = None
    sentiment_score: Optional[float] = None
    satisfaction_score: Optional[float] = None
    attachments: Optional[List[FileAttachment]] = None
    ai_summary: Optional[str] = None
    ai_category: Optional[str] = None
    response_time: Optional[float] = None


# ============================================================================
# API / Service Models
# ============================================================================

class AIAnalysis(BaseModel):
    """Result of a single triage call"""
    category: str = Category.GENERAL
    priority: Priority = Priority.MEDIUM
    sentiment: float = 0.0
    suggested_response: Optional[str] = None


class AnalyzeRequest(BaseModel):
    """Request model for triage-only analysis"""
    text: str = Field(..., min_length=1)


class ChatRequest(BaseModel):
    """Message typed into the support assistant"""
    message: str = Field(..., min_length=1, max_length=10000)


class VoiceRequest(BaseModel):
    """Voice intake; transcription is optional until speech-to-text exists"""
    transcription: Optional[str] = None


class ChatReply(BaseModel):
    """Assistant reply plus the ticket it opened"""
    reply: str
    priority: Priority
    ticket: Ticket


class ConnectionStatus(BaseModel):
    """Snapshot of the process-wide connection state"""
    connected: bool
    last_check: Optional[datetime] = None
    check_in_flight: bool = False


class InitResult(BaseModel):
    """Outcome of service initialization (dashboard load / retry)"""
    connected: bool
    tickets: List[Ticket] = Field(default_factory=list)
    model_loaded: bool = False
    error: Optional[str] = None


class TicketStats(BaseModel):
    """Dashboard counters"""
    total: int = 0
    open: int = 0
    in_progress: int = 0
    resolved: int = 0
    resolved_today: int = 0
    active_agents: int = 0
    priority_trend: List[Dict[str, int | str]] = Field(default_factory=list)


class AgentPresence(BaseModel):
    """Agent with presence and today's resolved tickets"""
    id: str
    email: str
    last_seen: Optional[datetime] = None
    status: AgentState = AgentState.OFFLINE
    resolved_tickets: List[Ticket] = Field(default_factory=list)
