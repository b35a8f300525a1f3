"""
SupportDesk - FastAPI Backend
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from supportdesk import __version__
from supportdesk.config import get_settings
from supportdesk.middleware import LoggingMiddleware, register_exception_handlers
from supportdesk.repositories.ticket_repository import TicketRepository
from supportdesk.routes import attachments, dashboard, health, intake, tickets
from supportdesk.services.connection import ConnectionGuard, ConnectionState
from supportdesk.services.dashboard import AgentDirectory
from supportdesk.services.embedding_cache import load_embedding_provider
from supportdesk.services.storage import AttachmentStorage
from supportdesk.services.supabase_client import get_supabase_client
from supportdesk.services.ticket_service import TicketService
from supportdesk.services.triage import TriageEngine
from supportdesk.utils.logger import get_logger

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    STARTUP:
    1. Supabase client and the process-wide connection state
    2. Repository, storage, triage (model load failures leave triage on defaults)
    3. Initial connect / bucket / ticket load (errors logged, startup continues)
    """
    client = get_supabase_client()
    guard = ConnectionGuard(
        client,
        ConnectionState(),
        check_interval=settings.connection_check_interval_seconds,
        probe_table=settings.tickets_table,
        probe_timeout=settings.health_probe_timeout_seconds
    )
    storage = AttachmentStorage(
        client,
        bucket=settings.attachments_bucket,
        max_bytes=settings.max_attachment_bytes,
        signed_url_ttl=settings.signed_url_ttl_seconds
    )
    repository = TicketRepository(client, guard, table_name=settings.tickets_table)
    provider = await load_embedding_provider(
        settings.embedding_model, enabled=settings.embedding_enabled
    )
    service = TicketService(repository, TriageEngine(provider), storage, guard)

    app.state.supabase = client
    app.state.connection_guard = guard
    app.state.ticket_service = service
    app.state.agent_directory = AgentDirectory(client, profiles_table=settings.profiles_table)

    result = await service.initialize()
    if result.error:
        logger.warning(f"Started without backend: {result.error}")
    else:
        logger.info(f"SupportDesk started with {len(result.tickets)} tickets")

    yield

    logger.info("SupportDesk shutting down")


app = FastAPI(
    title="SupportDesk",
    description="Customer-support ticketing API with ticket triage",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.is_development else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(LoggingMiddleware)
register_exception_handlers(app)

app.include_router(health.router)
app.include_router(tickets.router)
app.include_router(intake.router)
app.include_router(attachments.router)
app.include_router(dashboard.router)


@app.get("/")
async def root():
    return {"message": "SupportDesk API", "version": __version__}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.fastapi_host, port=settings.fastapi_port)
