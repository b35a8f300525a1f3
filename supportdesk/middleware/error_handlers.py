"""
Exception handlers - map service exceptions to HTTP responses
"""
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from supportdesk.exceptions import (
    AttachmentValidationException,
    BackendUnavailableException,
    RepositoryException,
    StorageException,
    SupportDeskError,
    TicketNotFoundException,
)
from supportdesk.utils.logger import get_logger

logger = get_logger(__name__)

# Most specific first
STATUS_BY_EXCEPTION = (
    (TicketNotFoundException, status.HTTP_404_NOT_FOUND),
    (AttachmentValidationException, status.HTTP_400_BAD_REQUEST),
    (BackendUnavailableException, status.HTTP_503_SERVICE_UNAVAILABLE),
    (RepositoryException, status.HTTP_502_BAD_GATEWAY),
    (StorageException, status.HTTP_502_BAD_GATEWAY),
)


def status_for(exc: SupportDeskError) -> int:
    for exc_type, code in STATUS_BY_EXCEPTION:
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_400_BAD_REQUEST


async def supportdesk_exception_handler(request: Request, exc: SupportDeskError) -> JSONResponse:
    code = status_for(exc)
    log = logger.error if code >= 500 else logger.warning
    log(f"{request.method} {request.url.path} -> {code}: {exc.message}")

    return JSONResponse(
        status_code=code,
        content={"detail": exc.message, "details": exc.details}
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SupportDeskError, supportdesk_exception_handler)
