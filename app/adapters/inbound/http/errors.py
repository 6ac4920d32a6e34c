"""Translate timeline errors into HTTP responses."""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from app.domain.errors import TimelineError
from app.infrastructure.logging.logger import log_event

ERROR_STATUS = {
    "permission_denied": status.HTTP_403_FORBIDDEN,
    "lead_closed": status.HTTP_403_FORBIDDEN,
    "not_found": status.HTTP_404_NOT_FOUND,
    "already_completed": status.HTTP_409_CONFLICT,
    "already_initialized": status.HTTP_409_CONFLICT,
    "invalid_transition": status.HTTP_409_CONFLICT,
    "duplicate_order_index": status.HTTP_409_CONFLICT,
    "conflict": status.HTTP_409_CONFLICT,
    "remarks_required": status.HTTP_400_BAD_REQUEST,
    "attachments_not_allowed": status.HTTP_400_BAD_REQUEST,
    "validation_failed": status.HTTP_400_BAD_REQUEST,
    "timeout": status.HTTP_504_GATEWAY_TIMEOUT,
}


async def timeline_error_handler(request: Request, exc: TimelineError) -> JSONResponse:
    """Render a timeline error as {"error": {...}} with the mapped status."""
    status_code = ERROR_STATUS.get(exc.code, status.HTTP_500_INTERNAL_SERVER_ERROR)
    log_event(
        "http",
        "request_failed",
        method=request.method,
        path=request.url.path,
        code=exc.code,
        status_code=status_code,
    )
    return JSONResponse(status_code=status_code, content={"error": exc.to_dict()})


def register_error_handlers(app: FastAPI) -> None:
    """Install the timeline error handler on an application."""
    app.add_exception_handler(TimelineError, timeline_error_handler)
