"""
Where: services/orchestrator/exceptions.py
What: Orchestrator exception handler registration.
Why: Keep error handling setup isolated from route and lifecycle concerns.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.exceptions import (
    STATUS_BY_KIND,
    OrchestrationError,
    classify_error,
    error_envelope,
    global_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)


async def orchestration_error_handler(request: Request, exc: OrchestrationError):
    kind = classify_error(exc)
    return JSONResponse(
        status_code=STATUS_BY_KIND[kind],
        content=error_envelope(kind, str(exc)),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(Exception, global_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(OrchestrationError, orchestration_error_handler)
