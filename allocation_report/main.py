"""FastAPI application entrypoint."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from allocation_report.api.router import api_router
from allocation_report.core.config import get_settings

logger = logging.getLogger(__name__)

JSON_CONTEXT_RADIUS = 50
JSON_ERROR_HINT = "Check for trailing commas, unquoted keys, or invalid characters"


def json_error_context(document: str, position: int, radius: int = JSON_CONTEXT_RADIUS) -> str:
    """Excerpt of ``document`` around ``position`` with a caret under it."""

    start = max(0, position - radius)
    end = min(len(document), position + radius)
    return f"...{document[start:end]}...\n{' ' * (position - start + 3)}^"


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    json_errors = [error for error in exc.errors() if error.get("type") == "json_invalid"]
    if not json_errors:
        return await request_validation_exception_handler(request, exc)

    error = json_errors[0]
    message = (error.get("ctx") or {}).get("error") or error.get("msg", "JSON decode error")
    location = error.get("loc") or ()
    position = location[-1] if location and isinstance(location[-1], int) else None
    if position is not None and isinstance(exc.body, str):
        logger.warning(
            "JSON parse error at position %d: %s\n%s",
            position,
            message,
            json_error_context(exc.body, position),
        )
    else:
        logger.warning("JSON parse error: %s", message)

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Invalid JSON in request body",
            "details": message if position is None else f"{message} (position {position})",
            "hint": JSON_ERROR_HINT,
        },
    )


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        openapi_url=f"{settings.api_prefix}/openapi.json",
        docs_url=f"{settings.api_prefix}/docs",
        redoc_url=f"{settings.api_prefix}/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/", tags=["system"])
    def root() -> dict[str, str]:
        return {"service": settings.app_name, "status": "running"}

    return app


app = create_app()
