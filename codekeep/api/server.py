"""FastAPI application factory for the CodeKeep service."""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from ..exception_handler import setup_logging
from .route import router
from .service import ApiSettings
from ..mcpserver import mcp


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = [
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg')}"
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "; ".join(messages) or "Invalid request"},
    )


def create_app(settings: ApiSettings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = settings or ApiSettings.from_env()
    setup_logging(settings.log_level)

    # setup mcp
    mcp_app = mcp.http_app("/")

    app = FastAPI(
        title="CodeKeep API",
        version="0.1.0",
        lifespan=mcp_app.lifespan,
    )
    app.state.settings = settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.include_router(router)

    @app.get("/", response_class=PlainTextResponse, include_in_schema=False)
    async def root() -> str:
        return "CodeKeep API is running..."

    # mount mcp
    app.mount("/mcp", mcp_app)

    return app


def run() -> None:
    """Serve the application with uvicorn using the environment settings."""
    import uvicorn

    settings = ApiSettings.from_env()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


app = create_app()


__all__ = ["app", "create_app", "run"]
