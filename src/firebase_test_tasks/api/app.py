from __future__ import annotations

from typing import Any, Callable

from fastapi import FastAPI

from firebase_test_tasks.api.dependencies import create_default_connection
from firebase_test_tasks.api.errors import install_exception_handlers
from firebase_test_tasks.api.routes import api_router


def create_app(
    *,
    connection: Any | None = None,
    connection_factory: Callable[[], Any] | None = None,
) -> FastAPI:
    app = FastAPI(
        title="firebase_test_tasks Task API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    install_exception_handlers(app)

    app.state.connection = connection
    app.state.connection_factory = connection_factory or create_default_connection

    app.include_router(api_router, prefix="/api/v1")
    return app
