"""Entrypoint for the FastAPI application."""

import os
from dotenv import load_dotenv

# Load .env locally only; deployments inject env vars
env_path = os.path.join(os.path.dirname(__file__), "../.env")
if os.path.exists(env_path):
    load_dotenv(dotenv_path=os.path.abspath(env_path))

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import (
    class_templates,
    clients,
    dashboard,
    health,
    invoices,
    time_entries,
    user_profile,
)
from .core.errors import SessionbookError, handle_sessionbook_error
from .core.logging import configure_logging
from .core.middleware import RequestContextMiddleware, SecurityHeadersMiddleware


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="Sessionbook", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestContextMiddleware)
    app.add_exception_handler(SessionbookError, handle_sessionbook_error)

    app.include_router(health.router, prefix="/api")
    app.include_router(user_profile.router, prefix="/api")
    app.include_router(clients.router, prefix="/api")
    app.include_router(time_entries.router, prefix="/api")
    app.include_router(class_templates.router, prefix="/api")
    app.include_router(invoices.router, prefix="/api")
    app.include_router(dashboard.router, prefix="/api")

    return app


app = create_app()
