"""Public API routers exposed by the FastAPI application."""

from . import (
    class_templates,
    clients,
    dashboard,
    health,
    invoices,
    time_entries,
    user_profile,
)

__all__ = [
    "class_templates",
    "clients",
    "dashboard",
    "health",
    "invoices",
    "time_entries",
    "user_profile",
]
