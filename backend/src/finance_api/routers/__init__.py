"""API routers package."""

from finance_api.routers import backup

__all__ = [
    "backup",
]
