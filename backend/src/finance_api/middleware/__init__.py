"""Middleware package."""

from finance_api.middleware.error_handler import (
    finance_api_exception_handler,
    generic_exception_handler,
    http_exception_handler,
    sqlalchemy_exception_handler,
    validation_exception_handler,
)

__all__ = [
    "finance_api_exception_handler",
    "generic_exception_handler",
    "http_exception_handler",
    "sqlalchemy_exception_handler",
    "validation_exception_handler",
]
