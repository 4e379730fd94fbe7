"""API middleware."""

from invoiceflow.api.middleware.error_handler import ErrorHandlerMiddleware
from invoiceflow.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware", "ErrorHandlerMiddleware"]
