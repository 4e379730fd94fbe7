"""Infrastructure layer implementations."""

from invoiceflow.infrastructure import storage

__all__ = ["storage"]
