"""Core domain layer - entities, interfaces, and exceptions."""

from invoiceflow.core import entities, exceptions, interfaces

__all__ = ["entities", "interfaces", "exceptions"]
