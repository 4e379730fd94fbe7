"""API route modules."""

from invoiceflow.api.routes.health import router as health_router
from invoiceflow.api.routes.invoices import router as invoices_router
from invoiceflow.api.routes.owners import router as owners_router
from invoiceflow.api.routes.settlements import router as settlements_router

__all__ = [
    "health_router",
    "owners_router",
    "invoices_router",
    "settlements_router",
]
