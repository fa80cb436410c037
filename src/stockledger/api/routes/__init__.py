"""API route modules."""

from stockledger.api.routes.health import router as health_router
from stockledger.api.routes.inventory import router as inventory_router
from stockledger.api.routes.reorder_requests import router as reorder_requests_router

__all__ = [
    "health_router",
    "inventory_router",
    "reorder_requests_router",
]
