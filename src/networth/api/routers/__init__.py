"""API routers package."""

from networth.api.routers.holdings import router as holdings_router
from networth.api.routers.valuation import router as valuation_router
from networth.api.routers.quotes import router as quotes_router
from networth.api.routers.history import router as history_router
from networth.api.routers.transfer import router as transfer_router

__all__ = [
    "holdings_router",
    "valuation_router",
    "quotes_router",
    "history_router",
    "transfer_router",
]
