"""Dependency injection for FastAPI."""

from fastapi import Depends, Request

from networth.app_context import AppContext
from networth.services import HoldingService, QuoteCache


def get_context(request: Request) -> AppContext:
    """Provide the AppContext built at startup."""
    return request.app.state.context


def get_holding_service(context: AppContext = Depends(get_context)) -> HoldingService:
    """Provide HoldingService instance."""
    return context.holdings


def get_quote_cache(context: AppContext = Depends(get_context)) -> QuoteCache:
    """Provide QuoteCache instance."""
    return context.quote_cache
