"""Service layer - business logic orchestration."""

from networth.services.quote_cache import QuoteCache
from networth.services.valuation_engine import ValuationEngine
from networth.services.history_tracker import HistoryTracker
from networth.services.holding_service import HoldingService, HoldingCreate, HoldingUpdate

__all__ = [
    "QuoteCache",
    "ValuationEngine",
    "HistoryTracker",
    "HoldingService",
    "HoldingCreate",
    "HoldingUpdate",
]
