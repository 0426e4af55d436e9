"""Quote endpoints: cached reads and on-demand refreshes."""

from fastapi import APIRouter, Depends, Query

from networth.api.deps import get_context, get_holding_service, get_quote_cache
from networth.api.schemas.valuation import FxRateResponse, QuoteResponse, RefreshResponse
from networth.app_context import AppContext
from networth.domain.models import Market
from networth.services import HoldingService, QuoteCache

router = APIRouter(prefix="/quotes", tags=["quotes"])


def _fx_response(context: AppContext) -> FxRateResponse:
    return FxRateResponse(
        symbol=context.settings.fx_symbol,
        rate=context.quote_cache.current_fx_rate(),
        as_of=context.quote_cache.fx_as_of,
    )


@router.get("/fx", response_model=FxRateResponse)
def get_fx_rate(context: AppContext = Depends(get_context)):
    """Last fetched USD -> TWD rate; rate is null until the first fetch succeeds."""
    return _fx_response(context)


@router.post("/fx/refresh", response_model=FxRateResponse)
async def refresh_fx_rate(context: AppContext = Depends(get_context)):
    await context.quote_cache.refresh_fx_rate()
    return _fx_response(context)


@router.post("/refresh", response_model=RefreshResponse)
async def refresh_quotes(service: HoldingService = Depends(get_holding_service)):
    """Refresh quotes for every equity holding and wait for the result."""
    refreshed = await service.refresh_quotes()
    return RefreshResponse(refreshed=sorted(refreshed))


@router.get("/{symbol}", response_model=QuoteResponse)
def get_quote(
    symbol: str,
    market: Market = Query(Market.TW),
    quote_cache: QuoteCache = Depends(get_quote_cache),
):
    """Cached price for a symbol. Never triggers a fetch."""
    key = QuoteCache.qualify_symbol(symbol, market)
    quote = quote_cache.quote(key)
    if quote is None:
        return QuoteResponse(symbol=key, market=market)
    return QuoteResponse(symbol=key, market=market, price=quote.price, as_of=quote.as_of)
