# services/market_service.py
"""
Operations that combine the store with the live fetchers.

Routes call these functions instead of talking to the fetchers directly, so
the provider fallback and the store writes stay in one place. Every function
takes its collaborators as arguments; nothing here holds module state.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from database.memory_store import MarketStore
from helper_functions import build_regular_stock
from services.featured_policy import FeaturedPolicy
from services.news_fetcher import NewsFetcher
from services.quote_fetcher import QuoteFetcher
from services.stock_generator import FALLBACK_MARKET_DATA
from shared.contracts import DataStatus, MarketData, PreferredStock, TickerLookupResult

logger = logging.getLogger(__name__)


def overlay_live_quotes(store: MarketStore, quote_fetcher: QuoteFetcher, tickers: Iterable[str]) -> int:
    """
    Writes live price fields onto stored stocks. A ticker that is not stored,
    has no quote, or fails for any reason keeps its current values.

    Returns:
        The number of stocks that received a live quote.
    """
    overlaid = 0
    for ticker in tickers:
        if store.get_stock(ticker) is None:
            continue
        try:
            quote = quote_fetcher.fetch_quote(ticker)
            if quote is None:
                continue
            if store.update_stock(ticker, quote.as_stock_fields()) is not None:
                overlaid += 1
        except Exception as e:
            logger.warning(f"Live quote overlay failed for {ticker}: {e}")
    return overlaid


def get_featured_stocks(
    store: MarketStore,
    quote_fetcher: QuoteFetcher,
    policy: FeaturedPolicy,
    live_tickers: Iterable[str] = (),
) -> List[PreferredStock]:
    overlay_live_quotes(store, quote_fetcher, live_tickers)
    return store.featured_stocks(policy)


def update_stock_with_live_quote(
    store: MarketStore,
    quote_fetcher: QuoteFetcher,
    ticker: str,
    fields: Dict[str, Any],
) -> Optional[PreferredStock]:
    """
    Applies a partial update to a stored stock, refreshing its price from a
    live quote first. Fields in the patch always win over quoted ones.

    Returns:
        The updated stock, or None if the ticker is not stored (no fetch is made).

    Raises:
        pydantic.ValidationError: If the merged record is invalid.
    """
    if store.get_stock(ticker) is None:
        return None

    merged: Dict[str, Any] = {}
    try:
        quote = quote_fetcher.fetch_quote(ticker)
        if quote is not None:
            merged.update(quote.as_stock_fields())
    except Exception as e:
        logger.warning(f"Live quote lookup failed during update of {ticker}: {e}")
    merged.update(fields)
    return store.update_stock(ticker, merged)


def lookup_ticker(store: MarketStore, quote_fetcher: QuoteFetcher, ticker: str) -> Optional[TickerLookupResult]:
    """
    Resolves a ticker to a stored preferred stock, or failing that to a live
    quote for a regular stock.
    """
    symbol = ticker.strip().upper()
    stock = store.get_stock(symbol)
    if stock is not None:
        return TickerLookupResult(type="preferred", data=stock, dataStatus=DataStatus(status="stored"))

    quote = quote_fetcher.fetch_quote(symbol)
    if quote is None:
        return None
    return TickerLookupResult(
        type="regular",
        data=build_regular_stock(symbol, quote),
        dataStatus=DataStatus(status="live", provider=quote.provider),
    )


def refresh_news(
    store: MarketStore,
    news_fetcher: NewsFetcher,
    symbols: Iterable[str],
    lookback_days: int = 30,
) -> int:
    """
    Replaces the stored news with a fresh fetch. An empty fetch still
    replaces the collection.

    Returns:
        The number of stored articles after the refresh.
    """
    articles = news_fetcher.fetch_multiple_company_news(symbols, lookback_days=lookback_days)
    if not articles:
        logger.warning("News refresh returned no articles; news collection is now empty.")
    count = store.replace_articles(articles)
    logger.info(f"News refresh stored {count} articles.")
    return count


def refresh_market_snapshot(store: MarketStore, quote_fetcher: QuoteFetcher) -> Tuple[MarketData, DataStatus]:
    """
    Recomputes the market snapshot from live index quotes and stores it.

    The preferred average yield is the mean over the stored stocks. Its change
    is the last move of that mean: the difference from the previous snapshot
    when the mean moved, otherwise the previous snapshot's change.
    """
    snapshot, status = quote_fetcher.fetch_market_snapshot()

    avg_yield = store.average_dividend_yield()
    if avg_yield is None:
        avg_yield = FALLBACK_MARKET_DATA["preferredAvgYield"]
    avg_yield = round(avg_yield, 2)
    previous = store.get_market_data()
    if previous is None:
        yield_change = 0.0
    elif avg_yield == previous.preferredAvgYield:
        yield_change = previous.preferredAvgYieldChange
    else:
        yield_change = round(avg_yield - previous.preferredAvgYield, 2)

    snapshot = snapshot.model_copy(update={
        "preferredAvgYield": avg_yield,
        "preferredAvgYieldChange": yield_change,
    })
    stored = store.set_market_data(snapshot, status=status)
    return stored, status
