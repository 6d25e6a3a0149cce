# services/quote_fetcher.py
"""
Live quotes with provider fallback.

Finnhub is asked first; Alpha Vantage only if Finnhub produced nothing usable.
Both provider modules already swallow transport errors and return None, so a
failed quote here is always a plain None, never an exception.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from pydantic import ValidationError

from providers import alpha_vantage_provider, finnhub_provider
from services.stock_generator import FALLBACK_MARKET_DATA
from shared.contracts import DataStatus, MarketDataCreate, Quote

logger = logging.getLogger(__name__)

FINNHUB = "finnhub"
ALPHA_VANTAGE = "alpha_vantage"

# snapshot field -> index symbol
INDEX_SYMBOLS: Dict[str, str] = {
    "sp500": "^GSPC",
    "dow": "^DJI",
    "nasdaq": "^IXIC",
    "treasury10y": "^TNX",
    "vix": "^VIX",
}
# Yields move in absolute points, so their change is not a percentage.
ABSOLUTE_CHANGE_FIELDS = {"treasury10y"}


def _to_float(value) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _parse_finnhub_quote(raw: Optional[dict]) -> Optional[Quote]:
    """Finnhub answers unknown symbols with c == 0 rather than an error."""
    if not raw:
        return None
    price = _to_float(raw.get("c"))
    if price is None or price <= 0:
        return None
    ts = raw.get("t")
    try:
        last_trade = datetime.fromtimestamp(ts, tz=timezone.utc) if ts else datetime.now(timezone.utc)
        return Quote(
            price=price,
            change=_to_float(raw.get("d")) or 0.0,
            changePercent=_to_float(raw.get("dp")) or 0.0,
            lastTrade=last_trade,
            provider=FINNHUB,
        )
    except (TypeError, ValueError, OverflowError, OSError, ValidationError) as e:
        logger.warning(f"Malformed Finnhub quote payload {raw!r}: {e}")
        return None


def _parse_alpha_vantage_quote(raw: Optional[dict]) -> Optional[Quote]:
    if not raw:
        return None
    price = _to_float(raw.get("05. price"))
    if price is None or price <= 0:
        return None
    change_percent = str(raw.get("10. change percent") or "0").replace("%", "")
    trading_day = raw.get("07. latest trading day")
    try:
        last_trade = datetime.strptime(trading_day, "%Y-%m-%d").replace(tzinfo=timezone.utc)
    except (TypeError, ValueError):
        last_trade = datetime.now(timezone.utc)
    try:
        return Quote(
            price=price,
            change=_to_float(raw.get("09. change")) or 0.0,
            changePercent=_to_float(change_percent) or 0.0,
            lastTrade=last_trade,
            provider=ALPHA_VANTAGE,
        )
    except ValidationError as e:
        logger.warning(f"Malformed Alpha Vantage quote payload {raw!r}: {e}")
        return None


class QuoteFetcher:
    """Fetches quotes for single symbols and for the market index snapshot."""

    def __init__(self, timeout: float = 10):
        self.timeout = timeout

    def fetch_quote(self, symbol: str) -> Optional[Quote]:
        """
        Returns a live quote for `symbol`, or None when neither provider has one.
        """
        quote = _parse_finnhub_quote(finnhub_provider.get_quote(symbol))
        if quote is not None:
            return quote

        logger.info(f"Finnhub had no usable quote for {symbol}; trying Alpha Vantage.")
        quote = _parse_alpha_vantage_quote(
            alpha_vantage_provider.get_global_quote(symbol, timeout=self.timeout)
        )
        if quote is None:
            logger.warning(f"No live quote available for {symbol} from any provider.")
        return quote

    def fetch_market_snapshot(self) -> Tuple[MarketDataCreate, DataStatus]:
        """
        Builds a market snapshot from live index quotes.

        Indices without a live quote keep their constant fallback values. The
        10-year treasury reports its absolute change, the equity indices their
        percent change. The preferred average yield fields are left at the
        constant; the service layer fills them from the store.

        Returns:
            The snapshot and a DataStatus of "live" if every index was quoted,
            otherwise "fallback" with the stale indices named in the reason.
        """
        values = dict(FALLBACK_MARKET_DATA)
        fallen_back: List[str] = []
        providers_used = set()

        for field, symbol in INDEX_SYMBOLS.items():
            quote = self.fetch_quote(symbol)
            if quote is None:
                fallen_back.append(field)
                continue
            if field in ABSOLUTE_CHANGE_FIELDS:
                values[field] = round(quote.price, 3)
                values[f"{field}Change"] = round(quote.change, 3)
            else:
                values[field] = round(quote.price, 2)
                values[f"{field}Change"] = round(quote.changePercent, 2)
            providers_used.add(quote.provider)

        snapshot = MarketDataCreate(**values)
        provider = ",".join(sorted(providers_used)) or None
        if fallen_back:
            status = DataStatus(
                status="fallback",
                provider=provider,
                reason=f"no live quote for: {', '.join(fallen_back)}",
            )
            logger.warning(f"Market snapshot using fallback values for {fallen_back}")
        else:
            status = DataStatus(status="live", provider=provider)
        return snapshot, status
