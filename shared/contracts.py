# shared/contracts.py
"""
This module defines the Pydantic models that serve as the formal data contracts
for the preferred stock market service.

Every entity held by the in-memory store and every write payload accepted by the
REST API is validated against one of these models. Field names are camelCase
because they are serialized as-is to the single-page front end.
"""

from datetime import datetime, timezone
from typing import Annotated, List, Literal, Optional
from pydantic import AfterValidator, BaseModel, ConfigDict, Field


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps from clients are taken to be UTC so that sorting never
    # mixes naive and aware datetimes.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


# --- Contract 1: PreferredStock ---
class PreferredStockCreate(BaseModel):
    """Write payload for POST /api/stocks. The ticker is the primary key."""
    ticker: str = Field(..., min_length=1)
    name: str
    price: float
    change: float
    changePercent: float
    dividendYield: float
    marketCap: str  # free-text label such as "$1.2B"
    volume: int
    lastTrade: UtcDatetime
    sector: Optional[str] = None
    description: Optional[str] = None
    isActive: Optional[bool] = True


class PreferredStock(PreferredStockCreate):
    """A preferred stock record as held by the store."""
    updatedAt: Optional[UtcDatetime] = None


class PreferredStockUpdate(BaseModel):
    """Partial update payload. The ticker is immutable and may not appear here."""
    model_config = ConfigDict(extra='forbid')

    name: Optional[str] = None
    price: Optional[float] = None
    change: Optional[float] = None
    changePercent: Optional[float] = None
    dividendYield: Optional[float] = None
    marketCap: Optional[str] = None
    volume: Optional[int] = None
    lastTrade: Optional[UtcDatetime] = None
    sector: Optional[str] = None
    description: Optional[str] = None
    isActive: Optional[bool] = None


# --- Contract 2: NewsArticle ---
class NewsArticleCreate(BaseModel):
    """Write payload for POST /api/news, also produced by the news fetcher."""
    title: str = Field(..., min_length=1)
    excerpt: str
    content: Optional[str] = None
    source: str
    url: Optional[str] = None
    imageUrl: Optional[str] = None
    publishedAt: UtcDatetime
    relatedTickers: Optional[List[str]] = None
    category: Optional[str] = None
    isActive: Optional[bool] = True


class NewsArticle(NewsArticleCreate):
    """A stored article. The id is a content hash, stable across news refreshes."""
    id: str


# --- Contract 3: MarketData ---
class MarketDataCreate(BaseModel):
    """Write payload for POST /api/market-data."""
    sp500: float
    sp500Change: float
    dow: float
    dowChange: float
    nasdaq: float
    nasdaqChange: float
    treasury10y: float
    treasury10yChange: float
    vix: float
    vixChange: float
    preferredAvgYield: float
    preferredAvgYieldChange: float


class MarketData(MarketDataCreate):
    """The single current market snapshot."""
    updatedAt: Optional[UtcDatetime] = None


# --- Contract 4: Quote ---
class Quote(BaseModel):
    """A live quote from one of the external providers."""
    price: float
    change: float
    changePercent: float
    lastTrade: UtcDatetime
    provider: str

    def as_stock_fields(self) -> dict:
        """The subset of fields that can be overlaid onto a PreferredStock."""
        return self.model_dump(include={"price", "change", "changePercent", "lastTrade"})


# --- Contract 5: DataStatus ---
DataStatusValue = Literal["live", "fallback", "stored"]


class DataStatus(BaseModel):
    """Tags a payload with where its numbers came from."""
    status: DataStatusValue
    provider: Optional[str] = None
    reason: Optional[str] = None


# --- Contract 6: Ticker lookup ---
class TickerLookupResult(BaseModel):
    """Response of GET /api/stocks/search/<ticker>."""
    type: Literal["preferred", "regular"]
    data: PreferredStock
    dataStatus: DataStatus
