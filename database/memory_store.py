# database/memory_store.py
"""
In-memory entity store for the market service.

Holds three entity sets, all owned by one MarketStore instance:
- preferred stocks keyed by ticker
- news articles keyed by their content-hash id
- a single market data snapshot (plus the DataStatus it was produced with)

Nothing is persisted; a process restart starts from the seed data again.
The store is built explicitly by the entry point (see services.stock_generator
.build_seeded_store) and handed to the app, so tests get a fresh one each time.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence

from helper_functions import make_article_id
from shared.contracts import (
    DataStatus,
    MarketData,
    MarketDataCreate,
    NewsArticle,
    NewsArticleCreate,
    PreferredStock,
    PreferredStockCreate,
)

logger = logging.getLogger(__name__)

DEFAULT_NEWS_LIMIT = 10
DEFAULT_TOP_PERFORMERS = 10


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _merge_article(articles: Dict[str, NewsArticle], payload: NewsArticleCreate) -> NewsArticle:
    """Inserts an article; a second copy of the same article only adds its tickers."""
    article_id = make_article_id(payload)
    existing = articles.get(article_id)
    article = NewsArticle(id=article_id, **payload.model_dump(exclude={"id"}))
    if existing is not None and existing.relatedTickers:
        tickers = list(existing.relatedTickers)
        for t in article.relatedTickers or []:
            if t not in tickers:
                tickers.append(t)
        article = article.model_copy(update={"relatedTickers": tickers})
    articles[article_id] = article
    return article


class MarketStore:
    """Key-value maps of ticker -> stock and id -> article, plus one snapshot."""

    def __init__(self) -> None:
        self._stocks: Dict[str, PreferredStock] = {}
        self._articles: Dict[str, NewsArticle] = {}
        self._market_data: Optional[MarketData] = None
        self._market_data_status: Optional[DataStatus] = None
        # Guards writers only; no caller holds it across network I/O.
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Seeding
    # ------------------------------------------------------------------
    def seed(
        self,
        stocks: Iterable[PreferredStockCreate] = (),
        articles: Iterable[NewsArticleCreate] = (),
        market_data: Optional[MarketDataCreate] = None,
    ) -> None:
        """Bulk-loads startup data. Existing entries with the same key are overwritten."""
        stock_count = 0
        for stock in stocks:
            self.upsert_stock(stock)
            stock_count += 1
        article_count = 0
        for article in articles:
            self.create_article(article)
            article_count += 1
        if market_data is not None:
            self.set_market_data(market_data)
        logger.info(f"Store seeded with {stock_count} stocks and {article_count} articles.")

    # ------------------------------------------------------------------
    # Preferred stocks
    # ------------------------------------------------------------------
    def get_stock(self, ticker: str) -> Optional[PreferredStock]:
        return self._stocks.get(ticker)

    def list_stocks(self) -> List[PreferredStock]:
        return list(self._stocks.values())

    def stock_count(self) -> int:
        return len(self._stocks)

    def featured_stocks(self, policy) -> List[PreferredStock]:
        """Applies a featured policy (see services.featured_policy) to all stocks."""
        return policy.select(self.list_stocks())

    def top_performers(self, limit: int = DEFAULT_TOP_PERFORMERS) -> List[PreferredStock]:
        stocks = sorted(self.list_stocks(), key=lambda s: s.changePercent, reverse=True)
        return stocks[: max(limit, 0)]

    def search_stocks(self, query: str) -> List[PreferredStock]:
        """Case-insensitive substring match over ticker or name. Empty query matches all."""
        needle = (query or "").lower()
        return [
            s for s in self.list_stocks()
            if needle in s.ticker.lower() or needle in s.name.lower()
        ]

    def upsert_stock(self, payload: PreferredStockCreate) -> PreferredStock:
        """Stores a stock under its ticker, silently replacing any existing record."""
        stock = PreferredStock(**payload.model_dump(exclude={"updatedAt"}), updatedAt=_utcnow())
        with self._lock:
            self._stocks[stock.ticker] = stock
        return stock

    def update_stock(self, ticker: str, fields: Dict[str, Any]) -> Optional[PreferredStock]:
        """
        Merges `fields` onto an existing record.

        Returns:
            The updated stock, or None if the ticker is absent (store unchanged).

        Raises:
            pydantic.ValidationError: If the merged record violates the contract;
            the stored record is left untouched in that case.
        """
        with self._lock:
            existing = self._stocks.get(ticker)
            if existing is None:
                return None
            merged = existing.model_dump()
            merged.update(fields)
            merged["ticker"] = ticker  # primary key is immutable
            merged["updatedAt"] = _utcnow()
            updated = PreferredStock.model_validate(merged)
            self._stocks[ticker] = updated
        return updated

    def average_dividend_yield(self) -> Optional[float]:
        """Mean dividend yield across active stocks, or None with no active stocks."""
        yields = [s.dividendYield for s in self.list_stocks() if s.isActive is not False]
        if not yields:
            return None
        return sum(yields) / len(yields)

    # ------------------------------------------------------------------
    # News articles
    # ------------------------------------------------------------------
    def get_article(self, article_id: str) -> Optional[NewsArticle]:
        return self._articles.get(article_id)

    def list_articles(self) -> List[NewsArticle]:
        """All articles, newest first."""
        return sorted(self._articles.values(), key=lambda a: a.publishedAt, reverse=True)

    def article_count(self) -> int:
        return len(self._articles)

    def latest_articles(self, limit: int = DEFAULT_NEWS_LIMIT) -> List[NewsArticle]:
        return self.list_articles()[: max(limit, 0)]

    def articles_for_ticker(self, ticker: str) -> List[NewsArticle]:
        return [a for a in self.list_articles() if a.relatedTickers and ticker in a.relatedTickers]

    def create_article(self, payload: NewsArticleCreate) -> NewsArticle:
        with self._lock:
            return _merge_article(self._articles, payload)

    def replace_articles(self, payloads: Sequence[NewsArticleCreate]) -> int:
        """
        Replaces the whole news collection. The new collection is built aside
        and swapped in, so readers see either the old set or the new one.

        Returns:
            The number of distinct articles after the replacement.
        """
        fresh: Dict[str, NewsArticle] = {}
        for payload in payloads:
            _merge_article(fresh, payload)
        with self._lock:
            self._articles = fresh
        return len(fresh)

    # ------------------------------------------------------------------
    # Market data snapshot
    # ------------------------------------------------------------------
    def get_market_data(self) -> Optional[MarketData]:
        return self._market_data

    def get_market_data_status(self) -> Optional[DataStatus]:
        return self._market_data_status

    def set_market_data(self, payload: MarketDataCreate, status: Optional[DataStatus] = None) -> MarketData:
        """Replaces the snapshot wholesale. Snapshots are never historized."""
        snapshot = MarketData(**payload.model_dump(exclude={"updatedAt"}), updatedAt=_utcnow())
        with self._lock:
            self._market_data = snapshot
            self._market_data_status = status or DataStatus(status="stored")
        return snapshot
