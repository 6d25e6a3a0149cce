# services/news_fetcher.py
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional

from pydantic import ValidationError

from helper_functions import truncate_excerpt
from providers import finnhub_provider
from shared.contracts import NewsArticleCreate

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "Company News"
DEFAULT_LOOKBACK_DAYS = 30


def _map_news_item(item: dict, symbol: str) -> Optional[NewsArticleCreate]:
    """Maps one Finnhub company-news item; incomplete or malformed items are dropped."""
    try:
        title = (item.get("headline") or "").strip()
        summary = (item.get("summary") or "").strip()
        if not title or not summary:
            return None
        published_at = datetime.fromtimestamp(int(item.get("datetime")), tz=timezone.utc)
        return NewsArticleCreate(
            title=title,
            excerpt=truncate_excerpt(summary),
            content=summary,
            source=item.get("source") or "Finnhub",
            url=item.get("url") or None,
            imageUrl=item.get("image") or None,
            publishedAt=published_at,
            relatedTickers=[symbol],
            category=item.get("category") or DEFAULT_CATEGORY,
            isActive=True,
        )
    except (ValidationError, AttributeError, TypeError, ValueError, OverflowError, OSError) as e:
        logger.warning(f"Dropping malformed {symbol} news item {item.get('id')!r}: {e}")
        return None


class NewsFetcher:
    """Pulls company news from Finnhub for a set of symbols."""

    def __init__(self, max_workers: int = 6):
        self.max_workers = max(1, max_workers)

    def fetch_company_news(self, symbol: str, from_date: str, to_date: str) -> List[NewsArticleCreate]:
        """
        Fetches and maps company news for one symbol.

        Args:
            symbol: The company symbol, e.g. "JPM".
            from_date: Inclusive start date, YYYY-MM-DD.
            to_date: Inclusive end date, YYYY-MM-DD.

        Returns:
            The mapped articles; an empty list if the provider failed.
        """
        raw_items = finnhub_provider.get_company_news(symbol, from_date, to_date)
        if not raw_items:
            return []

        articles = []
        for item in raw_items:
            if not isinstance(item, dict):
                continue
            article = _map_news_item(item, symbol)
            if article is not None:
                articles.append(article)
        logger.info(f"Mapped {len(articles)} of {len(raw_items)} news items for {symbol}.")
        return articles

    def fetch_multiple_company_news(
        self, symbols: Iterable[str], lookback_days: int = DEFAULT_LOOKBACK_DAYS
    ) -> List[NewsArticleCreate]:
        """
        Fetches news for every symbol concurrently over the trailing window and
        returns one list, newest first. Duplicates across symbols are kept here;
        the store merges them on ingest.
        """
        symbols = list(symbols)
        if not symbols:
            return []
        to_date = datetime.now(timezone.utc).date()
        from_date = to_date - timedelta(days=lookback_days)
        from_str, to_str = from_date.isoformat(), to_date.isoformat()

        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(symbols))) as executor:
            results = executor.map(lambda s: self.fetch_company_news(s, from_str, to_str), symbols)
            articles = [article for batch in results for article in batch]

        articles.sort(key=lambda a: a.publishedAt, reverse=True)
        return articles
