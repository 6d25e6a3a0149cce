# tests/conftest.py
"""
Pytest configuration and shared fixtures for the market service tests.
Every test gets its own store and mocked fetchers; nothing touches the network.
"""

import os
import sys
from datetime import datetime, timedelta, timezone
from typing import Any, Dict
from unittest.mock import MagicMock

import pytest

# Ensure local imports resolve when running from repo root
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from database.memory_store import MarketStore
from services.news_fetcher import NewsFetcher
from services.quote_fetcher import QuoteFetcher
from shared.contracts import NewsArticleCreate, PreferredStockCreate


def pytest_configure(config):
    """Register custom markers to avoid warnings."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated, all collaborators mocked).")
    config.addinivalue_line("markers", "integration: Route tests through the Flask test client.")


def pytest_collection_modifyitems(config, items):
    # auto-tag tests by folder so `-m unit|integration` works consistently
    for item in items:
        path = str(item.fspath)
        if f"{os.sep}routes{os.sep}" in path:
            item.add_marker(pytest.mark.integration)
        elif f"{os.sep}unit{os.sep}" in path:
            item.add_marker(pytest.mark.unit)


# -------------------------------------------------------------------
# Sample data builders
# -------------------------------------------------------------------

NOW = datetime(2025, 7, 1, 15, 30, tzinfo=timezone.utc)


def make_stock(ticker: str = "JPM-PA", **overrides: Any) -> PreferredStockCreate:
    data: Dict[str, Any] = {
        "ticker": ticker,
        "name": f"{ticker} Preferred",
        "price": 25.0,
        "change": 0.1,
        "changePercent": 0.4,
        "dividendYield": 5.5,
        "marketCap": "$1200M",
        "volume": 50000,
        "lastTrade": NOW,
        "sector": "Financial Services",
        "description": "Test preferred",
        "isActive": True,
    }
    data.update(overrides)
    return PreferredStockCreate(**data)


def make_article(title: str = "Headline", **overrides: Any) -> NewsArticleCreate:
    data: Dict[str, Any] = {
        "title": title,
        "excerpt": "Short excerpt",
        "content": "Full article body",
        "source": "Reuters",
        "url": f"https://example.com/{title.lower().replace(' ', '-')}",
        "publishedAt": NOW,
        "relatedTickers": ["JPM-PA"],
        "category": "Market News",
    }
    data.update(overrides)
    return NewsArticleCreate(**data)


@pytest.fixture
def sample_time():
    return NOW


@pytest.fixture
def hours_ago():
    return lambda h: NOW - timedelta(hours=h)


# -------------------------------------------------------------------
# Collaborators
# -------------------------------------------------------------------

@pytest.fixture
def store():
    return MarketStore()


@pytest.fixture
def quote_fetcher():
    fetcher = MagicMock(spec=QuoteFetcher)
    fetcher.fetch_quote.return_value = None
    return fetcher


@pytest.fixture
def news_fetcher():
    fetcher = MagicMock(spec=NewsFetcher)
    fetcher.fetch_multiple_company_news.return_value = []
    return fetcher


# -------------------------------------------------------------------
# Flask app and client fixtures
# -------------------------------------------------------------------

@pytest.fixture
def app(store, quote_fetcher, news_fetcher):
    from app import create_app
    flask_app = create_app(
        store=store,
        quote_fetcher=quote_fetcher,
        news_fetcher=news_fetcher,
        config_overrides={
            "TESTING": True,
            "LOG_DIR": "",
            "NEWS_REFRESH_ON_STARTUP": False,
            "MARKET_DATA_LIVE": False,
        },
    )
    yield flask_app


@pytest.fixture
def client(app):
    return app.test_client()
