# services/stock_generator.py
"""
Synthetic seed data for the in-memory store.

The ticker universe is a static table of issuers and preferred series; the
numbers attached to each ticker are drawn from uniform ranges. Pass a seed to
get the same numbers on every run (tests do; production leaves it unset
unless STOCK_SEED is configured).
"""

import logging
import random
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

from database.memory_store import MarketStore
from shared.contracts import MarketDataCreate, NewsArticleCreate, PreferredStockCreate

logger = logging.getLogger(__name__)

SERIES_LETTERS = "ABCDEFGHIJKLMNOPQRST"
MAJOR_ISSUER_SERIES = 20
DEFAULT_ISSUER_SERIES = 12

# (ticker prefix, issuer name, sector, number of preferred series)
ISSUERS: List[Tuple[str, str, str, int]] = [
    # Money-center banks carry the deepest preferred stacks
    ("BAC", "Bank of America", "Financial Services", MAJOR_ISSUER_SERIES),
    ("JPM", "JPMorgan Chase", "Financial Services", MAJOR_ISSUER_SERIES),
    ("WFC", "Wells Fargo", "Financial Services", MAJOR_ISSUER_SERIES),
    ("GS", "Goldman Sachs", "Financial Services", MAJOR_ISSUER_SERIES),
    ("MS", "Morgan Stanley", "Financial Services", MAJOR_ISSUER_SERIES),
    ("C", "Citigroup", "Financial Services", MAJOR_ISSUER_SERIES),
    # Other financials and insurers
    ("BRK", "Berkshire Hathaway", "Financial Services", DEFAULT_ISSUER_SERIES),
    ("AXP", "American Express", "Financial Services", DEFAULT_ISSUER_SERIES),
    ("MET", "MetLife", "Insurance", DEFAULT_ISSUER_SERIES),
    ("PRU", "Prudential", "Insurance", DEFAULT_ISSUER_SERIES),
    ("AIG", "American International Group", "Insurance", DEFAULT_ISSUER_SERIES),
    ("USB", "U.S. Bancorp", "Financial Services", DEFAULT_ISSUER_SERIES),
    ("PNC", "PNC Financial Services", "Financial Services", DEFAULT_ISSUER_SERIES),
    ("TFC", "Truist Financial", "Financial Services", DEFAULT_ISSUER_SERIES),
    ("COF", "Capital One Financial", "Financial Services", DEFAULT_ISSUER_SERIES),
    ("BK", "Bank of New York Mellon", "Financial Services", DEFAULT_ISSUER_SERIES),
    ("STT", "State Street", "Financial Services", DEFAULT_ISSUER_SERIES),
    ("BLK", "BlackRock", "Financial Services", DEFAULT_ISSUER_SERIES),
    ("SCHW", "Charles Schwab", "Financial Services", DEFAULT_ISSUER_SERIES),
    ("SPGI", "S&P Global", "Financial Services", DEFAULT_ISSUER_SERIES),
    ("ICE", "Intercontinental Exchange", "Financial Services", DEFAULT_ISSUER_SERIES),
    ("CME", "CME Group", "Financial Services", DEFAULT_ISSUER_SERIES),
    # Energy and utilities
    ("KMI", "Kinder Morgan", "Energy", DEFAULT_ISSUER_SERIES),
    ("EPD", "Enterprise Products Partners", "Energy", DEFAULT_ISSUER_SERIES),
    ("ENB", "Enbridge", "Energy", DEFAULT_ISSUER_SERIES),
    ("XOM", "Exxon Mobil", "Energy", DEFAULT_ISSUER_SERIES),
    ("CVX", "Chevron", "Energy", DEFAULT_ISSUER_SERIES),
    ("NEE", "NextEra Energy", "Utilities", DEFAULT_ISSUER_SERIES),
    ("DUK", "Duke Energy", "Utilities", DEFAULT_ISSUER_SERIES),
    ("SO", "Southern Company", "Utilities", DEFAULT_ISSUER_SERIES),
    # Technology
    ("AAPL", "Apple", "Technology", DEFAULT_ISSUER_SERIES),
    ("MSFT", "Microsoft", "Technology", DEFAULT_ISSUER_SERIES),
    ("GOOGL", "Alphabet", "Technology", DEFAULT_ISSUER_SERIES),
    ("AMZN", "Amazon", "Technology", DEFAULT_ISSUER_SERIES),
    ("META", "Meta Platforms", "Technology", DEFAULT_ISSUER_SERIES),
    ("NFLX", "Netflix", "Technology", DEFAULT_ISSUER_SERIES),
    ("TSLA", "Tesla", "Technology", DEFAULT_ISSUER_SERIES),
    ("NVDA", "NVIDIA", "Technology", DEFAULT_ISSUER_SERIES),
    ("CRM", "Salesforce", "Technology", DEFAULT_ISSUER_SERIES),
    ("ORCL", "Oracle", "Technology", DEFAULT_ISSUER_SERIES),
    ("INTC", "Intel", "Technology", DEFAULT_ISSUER_SERIES),
    ("AMD", "Advanced Micro Devices", "Technology", DEFAULT_ISSUER_SERIES),
    ("QCOM", "Qualcomm", "Technology", DEFAULT_ISSUER_SERIES),
    ("AVGO", "Broadcom", "Technology", DEFAULT_ISSUER_SERIES),
    ("TXN", "Texas Instruments", "Technology", DEFAULT_ISSUER_SERIES),
    # Healthcare
    ("JNJ", "Johnson & Johnson", "Healthcare", DEFAULT_ISSUER_SERIES),
    ("PFE", "Pfizer", "Healthcare", DEFAULT_ISSUER_SERIES),
    ("UNH", "UnitedHealth Group", "Healthcare", DEFAULT_ISSUER_SERIES),
    ("ABBV", "AbbVie", "Healthcare", DEFAULT_ISSUER_SERIES),
    ("MRK", "Merck", "Healthcare", DEFAULT_ISSUER_SERIES),
    # Consumer
    ("PG", "Procter & Gamble", "Consumer Goods", DEFAULT_ISSUER_SERIES),
    ("KO", "Coca-Cola", "Consumer Goods", DEFAULT_ISSUER_SERIES),
    ("PEP", "PepsiCo", "Consumer Goods", DEFAULT_ISSUER_SERIES),
    ("WMT", "Walmart", "Consumer Goods", DEFAULT_ISSUER_SERIES),
    ("HD", "Home Depot", "Consumer Goods", DEFAULT_ISSUER_SERIES),
    ("COST", "Costco", "Consumer Goods", DEFAULT_ISSUER_SERIES),
    ("TGT", "Target", "Consumer Goods", DEFAULT_ISSUER_SERIES),
    ("LOW", "Lowe's", "Consumer Goods", DEFAULT_ISSUER_SERIES),
    ("SBUX", "Starbucks", "Consumer Goods", DEFAULT_ISSUER_SERIES),
    ("NKE", "Nike", "Consumer Goods", DEFAULT_ISSUER_SERIES),
    # Real estate
    ("SPG", "Simon Property Group", "Real Estate", DEFAULT_ISSUER_SERIES),
    ("PLD", "Prologis", "Real Estate", DEFAULT_ISSUER_SERIES),
    ("CCI", "Crown Castle", "Real Estate", DEFAULT_ISSUER_SERIES),
    ("AMT", "American Tower", "Real Estate", DEFAULT_ISSUER_SERIES),
    ("EQIX", "Equinix", "Real Estate", DEFAULT_ISSUER_SERIES),
    # Telecommunications
    ("T", "AT&T", "Telecommunications", DEFAULT_ISSUER_SERIES),
    ("VZ", "Verizon", "Telecommunications", DEFAULT_ISSUER_SERIES),
    ("TMUS", "T-Mobile", "Telecommunications", DEFAULT_ISSUER_SERIES),
    # Industrials, autos and transport
    ("GE", "General Electric", "Industrial", DEFAULT_ISSUER_SERIES),
    ("CAT", "Caterpillar", "Industrial", DEFAULT_ISSUER_SERIES),
    ("BA", "Boeing", "Industrial", DEFAULT_ISSUER_SERIES),
    ("MMM", "3M", "Industrial", DEFAULT_ISSUER_SERIES),
    ("HON", "Honeywell", "Industrial", DEFAULT_ISSUER_SERIES),
    ("F", "Ford", "Automotive", DEFAULT_ISSUER_SERIES),
    ("GM", "General Motors", "Automotive", DEFAULT_ISSUER_SERIES),
    ("DAL", "Delta Air Lines", "Transportation", DEFAULT_ISSUER_SERIES),
    ("UAL", "United Airlines", "Transportation", DEFAULT_ISSUER_SERIES),
    ("AAL", "American Airlines", "Transportation", DEFAULT_ISSUER_SERIES),
    # Media
    ("DIS", "Disney", "Entertainment", DEFAULT_ISSUER_SERIES),
    ("CMCSA", "Comcast", "Entertainment", DEFAULT_ISSUER_SERIES),
    ("WBD", "Warner Bros. Discovery", "Entertainment", DEFAULT_ISSUER_SERIES),
    ("PARA", "Paramount Global", "Entertainment", DEFAULT_ISSUER_SERIES),
]

# Constant snapshot served when no live index quote is available.
FALLBACK_MARKET_DATA = {
    "sp500": 6259.74,
    "sp500Change": -0.33,
    "dow": 44500.00,
    "dowChange": -0.6,
    "nasdaq": 19850.00,
    "nasdaqChange": 0.2,
    "treasury10y": 4.407,
    "treasury10yChange": 0.06,
    "vix": 16.40,
    "vixChange": 3.93,
    "preferredAvgYield": 6.9,
    "preferredAvgYieldChange": 0.15,
}


def preferred_tickers() -> List[Tuple[str, str, str]]:
    """Expands the issuer table into (ticker, display name, sector) rows."""
    rows = []
    for prefix, issuer, sector, series_count in ISSUERS:
        for letter in SERIES_LETTERS[:series_count]:
            rows.append((f"{prefix}-P{letter}", f"{issuer} Preferred Series {letter}", sector))
    return rows


def generate_preferred_stocks(seed: Optional[int] = None, now: Optional[datetime] = None) -> List[PreferredStockCreate]:
    """
    Generates one placeholder record per ticker in the static table.

    Args:
        seed: Seed for the random source. None draws fresh values each call.
        now: Reference time for lastTrade; defaults to the current UTC time.

    Returns:
        A list of PreferredStockCreate payloads, in table order.
    """
    rng = random.Random(seed)
    now = now or datetime.now(timezone.utc)
    stocks = []
    for ticker, name, sector in preferred_tickers():
        price = 20 + rng.random() * 15          # $20-$35
        change = -1 + rng.random() * 2          # -$1 to +$1
        dividend_yield = 4 + rng.random() * 4   # 4-8%
        stocks.append(PreferredStockCreate(
            ticker=ticker,
            name=name,
            price=round(price, 2),
            change=round(change, 2),
            changePercent=round(change / price * 100, 2),
            dividendYield=round(dividend_yield, 2),
            marketCap=f"${int(500 + rng.random() * 2000)}M",
            volume=int(10000 + rng.random() * 100000),
            lastTrade=now - timedelta(seconds=rng.random() * 3600),
            sector=sector,
            description=f"{name} preferred stock with {dividend_yield:.1f}% dividend yield",
            isActive=True,
        ))
    logger.info(f"Generated {len(stocks)} synthetic preferred stocks (seed={seed}).")
    return stocks


def sample_news_articles(now: Optional[datetime] = None) -> List[NewsArticleCreate]:
    """Static articles shown until the first successful news refresh."""
    now = now or datetime.now(timezone.utc)
    return [
        NewsArticleCreate(
            title="Federal Reserve Signals Continued Support for Preferred Stock Market",
            excerpt="The Federal Reserve's latest policy statement points to continued support for financial markets, a tailwind for preferred stock investors...",
            content="The Federal Reserve's latest policy statement points to continued support for financial markets, a tailwind for preferred stock investors looking for stable dividend yields.",
            source="Reuters",
            url="https://reuters.com/markets/fed-preferred-stocks",
            publishedAt=now - timedelta(hours=2),
            relatedTickers=["JPM-PA", "BAC-PB"],
            category="Market News",
        ),
        NewsArticleCreate(
            title="Bank of America Issues New Preferred Stock Series",
            excerpt="Bank of America announced a new preferred stock series aimed at income-focused investors...",
            content="Bank of America announced a new preferred stock series aimed at income-focused investors, with a dividend rate above its existing series.",
            source="MarketWatch",
            url="https://marketwatch.com/story/bac-preferred-stock",
            publishedAt=now - timedelta(hours=4),
            relatedTickers=["BAC-PB"],
            category="Company News",
        ),
        NewsArticleCreate(
            title="Rising Interest Rates Impact Preferred Stock Valuations",
            excerpt="Recent rate moves are weighing on preferred stock prices and lifting yields across major financial issuers...",
            content="Recent rate moves are weighing on preferred stock prices and lifting yields across major financial issuers.",
            source="Financial Times",
            url="https://ft.com/content/preferred-stocks-rates",
            publishedAt=now - timedelta(hours=6),
            relatedTickers=["JPM-PA", "WFC-PC", "MS-PA"],
            category="Analysis",
        ),
        NewsArticleCreate(
            title="JPMorgan Chase Preferred Stock Dividend Announcement",
            excerpt="JPMorgan Chase declared its quarterly dividend on its preferred series, keeping payouts unchanged...",
            content="JPMorgan Chase declared its quarterly dividend on its preferred series, keeping payouts unchanged for shareholders.",
            source="Bloomberg",
            url="https://bloomberg.com/news/jpm-dividend",
            publishedAt=now - timedelta(hours=8),
            relatedTickers=["JPM-PA"],
            category="Dividends",
        ),
    ]


def default_market_data() -> MarketDataCreate:
    return MarketDataCreate(**FALLBACK_MARKET_DATA)


def build_seeded_store(seed: Optional[int] = None) -> MarketStore:
    """
    Builds a store loaded with synthetic stocks, sample news and a starting
    snapshot. The snapshot's index values are the fallback constants, but its
    preferred average yield is taken from the generated stocks.
    """
    store = MarketStore()
    store.seed(
        stocks=generate_preferred_stocks(seed=seed),
        articles=sample_news_articles(),
    )
    market_data = default_market_data()
    avg_yield = store.average_dividend_yield()
    if avg_yield is not None:
        market_data = market_data.model_copy(update={
            "preferredAvgYield": round(avg_yield, 2),
            "preferredAvgYieldChange": 0.0,
        })
    store.set_market_data(market_data)
    return store
