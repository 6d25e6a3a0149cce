# config.py
"""
Environment-driven settings for the market service.

load_settings() is called once by create_app(); the returned mapping is loaded
into app.config. Provider API keys are deliberately not part of it: the
provider modules read FINNHUB_API_KEY / ALPHA_VANTAGE_API_KEY at call time.
"""

import os
from typing import Any, Dict, List, Optional


def _get_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _get_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def _get_optional_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return int(raw)


def load_settings() -> Dict[str, Any]:
    """Reads all service settings from the environment."""
    return {
        "PORT": int(os.getenv("PORT", "5000")),
        "LOG_LEVEL": os.getenv("LOG_LEVEL", "INFO").upper(),
        "LOG_DIR": os.getenv("LOG_DIR", "logs"),
        "CORS_ORIGINS": _get_list("CORS_ORIGINS", "http://localhost:5173"),
        # Synthetic data
        "STOCK_SEED": _get_optional_int("STOCK_SEED"),
        # Featured stocks
        "FEATURED_POLICY": os.getenv("FEATURED_POLICY", "top_by_yield").lower(),
        "FEATURED_MIN_YIELD": float(os.getenv("FEATURED_MIN_YIELD", "6.0")),
        "FEATURED_COUNT": int(os.getenv("FEATURED_COUNT", "6")),
        "FEATURED_TICKERS": _get_list("FEATURED_TICKERS", "JPM-PA,BAC-PB,WFC-PC"),
        "TOP_PERFORMERS_COUNT": int(os.getenv("TOP_PERFORMERS_COUNT", "10")),
        # News
        "NEWS_SYMBOLS": _get_list("NEWS_SYMBOLS", "BAC,JPM,WFC,GS,MS,C"),
        "NEWS_LOOKBACK_DAYS": int(os.getenv("NEWS_LOOKBACK_DAYS", "30")),
        "NEWS_FETCH_WORKERS": int(os.getenv("NEWS_FETCH_WORKERS", "6")),
        "NEWS_REFRESH_ON_STARTUP": _get_bool("NEWS_REFRESH_ON_STARTUP", True),
        # Market data
        "MARKET_DATA_LIVE": _get_bool("MARKET_DATA_LIVE", True),
        "PROVIDER_TIMEOUT_SECONDS": float(os.getenv("PROVIDER_TIMEOUT_SECONDS", "10")),
    }
