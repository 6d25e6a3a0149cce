# providers/finnhub_provider.py
import finnhub
import os

import logging
logger = logging.getLogger(__name__)

DEFAULT_API_KEY = "demo"


def _get_client() -> finnhub.Client:
    # Unset keys fall back to the public demo token, which Finnhub rejects for
    # most symbols; callers treat that like any other provider failure.
    api_key = os.getenv('FINNHUB_API_KEY') or DEFAULT_API_KEY
    return finnhub.Client(api_key=api_key)


def get_quote(ticker: str) -> dict | None:
    """
    Fetches the latest quote for a symbol from Finnhub.

    Args:
        ticker: The symbol to quote.

    Returns:
        The raw Finnhub quote dictionary (keys c, d, dp, h, l, o, pc, t),
        or None if the request fails or the payload is not a dictionary.
    """
    try:
        finnhub_client = _get_client()
        res = finnhub_client.quote(ticker)
        logger.debug(f"Finnhub quote response for {ticker}: {res}")

        if not isinstance(res, dict):
            logger.warning(f"Unexpected Finnhub quote payload for {ticker}: {type(res).__name__}")
            return None
        return res

    except Exception as e:
        logger.error(f"Error fetching quote from Finnhub for {ticker}: {e}")
        return None


def get_company_news(ticker: str, from_date: str, to_date: str) -> list | None:
    """
    Fetches company news for a symbol from Finnhub.

    Args:
        ticker: The symbol to fetch news for.
        from_date: Inclusive start date, YYYY-MM-DD.
        to_date: Inclusive end date, YYYY-MM-DD.

    Returns:
        A list of raw Finnhub news items, or None if an error occurs or the
        response is not a list.
    """
    try:
        finnhub_client = _get_client()
        logger.info(f"Fetching Finnhub company news for {ticker} ({from_date} to {to_date})")
        res = finnhub_client.company_news(ticker, _from=from_date, to=to_date)

        if not isinstance(res, list):
            logger.error(f"Invalid response format from Finnhub company news for {ticker}")
            return None
        return res

    except Exception as e:
        logger.error(f"Error fetching company news from Finnhub for {ticker}: {e}")
        return None
