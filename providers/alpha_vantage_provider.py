# providers/alpha_vantage_provider.py
import os
import requests

import logging
logger = logging.getLogger(__name__)

# The base URL for the Alpha Vantage API
ALPHA_VANTAGE_API_URL = "https://www.alphavantage.co/query"
DEFAULT_API_KEY = "demo"


def get_global_quote(ticker: str, timeout: float = 10) -> dict | None:
    """
    Fetches the GLOBAL_QUOTE block for a symbol from Alpha Vantage.

    Args:
        ticker: The symbol to quote.
        timeout: Seconds to wait for the HTTP response.

    Returns:
        The raw "Global Quote" dictionary (keys like "05. price"), or None if
        an error occurs or the provider answered with a note instead of a quote.
    """
    api_key = os.getenv('ALPHA_VANTAGE_API_KEY') or DEFAULT_API_KEY

    params = {
        'function': 'GLOBAL_QUOTE',
        'symbol': ticker,
        'apikey': api_key,
    }

    try:
        response = requests.get(ALPHA_VANTAGE_API_URL, params=params, timeout=timeout)
        # Raise an exception for bad status codes (4xx or 5xx)
        response.raise_for_status()

        data = response.json()

        quote = data.get('Global Quote') if isinstance(data, dict) else None
        if not quote or not isinstance(quote, dict):
            # Rate limiting and bad keys come back as 200 with a "Note"/"Information" body
            notice = data.get('Note') or data.get('Information') if isinstance(data, dict) else None
            logger.warning(f"Alpha Vantage returned no quote for {ticker}: {notice}")
            return None
        return quote

    except requests.exceptions.RequestException as e:
        logger.error(f"Error fetching quote from Alpha Vantage for {ticker}: {e}")
        return None
    except ValueError as e:
        # response.json() on a non-JSON body
        logger.error(f"Malformed JSON from Alpha Vantage for {ticker}: {e}")
        return None
