# helper_functions.py
import hashlib
import logging
from typing import Any, Iterable, List, Optional, Type, TypeVar
from pydantic import BaseModel, ValidationError
from shared.contracts import NewsArticleCreate, PreferredStock, Quote

# Use logger
logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

EXCERPT_MAX_CHARS = 200
EXCERPT_ELLIPSIS = "..."


def parse_payload(model: Type[ModelT], payload: Any, context: str) -> Optional[ModelT]:
    """
    Validates a raw JSON payload against a contract model.

    Args:
        model: The Pydantic contract to validate against.
        payload: The decoded request body (may be None for non-JSON bodies).
        context: Short label used in the log line, e.g. "POST /api/stocks".

    Returns:
        The validated model, or None if the payload does not match the contract.
        Field-level details are logged but never returned to the client.
    """
    if payload is None:
        logger.warning(f"{context}: request body is missing or not JSON")
        return None
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        logger.warning(f"{context}: payload failed contract validation: {e}")
        return None


def to_json(model: BaseModel, **kwargs) -> dict:
    """Serializes a contract model to a JSON-safe dict (datetimes as ISO strings)."""
    return model.model_dump(mode="json", **kwargs)


def to_json_list(models: Iterable[BaseModel]) -> List[dict]:
    return [to_json(m) for m in models]


def truncate_excerpt(text: str, limit: int = EXCERPT_MAX_CHARS) -> str:
    """Cuts text to `limit` characters and marks the cut with an ellipsis."""
    if len(text) > limit:
        return text[:limit] + EXCERPT_ELLIPSIS
    return text


def make_article_id(article: NewsArticleCreate) -> str:
    """
    Derives a stable identity for an article from its content.

    The source URL identifies an article when present; otherwise the
    title, source and publication timestamp together do. The same article
    fetched on two different refreshes therefore keeps its id.
    """
    if article.url:
        key = article.url.strip()
    else:
        key = f"{article.title.strip()}|{article.source.strip()}|{article.publishedAt.isoformat()}"
    return hashlib.sha1(key.encode("utf-8")).hexdigest()[:16]


def build_regular_stock(ticker: str, quote: Quote) -> PreferredStock:
    """
    Wraps a live quote for a symbol that is not in the store in a stock-shaped
    record. Fields the quote providers do not supply get placeholder values.
    """
    return PreferredStock(
        ticker=ticker,
        name=f"{ticker} Stock",
        price=quote.price,
        change=quote.change,
        changePercent=quote.changePercent,
        dividendYield=0.0,
        marketCap="N/A",
        volume=0,
        lastTrade=quote.lastTrade,
        sector="Unknown",
        description=f"Real-time data for {ticker}",
        isActive=True,
    )
