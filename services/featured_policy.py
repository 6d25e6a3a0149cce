# services/featured_policy.py
"""
Named policies for the "featured stocks" list.

Two readings of "featured" exist: the highest dividend yields above a floor,
or a fixed editorial list. Both are modelled explicitly and the active one is
chosen by the FEATURED_POLICY setting.
"""

from typing import Any, Dict, List, Sequence, Union
from pydantic import BaseModel, Field
from shared.contracts import PreferredStock


class TopByYieldPolicy(BaseModel):
    """Stocks yielding strictly more than `threshold`, highest yield first."""
    name: str = "top_by_yield"
    threshold: float = 6.0
    count: int = Field(6, ge=0)

    def select(self, stocks: Sequence[PreferredStock]) -> List[PreferredStock]:
        eligible = [s for s in stocks if s.dividendYield > self.threshold]
        eligible.sort(key=lambda s: s.dividendYield, reverse=True)
        return eligible[: self.count]


class EditorialPolicy(BaseModel):
    """A hand-picked list of tickers, in list order. Unknown tickers are skipped."""
    name: str = "editorial"
    tickers: List[str]

    def select(self, stocks: Sequence[PreferredStock]) -> List[PreferredStock]:
        by_ticker = {s.ticker: s for s in stocks}
        return [by_ticker[t] for t in self.tickers if t in by_ticker]


FeaturedPolicy = Union[TopByYieldPolicy, EditorialPolicy]


def build_featured_policy(settings: Dict[str, Any]) -> FeaturedPolicy:
    """Builds the configured policy from app settings."""
    policy_name = settings.get("FEATURED_POLICY", "top_by_yield")
    if policy_name == "editorial":
        return EditorialPolicy(tickers=list(settings.get("FEATURED_TICKERS", [])))
    if policy_name != "top_by_yield":
        raise ValueError(f"Unknown FEATURED_POLICY '{policy_name}'. Use 'top_by_yield' or 'editorial'.")
    return TopByYieldPolicy(
        threshold=settings.get("FEATURED_MIN_YIELD", 6.0),
        count=settings.get("FEATURED_COUNT", 6),
    )
