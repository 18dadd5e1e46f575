"""Robust descriptive statistics over price series.

Quantiles use the midpoint of the two order statistics bounding
``(n - 1) * p``; the trimmed average drops values outside the Tukey fences
``[p25 - 1.5 * iqr, p75 + 1.5 * iqr]``.
"""

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Optional

NAN = float("nan")
TUKEY_K = 1.5


@dataclass(frozen=True)
class StatSummary:
    """Statistical summary of a price series."""

    count: int
    min: float
    max: float
    avg: float
    median: float
    p25: float
    p75: float
    avg_trimmed: float                  # Mean within the Tukey fences

    @classmethod
    def empty(cls) -> "StatSummary":
        return cls(
            count=0,
            min=NAN,
            max=NAN,
            avg=NAN,
            median=NAN,
            p25=NAN,
            p75=NAN,
            avg_trimmed=NAN,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Wire form; NaN becomes None since JSON has no NaN literal."""
        return {key: _json_number(value) for key, value in asdict(self).items()}


def _json_number(value: Any) -> Optional[Any]:
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def _quantile(ordered: List[float], p: float) -> float:
    index = (len(ordered) - 1) * p
    lo = math.floor(index)
    hi = math.ceil(index)
    return (ordered[lo] + ordered[hi]) / 2


def summarize(prices: Iterable[float]) -> StatSummary:
    """
    Summarize a price series.

    Non-finite values are ignored. An empty series yields ``count == 0`` and
    NaN for every other field.

    Args:
        prices: Numeric price series in any order

    Returns:
        StatSummary
    """
    ordered = sorted(
        float(p) for p in prices
        if isinstance(p, (int, float)) and not isinstance(p, bool) and math.isfinite(p)
    )
    if not ordered:
        return StatSummary.empty()

    n = len(ordered)
    avg = sum(ordered) / n

    p25 = _quantile(ordered, 0.25)
    median = _quantile(ordered, 0.5)
    p75 = _quantile(ordered, 0.75)

    iqr = p75 - p25
    low_fence = p25 - TUKEY_K * iqr
    high_fence = p75 + TUKEY_K * iqr

    trimmed = [v for v in ordered if low_fence <= v <= high_fence]
    avg_trimmed = sum(trimmed) / len(trimmed) if trimmed else avg

    return StatSummary(
        count=n,
        min=ordered[0],
        max=ordered[-1],
        avg=avg,
        median=median,
        p25=p25,
        p75=p75,
        avg_trimmed=avg_trimmed,
    )
