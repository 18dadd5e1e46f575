"""Assembles branch results and statistics into the estimate payload."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from resale_estimator.sources.base import CanonicalItem
from resale_estimator.stats import StatSummary, summarize

NOTE_SEPARATOR = " | "


@dataclass
class EstimateResult:
    """Merged listings, per-series statistics and the diagnostic trail."""

    items_current: List[CanonicalItem]
    items_sold: List[CanonicalItem]
    stats_current: StatSummary
    stats_sold: StatSummary
    stats_combined: StatSummary
    notes: List[str] = field(default_factory=list)
    # Set when any adapter or token call failed; the wire payload does not carry it
    degraded: bool = False

    @property
    def note(self) -> str:
        return NOTE_SEPARATOR.join(self.notes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items_current": [item.to_dict() for item in self.items_current],
            "items_sold": [item.to_dict() for item in self.items_sold],
            "stats": {
                "current": self.stats_current.to_dict(),
                "sold": self.stats_sold.to_dict(),
                "combined": self.stats_combined.to_dict(),
            },
            "note": self.note,
        }


def assemble(
    items_current: Sequence[CanonicalItem],
    items_sold: Sequence[CanonicalItem],
    notes: Sequence[str],
    degraded: bool = False,
) -> EstimateResult:
    """Summarize each series and their concatenation with three independent calls."""
    current = list(items_current)
    sold = list(items_sold)
    return EstimateResult(
        items_current=current,
        items_sold=sold,
        stats_current=summarize(item.price for item in current),
        stats_sold=summarize(item.price for item in sold),
        stats_combined=summarize(item.price for item in current + sold),
        notes=list(notes),
        degraded=degraded,
    )
