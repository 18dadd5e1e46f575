"""Marketplace source adapters."""

from resale_estimator.sources.base import (
    CanonicalItem,
    ListingState,
    SourceAdapter,
    SourceResult,
    TermKind,
    classify_term,
)
from resale_estimator.sources.ebay_browse import EbayBrowseAdapter
from resale_estimator.sources.ebay_finding import EbayFindingCurrentAdapter, EbayFindingSoldAdapter
from resale_estimator.sources.ebay_insights import EbayInsightsAdapter
from resale_estimator.sources.etsy import EtsyAdapter
from resale_estimator.sources.registry import SourceChains, build_source_chains

__all__ = [
    "CanonicalItem",
    "ListingState",
    "SourceAdapter",
    "SourceResult",
    "TermKind",
    "classify_term",
    "EbayBrowseAdapter",
    "EbayFindingCurrentAdapter",
    "EbayFindingSoldAdapter",
    "EbayInsightsAdapter",
    "EtsyAdapter",
    "SourceChains",
    "build_source_chains",
]
