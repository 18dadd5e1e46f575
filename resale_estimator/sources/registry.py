"""Builds the ordered adapter chains for each listing branch from settings."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List

import httpx

from resale_estimator.config import Settings
from resale_estimator.sources.base import SourceAdapter
from resale_estimator.sources.ebay_browse import EbayBrowseAdapter
from resale_estimator.sources.ebay_finding import EbayFindingCurrentAdapter, EbayFindingSoldAdapter
from resale_estimator.sources.ebay_insights import EbayInsightsAdapter
from resale_estimator.sources.etsy import EtsyAdapter

logger = logging.getLogger(__name__)


@dataclass
class SourceChains:
    """Primary-first adapter chains for the current and sold branches."""

    current: List[SourceAdapter] = field(default_factory=list)
    sold: List[SourceAdapter] = field(default_factory=list)

    def configured_sources(self) -> Dict[str, bool]:
        """Map each adapter's source tag to whether it is configured."""
        return {
            adapter.source: adapter.is_configured()
            for adapter in self.current + self.sold
        }

    def any_configured(self) -> bool:
        return any(self.configured_sources().values())


def build_source_chains(settings: Settings, http_client: httpx.AsyncClient) -> SourceChains:
    """
    Build adapter chains.

    Current: Browse, then Finding (active), then Etsy when enabled.
    Sold: Insights, then Finding (completed) when ``sold_fallback_enabled``.

    Args:
        settings: Application settings
        http_client: Shared HTTP client for all adapters

    Returns:
        SourceChains
    """
    has_credentials = bool(settings.ebay_client_id and settings.ebay_client_secret)
    limit = settings.result_limit

    current: List[SourceAdapter] = [
        EbayBrowseAdapter(
            http_client,
            marketplace_id=settings.ebay_marketplace_id,
            limit=limit,
            credentials_present=has_credentials,
        ),
        EbayFindingCurrentAdapter(
            http_client,
            app_id=settings.finding_app_id,
            global_id=settings.ebay_global_id,
            limit=limit,
        ),
    ]
    if settings.etsy_fallback_enabled:
        current.append(
            EtsyAdapter(
                http_client,
                api_key=settings.etsy_api_key,
                oauth_token=settings.etsy_oauth_token,
                limit=limit,
            )
        )

    sold: List[SourceAdapter] = [
        EbayInsightsAdapter(
            http_client,
            marketplace_id=settings.ebay_marketplace_id,
            limit=limit,
            credentials_present=has_credentials,
        ),
    ]
    if settings.sold_fallback_enabled:
        sold.append(
            EbayFindingSoldAdapter(
                http_client,
                app_id=settings.finding_app_id,
                global_id=settings.ebay_global_id,
                limit=limit,
            )
        )

    chains = SourceChains(current=current, sold=sold)
    logger.info(f"Configured sources: {chains.configured_sources()}")
    return chains
