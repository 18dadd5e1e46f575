"""Wires settings, HTTP client, token manager and adapters into an estimator."""

import logging
from typing import Union

import httpx

from resale_estimator.auth.token_manager import TokenManager
from resale_estimator.cache import CachedEstimator
from resale_estimator.config import Settings
from resale_estimator.orchestrator import EstimateOrchestrator
from resale_estimator.sources.registry import build_source_chains

logger = logging.getLogger(__name__)

Estimator = Union[EstimateOrchestrator, CachedEstimator]


def build_http_client(settings: Settings) -> httpx.AsyncClient:
    """Create the shared HTTP client with a bounded per-call timeout."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.request_timeout_seconds),
        follow_redirects=True,
        headers={"User-Agent": "resale-estimator/0.1"},
    )


def build_estimator(settings: Settings, http_client: httpx.AsyncClient) -> Estimator:
    """
    Build the estimator for this process.

    Args:
        settings: Application settings
        http_client: Shared HTTP client

    Returns:
        An orchestrator, wrapped in the response cache when enabled
    """
    token_manager = TokenManager(
        client_id=settings.ebay_client_id,
        client_secret=settings.ebay_client_secret,
        token_url=settings.ebay_token_url,
        http_client=http_client,
        safety_margin=settings.token_safety_margin_seconds,
    )
    chains = build_source_chains(settings, http_client)
    if not chains.any_configured():
        logger.error("No marketplace source is configured; estimates will be refused")

    orchestrator = EstimateOrchestrator.from_chains(
        chains,
        token_manager=token_manager,
        call_timeout=settings.request_timeout_seconds,
    )
    if settings.response_cache_enabled:
        logger.info(f"Response cache enabled (ttl={settings.response_cache_ttl_seconds}s)")
        return CachedEstimator(
            orchestrator,
            redis_url=settings.redis_url,
            ttl_seconds=settings.response_cache_ttl_seconds,
        )
    return orchestrator
