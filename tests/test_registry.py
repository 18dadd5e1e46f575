"""Tests for adapter chain construction and estimator wiring."""

import httpx
import pytest

from resale_estimator.cache import CachedEstimator
from resale_estimator.config import Settings
from resale_estimator.orchestrator import EstimateOrchestrator
from resale_estimator.service import build_estimator
from resale_estimator.sources import (
    EbayBrowseAdapter,
    EbayFindingCurrentAdapter,
    EbayFindingSoldAdapter,
    EbayInsightsAdapter,
    EtsyAdapter,
    build_source_chains,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("EBAY_CLIENT_ID", "EBAY_CLIENT_SECRET", "EBAY_FINDING_APP_ID", "ETSY_API_KEY",
                 "EBAY_MARKETPLACE_ID", "X_EBAY_MARKETPLACE_ID", "RESPONSE_CACHE_ENABLED"):
        monkeypatch.delenv(name, raising=False)


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


@pytest.fixture
def http_client():
    return httpx.AsyncClient()


def test_full_chains(http_client):
    settings = make_settings(
        ebay_client_id="id",
        ebay_client_secret="secret",
        etsy_api_key="etsy",
        ebay_marketplace_id="EBAY_DE",
        result_limit=20,
    )

    chains = build_source_chains(settings, http_client)

    assert [type(a) for a in chains.current] == [EbayBrowseAdapter, EbayFindingCurrentAdapter, EtsyAdapter]
    assert [type(a) for a in chains.sold] == [EbayInsightsAdapter, EbayFindingSoldAdapter]
    assert all(chains.configured_sources().values())
    assert chains.current[0].marketplace_id == "EBAY_DE"
    assert chains.current[1].app_id == "id"
    assert all(a.limit == 20 for a in chains.current + chains.sold)


def test_finding_app_id_override(http_client):
    settings = make_settings(ebay_client_id="id", ebay_finding_app_id="legacy-app")
    chains = build_source_chains(settings, http_client)
    assert chains.current[1].app_id == "legacy-app"
    assert chains.sold[1].app_id == "legacy-app"


def test_toggles_remove_fallbacks(http_client):
    settings = make_settings(sold_fallback_enabled=False, etsy_fallback_enabled=False)
    chains = build_source_chains(settings, http_client)
    assert [type(a) for a in chains.current] == [EbayBrowseAdapter, EbayFindingCurrentAdapter]
    assert [type(a) for a in chains.sold] == [EbayInsightsAdapter]


def test_nothing_configured(http_client):
    chains = build_source_chains(make_settings(), http_client)
    assert not chains.any_configured()


def test_etsy_only_counts_as_configured(http_client):
    chains = build_source_chains(make_settings(etsy_api_key="k"), http_client)
    assert chains.any_configured()
    assert chains.configured_sources()["etsy_current"]
    assert not chains.configured_sources()["ebay_current"]


def test_build_estimator_plain_and_cached(http_client):
    plain = build_estimator(make_settings(ebay_client_id="id", ebay_client_secret="s"), http_client)
    assert isinstance(plain, EstimateOrchestrator)
    assert plain.token_manager.has_credentials()
    assert plain.call_timeout == 12.0

    cached = build_estimator(
        make_settings(response_cache_enabled=True, response_cache_ttl_seconds=30),
        http_client,
    )
    assert isinstance(cached, CachedEstimator)
    assert cached.ttl == 30


def test_marketplace_env_alias(monkeypatch):
    monkeypatch.setenv("X_EBAY_MARKETPLACE_ID", "EBAY_AU")
    assert make_settings().ebay_marketplace_id == "EBAY_AU"
