"""Etsy active listings adapter (optional current-listing fallback)."""

from __future__ import annotations

import math
from typing import Any, Dict, Optional

import httpx

from resale_estimator.sources.base import ListingState, SourceAdapter, TermKind
from resale_estimator.sources.extract import Extractor, dig, parse_price

LISTING_URL = "https://www.etsy.com/listing/"


def money(key: str) -> Extractor:
    """Extract ``amount / divisor`` from an Etsy money object."""

    def extract(record: Any) -> Optional[float]:
        value = dig(key)(record)
        if not isinstance(value, dict):
            return None
        amount = parse_price(value.get("amount"))
        divisor = parse_price(value.get("divisor"))
        if amount is None or divisor is None or divisor == 0:
            return None
        result = amount / divisor
        return result if math.isfinite(result) else None

    return extract


def _plain_price(record: Any) -> Any:
    value = dig("price")(record)
    return value if isinstance(value, str) else None


def _listing_url(record: Any) -> Optional[str]:
    listing_id = dig("listing_id")(record)
    if listing_id in (None, ""):
        return None
    return f"{LISTING_URL}{listing_id}"


def _who_made(record: Any) -> Optional[str]:
    who_made = dig("who_made")(record)
    return f"who_made:{who_made}" if who_made else None


class EtsyAdapter(SourceAdapter):
    """Active Etsy listings searched by keywords."""

    name = "Etsy"
    source = "etsy_current"
    listing_state = ListingState.CURRENT
    endpoint = "https://api.etsy.com/v3/application/listings/active"

    result_extractors = [dig("results"), dig("listings")]
    title_extractors = [dig("title"), dig("listing_title")]
    price_extractors = [money("price"), money("original_price"), _plain_price]
    condition_extractors = [_who_made]
    url_extractors = [dig("url"), _listing_url]

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        oauth_token: str = "",
        limit: int = 50,
    ):
        super().__init__(http_client, limit=limit)
        self.api_key = api_key
        self.oauth_token = oauth_token

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def build_params(self, term: str, kind: TermKind) -> Dict[str, str]:
        return {
            "limit": str(self.limit),
            "state": "active",
            "keywords": term,
            "sort_on": "score",
        }

    def build_headers(self, token: Optional[str]) -> Dict[str, str]:
        headers = super().build_headers(self.oauth_token or None)
        headers["x-api-key"] = self.api_key
        return headers
