"""Shared request shape for the OAuth-protected eBay Buy APIs."""

from __future__ import annotations

from typing import Dict, Optional

import httpx

from resale_estimator.sources.base import SourceAdapter, TermKind


class EbayBuyAdapter(SourceAdapter):
    """Base for Browse and Marketplace Insights searches."""

    supports_product_code = True

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        marketplace_id: str = "EBAY_US",
        limit: int = 50,
        credentials_present: bool = True,
    ):
        super().__init__(http_client, limit=limit)
        self.marketplace_id = marketplace_id
        self.credentials_present = credentials_present

    def is_configured(self) -> bool:
        return self.credentials_present

    def build_params(self, term: str, kind: TermKind) -> Dict[str, str]:
        params = {"limit": str(self.limit)}
        if kind is TermKind.PRODUCT_CODE:
            params["gtin"] = term
        else:
            params["q"] = term
        return params

    def build_headers(self, token: Optional[str]) -> Dict[str, str]:
        headers = super().build_headers(token)
        headers["X-EBAY-C-MARKETPLACE-ID"] = self.marketplace_id
        return headers
