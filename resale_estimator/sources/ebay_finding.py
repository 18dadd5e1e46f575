"""Legacy eBay Finding API adapters (app id only, no OAuth).

The Finding service wraps every value in a single-element list and reports
most failures, including throttling, inside an HTTP 200 payload.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from resale_estimator.errors import RateLimitedError, SourceHttpError
from resale_estimator.sources.base import ListingState, SourceAdapter, TermKind
from resale_estimator.sources.extract import dig, first_text

FINDING_ENDPOINT = "https://svcs.ebay.com/services/search/FindingService/v1"
SERVICE_VERSION = "1.13.0"

# errorId reported when the app id exceeds its call quota
RATE_LIMIT_ERROR_IDS = {"10001"}


class EbayFindingAdapter(SourceAdapter):
    """Base for Finding API keyword searches."""

    endpoint = FINDING_ENDPOINT
    operation: str = ""

    title_extractors = [dig("title", 0)]
    price_extractors = [
        dig("sellingStatus", 0, "currentPrice", 0, "__value__"),
        dig("sellingStatus", 0, "convertedCurrentPrice", 0, "__value__"),
    ]
    condition_extractors = [dig("condition", 0, "conditionDisplayName", 0)]
    url_extractors = [dig("viewItemURL", 0)]

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        app_id: str,
        global_id: str = "EBAY-US",
        limit: int = 50,
    ):
        super().__init__(http_client, limit=limit)
        self.app_id = app_id
        self.global_id = global_id
        self.result_extractors = [
            dig(f"{self.operation}Response", 0, "searchResult", 0, "item"),
        ]

    def is_configured(self) -> bool:
        return bool(self.app_id)

    def build_params(self, term: str, kind: TermKind) -> Dict[str, str]:
        return {
            "OPERATION-NAME": self.operation,
            "SERVICE-VERSION": SERVICE_VERSION,
            "SECURITY-APPNAME": self.app_id,
            "RESPONSE-DATA-FORMAT": "JSON",
            "REST-PAYLOAD": "true",
            "GLOBAL-ID": self.global_id,
            "keywords": term,
            "paginationInput.entriesPerPage": str(self.limit),
        }

    def build_headers(self, token: Optional[str]) -> Dict[str, str]:
        return {"Accept": "application/json"}

    def check_payload(self, data: Dict[str, Any]) -> None:
        """Classify failures the Finding API embeds in a 200 response."""
        errors = self._collect_errors(data)
        for error in errors:
            error_id = first_text(error, [dig("errorId", 0), dig("errorId")])
            if error_id in RATE_LIMIT_ERROR_IDS:
                message = first_text(error, [dig("message", 0)]) or "call quota exceeded"
                raise RateLimitedError(self.source, 200, message=f"rate limited (errorId {error_id}): {message}")

        ack = first_text(data, [dig(f"{self.operation}Response", 0, "ack", 0)])
        if ack == "Failure":
            message = "request failed"
            if errors:
                message = first_text(errors[0], [dig("message", 0)]) or message
            raise SourceHttpError(self.source, 200, message=f"Finding API failure: {message}")

    def _collect_errors(self, data: Dict[str, Any]) -> List[Dict[str, Any]]:
        errors: List[Dict[str, Any]] = []
        for locate in (
            dig("errorMessage", 0, "error"),
            dig(f"{self.operation}Response", 0, "errorMessage", 0, "error"),
        ):
            found = locate(data)
            if isinstance(found, list):
                errors.extend(e for e in found if isinstance(e, dict))
        return errors


class EbayFindingCurrentAdapter(EbayFindingAdapter):
    name = "eBay Finding"
    source = "ebay_current_legacy"
    listing_state = ListingState.CURRENT
    operation = "findItemsByKeywords"


class EbayFindingSoldAdapter(EbayFindingAdapter):
    name = "eBay Finding"
    source = "ebay_sold_legacy"
    listing_state = ListingState.SOLD
    operation = "findCompletedItems"

    def build_params(self, term: str, kind: TermKind) -> Dict[str, str]:
        params = super().build_params(term, kind)
        params["itemFilter(0).name"] = "SoldItemsOnly"
        params["itemFilter(0).value"] = "true"
        return params
