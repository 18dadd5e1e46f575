"""Base classes and canonical records for marketplace source adapters."""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import httpx

from resale_estimator.errors import (
    ParseError,
    RateLimitedError,
    SourceHttpError,
    SourceTimeoutError,
    SourceTransportError,
)
from resale_estimator.sources.extract import Extractor, first_list, first_price, first_text

logger = logging.getLogger(__name__)

PRODUCT_CODE_RE = re.compile(r"^[0-9]{8,14}$", re.ASCII)


class TermKind(str, Enum):
    """How a search term is interpreted by the adapters."""

    PRODUCT_CODE = "product_code"
    KEYWORDS = "keywords"


class ListingState(str, Enum):
    CURRENT = "current"
    SOLD = "sold"


def classify_term(term: str) -> TermKind:
    """Classify a trimmed search term as a numeric product code or keywords."""
    if PRODUCT_CODE_RE.match(term):
        return TermKind.PRODUCT_CODE
    return TermKind.KEYWORDS


@dataclass
class CanonicalItem:
    """Source-agnostic listing record."""

    title: str
    price: float
    source: str
    condition: Optional[str] = None
    url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SourceResult:
    """Items returned by one adapter call, plus a diagnostic note."""

    items: List[CanonicalItem] = field(default_factory=list)
    note: str = ""


class SourceAdapter(ABC):
    """
    Base class for marketplace adapters.

    Subclasses describe transport (endpoint, params, headers) and the
    ordered extractors for each canonical field; the base class issues the
    request, classifies failures and normalizes records.
    """

    name: str = "unknown"
    source: str = "unknown"
    listing_state: ListingState = ListingState.CURRENT
    endpoint: str = ""
    # Authorization scope needed for a bearer token, if any
    scope: Optional[str] = None
    # Whether product codes are sent as an exact-code filter
    supports_product_code: bool = False

    result_extractors: List[Extractor] = []
    title_extractors: List[Extractor] = []
    price_extractors: List[Extractor] = []
    condition_extractors: List[Extractor] = []
    url_extractors: List[Extractor] = []

    def __init__(self, http_client: httpx.AsyncClient, limit: int = 50):
        self.http_client = http_client
        self.limit = limit

    def is_configured(self) -> bool:
        """Whether this adapter has the configuration it needs to run."""
        return True

    @abstractmethod
    def build_params(self, term: str, kind: TermKind) -> Dict[str, str]:
        """Build query parameters for a search."""
        pass

    def build_headers(self, token: Optional[str]) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def check_payload(self, data: Dict[str, Any]) -> None:
        """Raise for provider errors embedded in a successful response."""
        return None

    def describe(self, kind: TermKind) -> str:
        """Human-readable label for notes, e.g. ``eBay Browse (GTIN, current)``."""
        if self.supports_product_code and kind is TermKind.PRODUCT_CODE:
            mode = "GTIN"
        else:
            mode = "keywords"
        return f"{self.name} ({mode}, {self.listing_state.value})"

    async def search(self, term: str, token: Optional[str] = None) -> SourceResult:
        """
        Query the marketplace and normalize results.

        Args:
            term: Trimmed, non-empty search term
            token: Bearer token for adapters with a scope

        Returns:
            SourceResult with canonical items and a note

        Raises:
            SourceHttpError: On a non-success response
            RateLimitedError: When the provider signals throttling
            ParseError: When the body is not a JSON object
            SourceTimeoutError: When the request times out
            SourceTransportError: On other transport failures
        """
        kind = classify_term(term)
        data = await self._get_json(self.build_params(term, kind), self.build_headers(token))
        self.check_payload(data)

        records = first_list(data, self.result_extractors)
        items = self.normalize(records)
        dropped = len(records) - len(items)
        if dropped:
            logger.debug(f"{self.source}: dropped {dropped} records without a usable price")

        return SourceResult(items=items, note=f"{self.describe(kind)}: {len(items)} items")

    def normalize(self, records: List[Any]) -> List[CanonicalItem]:
        """Convert raw records to canonical items, skipping unparseable ones."""
        items: List[CanonicalItem] = []
        for record in records:
            if not isinstance(record, dict):
                continue
            item = self.to_item(record)
            if item is not None:
                items.append(item)
        return items

    def to_item(self, record: Dict[str, Any]) -> Optional[CanonicalItem]:
        price = first_price(record, self.price_extractors)
        if price is None:
            return None
        return CanonicalItem(
            title=first_text(record, self.title_extractors) or "",
            price=price,
            source=self.source,
            condition=first_text(record, self.condition_extractors),
            url=first_text(record, self.url_extractors),
        )

    async def _get_json(self, params: Dict[str, str], headers: Dict[str, str]) -> Dict[str, Any]:
        """Issue the GET request and decode a JSON object body."""
        try:
            response = await self.http_client.get(self.endpoint, params=params, headers=headers)
        except httpx.TimeoutException as e:
            raise SourceTimeoutError(self.source, f"request timed out ({type(e).__name__})") from e
        except httpx.HTTPError as e:
            raise SourceTransportError(self.source, f"{type(e).__name__}: {e}") from e

        if response.status_code == 429:
            raise RateLimitedError(self.source, 429, response.text)
        if not response.is_success:
            raise SourceHttpError(self.source, response.status_code, response.text)

        try:
            data = response.json()
        except ValueError as e:
            raise ParseError(self.source, "response body is not JSON") from e

        if not isinstance(data, dict):
            raise ParseError(self.source, f"expected a JSON object, got {type(data).__name__}")
        return data
