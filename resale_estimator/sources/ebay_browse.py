"""eBay Browse API adapter for current listings."""

from resale_estimator.auth.token_manager import BROWSE_SCOPE
from resale_estimator.sources.base import ListingState
from resale_estimator.sources.ebay_buy import EbayBuyAdapter
from resale_estimator.sources.extract import dig


class EbayBrowseAdapter(EbayBuyAdapter):
    """Active fixed-price and auction listings from the Browse item summary search."""

    name = "eBay Browse"
    source = "ebay_current"
    listing_state = ListingState.CURRENT
    endpoint = "https://api.ebay.com/buy/browse/v1/item_summary/search"
    scope = BROWSE_SCOPE

    result_extractors = [dig("itemSummaries")]
    title_extractors = [dig("title")]
    price_extractors = [
        dig("price", "value"),
        dig("currentBidPrice", "value"),
    ]
    condition_extractors = [dig("condition")]
    url_extractors = [dig("itemWebUrl")]
