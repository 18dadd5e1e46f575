"""eBay Marketplace Insights adapter for sold comps."""

from resale_estimator.auth.token_manager import INSIGHTS_SCOPE
from resale_estimator.sources.base import ListingState
from resale_estimator.sources.ebay_buy import EbayBuyAdapter
from resale_estimator.sources.extract import dig


class EbayInsightsAdapter(EbayBuyAdapter):
    """
    Sold items from the Marketplace Insights item sales search.

    The payload has been seen with the result array under several names and
    with the listing fields either flat or nested under ``item``.
    """

    name = "eBay Insights"
    source = "ebay_sold"
    listing_state = ListingState.SOLD
    endpoint = "https://api.ebay.com/buy/marketplace_insights/v1/item_sales/search"
    scope = INSIGHTS_SCOPE

    result_extractors = [
        dig("itemSales"),
        dig("item_sales"),
        dig("items"),
    ]
    title_extractors = [
        dig("title"),
        dig("itemTitle"),
        dig("item", "title"),
    ]
    price_extractors = [
        dig("price", "value"),
        dig("soldPrice", "value"),
        dig("lastSoldPrice", "value"),
        dig("transactionPrice", "value"),
        dig("item", "price", "value"),
    ]
    condition_extractors = [
        dig("condition"),
        dig("itemCondition"),
        dig("item", "condition"),
    ]
    url_extractors = [
        dig("itemWebUrl"),
        dig("item_web_url"),
        dig("item", "itemWebUrl"),
    ]
