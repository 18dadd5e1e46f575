"""Tests for marketplace source adapters."""

import httpx
import pytest

from resale_estimator.errors import (
    ParseError,
    RateLimitedError,
    SourceHttpError,
    SourceTimeoutError,
    SourceTransportError,
)
from resale_estimator.sources.base import TermKind, classify_term
from resale_estimator.sources.ebay_browse import EbayBrowseAdapter
from resale_estimator.sources.ebay_finding import EbayFindingCurrentAdapter, EbayFindingSoldAdapter
from resale_estimator.sources.ebay_insights import EbayInsightsAdapter
from resale_estimator.sources.etsy import EtsyAdapter

UPC = "008421040056"


class TestClassifyTerm:

    @pytest.mark.parametrize("term", ["12345678", UPC, "12345678901234"])
    def test_product_codes(self, term):
        assert classify_term(term) is TermKind.PRODUCT_CODE

    @pytest.mark.parametrize("term", ["1234567", "123456789012345", "beanie baby", "12345 678", "١٢٣٤٥٦٧٨"])
    def test_keywords(self, term):
        assert classify_term(term) is TermKind.KEYWORDS


class TestEbayBrowseAdapter:

    @pytest.mark.asyncio
    async def test_product_code_search(self, make_client, json_responder):
        handler = json_responder({
            "itemSummaries": [
                {
                    "title": "Ty Beanie Baby Peace Bear",
                    "price": {"value": "24.99", "currency": "USD"},
                    "condition": "New",
                    "itemWebUrl": "https://www.ebay.com/itm/1",
                },
                {
                    "title": "Auction only",
                    "currentBidPrice": {"value": "3.50"},
                },
                {
                    "title": "Bad price",
                    "price": {"value": "call for price"},
                },
            ]
        })
        adapter = EbayBrowseAdapter(make_client(handler), marketplace_id="EBAY_GB", limit=25)

        result = await adapter.search(UPC, token="tok123")

        request = handler.requests[0]
        assert request.url.path == "/buy/browse/v1/item_summary/search"
        assert request.url.params["gtin"] == UPC
        assert "q" not in request.url.params
        assert request.url.params["limit"] == "25"
        assert request.headers["Authorization"] == "Bearer tok123"
        assert request.headers["X-EBAY-C-MARKETPLACE-ID"] == "EBAY_GB"

        assert [item.price for item in result.items] == [24.99, 3.5]
        first = result.items[0]
        assert first.title == "Ty Beanie Baby Peace Bear"
        assert first.condition == "New"
        assert first.url == "https://www.ebay.com/itm/1"
        assert first.source == "ebay_current"
        assert result.items[1].condition is None
        assert result.note == "eBay Browse (GTIN, current): 2 items"

    @pytest.mark.asyncio
    async def test_keyword_search(self, make_client, json_responder):
        handler = json_responder({"total": 0})
        adapter = EbayBrowseAdapter(make_client(handler))

        result = await adapter.search("peace bear", token="t")

        assert handler.requests[0].url.params["q"] == "peace bear"
        assert "gtin" not in handler.requests[0].url.params
        assert result.items == []
        assert result.note == "eBay Browse (keywords, current): 0 items"

    @pytest.mark.asyncio
    async def test_http_error_carries_status_and_truncated_body(self, make_client, json_responder):
        handler = json_responder("x" * 1000, status_code=500)
        adapter = EbayBrowseAdapter(make_client(handler))

        with pytest.raises(SourceHttpError) as exc_info:
            await adapter.search("bear", token="t")

        assert exc_info.value.status == 500
        assert len(exc_info.value.body) <= 303
        assert not isinstance(exc_info.value, RateLimitedError)

    @pytest.mark.asyncio
    async def test_429_is_rate_limited(self, make_client, json_responder):
        handler = json_responder({"errors": [{"errorId": 1001}]}, status_code=429)
        adapter = EbayBrowseAdapter(make_client(handler))

        with pytest.raises(RateLimitedError) as exc_info:
            await adapter.search("bear", token="t")
        assert exc_info.value.status == 429

    @pytest.mark.asyncio
    async def test_non_json_body_is_parse_error(self, make_client, json_responder):
        handler = json_responder("<html>maintenance</html>")
        adapter = EbayBrowseAdapter(make_client(handler))

        with pytest.raises(ParseError):
            await adapter.search("bear", token="t")

    @pytest.mark.asyncio
    async def test_json_array_body_is_parse_error(self, make_client, json_responder):
        handler = json_responder([1, 2, 3])
        adapter = EbayBrowseAdapter(make_client(handler))

        with pytest.raises(ParseError):
            await adapter.search("bear", token="t")

    @pytest.mark.asyncio
    async def test_timeout(self, make_client):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        adapter = EbayBrowseAdapter(make_client(handler))
        with pytest.raises(SourceTimeoutError):
            await adapter.search("bear", token="t")

    @pytest.mark.asyncio
    async def test_transport_error(self, make_client):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        adapter = EbayBrowseAdapter(make_client(handler))
        with pytest.raises(SourceTransportError):
            await adapter.search("bear", token="t")

    def test_configured_tracks_credentials(self):
        assert EbayBrowseAdapter(None, credentials_present=True).is_configured()
        assert not EbayBrowseAdapter(None, credentials_present=False).is_configured()


class TestEbayInsightsAdapter:

    @pytest.mark.asyncio
    async def test_alternate_shapes(self, make_client, json_responder):
        handler = json_responder({
            "item_sales": [
                {
                    "item": {
                        "title": "Nested record",
                        "price": {"value": "15.00"},
                        "condition": "Used",
                        "itemWebUrl": "https://www.ebay.com/itm/2",
                    }
                },
                {
                    "itemTitle": "Flat record",
                    "lastSoldPrice": {"value": 30},
                    "itemCondition": "New with tags",
                    "item_web_url": "https://www.ebay.com/itm/3",
                },
                {"title": "No price at all"},
                "not a record",
            ]
        })
        adapter = EbayInsightsAdapter(make_client(handler))

        result = await adapter.search(UPC, token="tok")

        assert handler.requests[0].url.path == "/buy/marketplace_insights/v1/item_sales/search"
        assert [(i.title, i.price, i.condition, i.url) for i in result.items] == [
            ("Nested record", 15.0, "Used", "https://www.ebay.com/itm/2"),
            ("Flat record", 30.0, "New with tags", "https://www.ebay.com/itm/3"),
        ]
        assert all(item.source == "ebay_sold" for item in result.items)
        assert result.note == "eBay Insights (GTIN, sold): 2 items"

    @pytest.mark.asyncio
    async def test_item_sales_preferred_shape(self, make_client, json_responder):
        handler = json_responder({
            "itemSales": [{"title": "A", "soldPrice": {"value": "9.5"}}],
            "items": [{"title": "ignored", "price": {"value": 1}}],
        })
        adapter = EbayInsightsAdapter(make_client(handler))

        result = await adapter.search("bear", token="tok")

        assert [item.price for item in result.items] == [9.5]

    @pytest.mark.asyncio
    async def test_unknown_shape_is_empty(self, make_client, json_responder):
        adapter = EbayInsightsAdapter(make_client(json_responder({"whatever": {}})))
        result = await adapter.search("bear", token="tok")
        assert result.items == []


def finding_item(title, price, condition=None, url=None):
    item = {
        "title": [title],
        "sellingStatus": [{"currentPrice": [{"@currencyId": "USD", "__value__": price}]}],
    }
    if condition:
        item["condition"] = [{"conditionDisplayName": [condition]}]
    if url:
        item["viewItemURL"] = [url]
    return item


class TestEbayFindingAdapter:

    @pytest.mark.asyncio
    async def test_current_search(self, make_client, json_responder):
        handler = json_responder({
            "findItemsByKeywordsResponse": [{
                "ack": ["Success"],
                "searchResult": [{
                    "@count": "2",
                    "item": [
                        finding_item("Legs the Frog", "4.99", "Used", "https://www.ebay.com/itm/9"),
                        finding_item("Broken", "n/a"),
                    ],
                }],
            }]
        })
        adapter = EbayFindingCurrentAdapter(make_client(handler), app_id="APP-1")

        result = await adapter.search(UPC)

        params = handler.requests[0].url.params
        assert params["OPERATION-NAME"] == "findItemsByKeywords"
        assert params["SECURITY-APPNAME"] == "APP-1"
        assert params["keywords"] == UPC
        assert params["GLOBAL-ID"] == "EBAY-US"
        assert "Authorization" not in handler.requests[0].headers

        assert len(result.items) == 1
        item = result.items[0]
        assert (item.title, item.price, item.condition, item.url, item.source) == (
            "Legs the Frog", 4.99, "Used", "https://www.ebay.com/itm/9", "ebay_current_legacy"
        )
        assert result.note == "eBay Finding (keywords, current): 1 items"

    @pytest.mark.asyncio
    async def test_sold_search_filters_sold_items(self, make_client, json_responder):
        handler = json_responder({
            "findCompletedItemsResponse": [{
                "ack": ["Success"],
                "searchResult": [{"item": [finding_item("Sold bear", "12")]}],
            }]
        })
        adapter = EbayFindingSoldAdapter(make_client(handler), app_id="APP-1")

        result = await adapter.search("bear")

        params = handler.requests[0].url.params
        assert params["OPERATION-NAME"] == "findCompletedItems"
        assert params["itemFilter(0).name"] == "SoldItemsOnly"
        assert params["itemFilter(0).value"] == "true"
        assert result.items[0].source == "ebay_sold_legacy"
        assert result.note == "eBay Finding (keywords, sold): 1 items"

    @pytest.mark.asyncio
    async def test_embedded_rate_limit_error(self, make_client, json_responder):
        handler = json_responder({
            "errorMessage": [{
                "error": [{
                    "errorId": ["10001"],
                    "domain": ["Security"],
                    "subdomain": ["RateLimiter"],
                    "message": ["Service call has exceeded the number of times the operation is allowed to be called"],
                }]
            }]
        })
        adapter = EbayFindingCurrentAdapter(make_client(handler), app_id="APP-1")

        with pytest.raises(RateLimitedError) as exc_info:
            await adapter.search("bear")
        assert "10001" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_rate_limit_inside_operation_response(self, make_client, json_responder):
        handler = json_responder({
            "findCompletedItemsResponse": [{
                "ack": ["Failure"],
                "errorMessage": [{"error": [{"errorId": ["10001"], "message": ["quota"]}]}],
            }]
        })
        adapter = EbayFindingSoldAdapter(make_client(handler), app_id="APP-1")

        with pytest.raises(RateLimitedError):
            await adapter.search("bear")

    @pytest.mark.asyncio
    async def test_other_failure_is_http_error(self, make_client, json_responder):
        handler = json_responder({
            "findItemsByKeywordsResponse": [{
                "ack": ["Failure"],
                "errorMessage": [{"error": [{"errorId": ["11"], "message": ["Invalid app id"]}]}],
            }]
        })
        adapter = EbayFindingCurrentAdapter(make_client(handler), app_id="APP-1")

        with pytest.raises(SourceHttpError) as exc_info:
            await adapter.search("bear")
        assert not isinstance(exc_info.value, RateLimitedError)
        assert "Invalid app id" in str(exc_info.value)

    def test_requires_app_id(self):
        assert not EbayFindingCurrentAdapter(None, app_id="").is_configured()
        assert EbayFindingSoldAdapter(None, app_id="APP").is_configured()


class TestEtsyAdapter:

    @pytest.mark.asyncio
    async def test_money_objects_and_fallbacks(self, make_client, json_responder):
        handler = json_responder({
            "count": 4,
            "results": [
                {
                    "listing_id": 111,
                    "title": "Vintage Beanie",
                    "price": {"amount": 1850, "divisor": 100, "currency_code": "USD"},
                    "who_made": "someone_else",
                },
                {
                    "listing_title": "Original price only",
                    "original_price": {"amount": 500, "divisor": 100},
                    "url": "https://www.etsy.com/listing/222/x",
                },
                {"title": "String price", "price": "7.25"},
                {"title": "Zero divisor", "price": {"amount": 100, "divisor": 0}},
            ],
        })
        adapter = EtsyAdapter(make_client(handler), api_key="KEY", oauth_token="OAUTH")

        result = await adapter.search("beanie")

        request = handler.requests[0]
        assert request.headers["x-api-key"] == "KEY"
        assert request.headers["Authorization"] == "Bearer OAUTH"
        assert request.url.params["keywords"] == "beanie"
        assert request.url.params["state"] == "active"

        assert [(i.title, i.price) for i in result.items] == [
            ("Vintage Beanie", 18.5),
            ("Original price only", 5.0),
            ("String price", 7.25),
        ]
        assert result.items[0].url == "https://www.etsy.com/listing/111"
        assert result.items[0].condition == "who_made:someone_else"
        assert result.items[1].url == "https://www.etsy.com/listing/222/x"
        assert all(item.source == "etsy_current" for item in result.items)
        assert result.note == "Etsy (keywords, current): 3 items"

    @pytest.mark.asyncio
    async def test_no_bearer_without_oauth_token(self, make_client, json_responder):
        handler = json_responder({"listings": []})
        adapter = EtsyAdapter(make_client(handler), api_key="KEY")

        await adapter.search(UPC)

        assert "Authorization" not in handler.requests[0].headers

    def test_requires_api_key(self):
        assert not EtsyAdapter(None, api_key="").is_configured()
        assert EtsyAdapter(None, api_key="k").is_configured()
