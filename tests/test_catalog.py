"""
Unit tests for catalog parsing, loading and filtering
"""
import pytest
from unittest.mock import Mock

from bookstall.catalog import ALL_CATEGORIES, CatalogStatus, CatalogStore, filter_catalog
from bookstall.clients.feed_client import FeedClient
from bookstall.config import Config
from bookstall.errors import FeedUnavailable
from bookstall.events import EventBus
from bookstall.models import CatalogItem
from bookstall.views import FEED_ERROR_MESSAGE, NO_MATCHES_MESSAGE, empty_message, render_cards


FEED_URL = "https://docs.google.com/spreadsheets/d/e/2PACX-real/pub?output=csv"


@pytest.fixture
def config():
    return Config(feed_url=FEED_URL, notifier_url="")


@pytest.fixture
def feed_client():
    return Mock(spec=FeedClient)


class TestCatalogItem:
    """Test feed row parsing"""
    
    def test_from_row(self):
        item = CatalogItem.from_row({
            "ID": "2", "BookName": " India: The 1854 Lithographs ", "Author": "D.R. Martin",
            "Category": "British India", "Amount": "12000", "Discount": "10",
            "BookCover": "", "Status": "Available", "Extra": "ignored",
        })
        
        assert item.identity == "2"
        assert item.title == "India: The 1854 Lithographs"
        assert item.listed_amount == 12000.0
        assert item.discount_percent == 10.0
        assert item.cover_ref is None
        assert item.effective_price == pytest.approx(10800)
        assert item.is_sold is False
    
    def test_identity_falls_back_to_title_and_author(self):
        item = CatalogItem.from_row({"BookName": "The Scinde Dawk", "Author": "L.E. Dawson"})
        assert item.identity == "The Scinde Dawk|L.E. Dawson"
    
    def test_missing_and_invalid_numbers(self):
        item = CatalogItem.from_row({"ID": "9", "BookName": "X", "Amount": "call us"})
        assert item.listed_amount == 0.0
        assert item.discount_percent == 0.0
    
    def test_amounts_clamped_at_parse(self):
        item = CatalogItem.from_row({"ID": "9", "BookName": "X", "Amount": "-5", "Discount": "150"})
        assert item.listed_amount == 0.0
        assert item.discount_percent == 100.0
        
        item = CatalogItem.from_row({"ID": "9", "BookName": "X", "Amount": "800", "Discount": "-10"})
        assert item.discount_percent == 0.0
        assert item.effective_price == 800
    
    @pytest.mark.parametrize("status", ["Sold", "SOLD", "sold", " sold "])
    def test_sold_status_case_insensitive(self, status):
        assert CatalogItem.from_row({"ID": "1", "Status": status}).is_sold


class TestCatalogStore:
    """Test loading behaviour"""
    
    def test_load_replaces_wholesale(self, config):
        store = CatalogStore(config)
        store.load([{"ID": "1", "BookName": "A"}, {"ID": "2", "BookName": "B"}])
        store.load([{"ID": "3", "BookName": "C"}])
        
        assert [item.identity for item in store.items] == ["3"]
        assert store.status == CatalogStatus.READY
    
    def test_categories_sorted_distinct(self, config):
        store = CatalogStore(config)
        store.load([
            {"ID": "1", "Category": "Maritime "},
            {"ID": "2", "Category": "British India"},
            {"ID": "3", "Category": "Maritime"},
            {"ID": "4", "Category": ""},
        ])
        assert store.categories() == ["British India", "Maritime"]
    
    def test_refresh_fetches_configured_feed(self, config, feed_client):
        feed_client.fetch_rows.return_value = [{"ID": "7", "BookName": "Feed Book"}]
        store = CatalogStore(config)
        
        store.refresh(feed_client)
        
        feed_client.fetch_rows.assert_called_once_with(FEED_URL)
        assert store.get("7").title == "Feed Book"
    
    def test_refresh_with_placeholder_loads_demo(self, feed_client):
        store = CatalogStore(Config(notifier_url=""))
        
        store.refresh(feed_client)
        
        feed_client.fetch_rows.assert_not_called()
        assert store.status == CatalogStatus.DEMO
        items = store.items
        assert any(item.discount_percent > 0 for item in items)
        assert any(item.discount_percent == 0 and not item.is_sold for item in items)
        assert any(item.is_sold for item in items)
        assert any(item.cover_ref is None for item in items)
    
    def test_feed_failure_clears_catalog(self, config, feed_client):
        store = CatalogStore(config)
        store.load([{"ID": "1", "BookName": "Stale"}])
        feed_client.fetch_rows.side_effect = FeedUnavailable("timeout")
        
        store.refresh(feed_client)
        
        assert store.items == []
        assert store.status == CatalogStatus.ERROR
        assert "timeout" in store.error
        assert empty_message([], store.error) == FEED_ERROR_MESSAGE
    
    def test_load_publishes_event(self, config):
        bus = EventBus()
        events = []
        bus.subscribe("catalog.loaded", events.append)
        
        CatalogStore(config, bus).load([{"ID": "1"}])
        
        assert events[0].payload["items"] == 1
        assert events[0].payload["status"] == "READY"


class TestFilterCatalog:
    """Test search and category filtering"""
    
    @pytest.fixture
    def items(self):
        return [
            CatalogItem.from_row({"ID": "1", "BookName": "Scinde Dawk", "Author": "Dawson",
                                  "Category": "British India"}),
            CatalogItem.from_row({"ID": "2", "BookName": "Maritime Mail", "Author": "Cockrill",
                                  "Category": "Maritime"}),
        ]
    
    def test_search_matches_title(self, items):
        result = filter_catalog(items, "dawk", ALL_CATEGORIES)
        assert [item.identity for item in result] == ["1"]
    
    def test_search_matches_author(self, items):
        result = filter_catalog(items, "COCK", ALL_CATEGORIES)
        assert [item.identity for item in result] == ["2"]
    
    def test_category_filter(self, items):
        result = filter_catalog(items, "", "Maritime")
        assert [item.identity for item in result] == ["2"]
    
    def test_all_keeps_catalog_order(self, items):
        result = filter_catalog(items, "", ALL_CATEGORIES)
        assert [item.identity for item in result] == ["1", "2"]
    
    def test_both_predicates_required(self, items):
        assert filter_catalog(items, "dawk", "Maritime") == []


class TestRenderCards:
    """Test display state derivation"""
    
    def test_cards(self, config):
        store = CatalogStore(config)
        store.load_demo()
        cards = {card.identity: card for card in render_cards(store.items, config)}
        
        discounted = cards["2"]
        assert discounted.show_discount is True
        assert discounted.original_price == "₹12,000"
        assert discounted.price == "₹10,800"
        
        sold = cards["3"]
        assert sold.is_sold is True
        assert sold.show_discount is False
        assert sold.purchasable is False
        
        assert cards["1"].image_url == config.placeholder_image_url
    
    def test_sold_item_never_shows_discount(self, config):
        item = CatalogItem.from_row({"ID": "5", "BookName": "Gone", "Amount": "1000",
                                     "Discount": "20", "Status": "sold"})
        card = render_cards([item], config)[0]
        assert card.show_discount is False
        assert card.price == "₹1,000"
    
    def test_titleless_items_skipped(self, config):
        items = [
            CatalogItem.from_row({"ID": "1", "Author": "Anon"}),
            CatalogItem.from_row({"ID": "2", "BookName": "Named"}),
        ]
        cards = render_cards(items, config)
        assert [card.identity for card in cards] == ["2"]
    
    def test_category_defaults_to_general(self, config):
        card = render_cards([CatalogItem.from_row({"ID": "1", "BookName": "A"})], config)[0]
        assert card.category == "General"
    
    def test_no_matches_message(self):
        assert empty_message([]) == NO_MATCHES_MESSAGE
