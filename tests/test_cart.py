"""
Unit tests for cart store logic
"""
import pytest

from bookstall.cart import CartStore, coerce_quantity
from bookstall.config import Config
from bookstall.errors import ValidationRejected
from bookstall.events import EventBus
from bookstall.models import CatalogItem


@pytest.fixture
def config():
    return Config(notifier_url="")


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def cart(config, bus):
    return CartStore(config, bus)


@pytest.fixture
def lithographs():
    return CatalogItem.from_row({"ID": "2", "BookName": "India: The 1854 Lithographs",
                                 "Author": "D.R. Martin", "Amount": "12000", "Discount": "10"})


@pytest.fixture
def travancore():
    return CatalogItem.from_row({"ID": "1", "BookName": "Postal History of Travancore",
                                 "Author": "N.S. Mooss", "Amount": "4500",
                                 "BookCover": "https://drive.google.com/file/d/COVER1/view"})


class TestCartStore:
    """Test cart mutations"""
    
    def test_add_new_item(self, cart, lithographs):
        line = cart.add_item(lithographs)
        
        assert len(cart.lines()) == 1
        assert line.quantity == 1
        assert line.unit_price == pytest.approx(10800)
        assert cart.total() == pytest.approx(10800)
    
    def test_add_same_item_twice(self, cart, lithographs):
        cart.add_item(lithographs)
        cart.add_item(lithographs)
        
        lines = cart.lines()
        assert len(lines) == 1
        assert lines[0].quantity == 2
        assert lines[0].line_total == pytest.approx(2 * lines[0].unit_price)
    
    def test_unit_price_snapshotted(self, cart, lithographs):
        cart.add_item(lithographs)
        repriced = lithographs.model_copy(update={"discount_percent": 50.0})
        
        cart.add_item(repriced)
        
        assert cart.get_line("2").unit_price == pytest.approx(10800)
        assert cart.total() == pytest.approx(21600)
    
    def test_insertion_order_preserved(self, cart, lithographs, travancore):
        cart.add_item(travancore)
        cart.add_item(lithographs)
        cart.add_item(travancore)
        
        assert [line.identity for line in cart.lines()] == ["1", "2"]
    
    def test_line_keeps_display_fields(self, cart, travancore):
        line = cart.add_item(travancore)
        assert line.title == "Postal History of Travancore"
        assert line.image_url == "https://drive.google.com/uc?export=view&id=COVER1"
    
    def test_sold_item_rejected(self, cart):
        sold = CatalogItem.from_row({"ID": "3", "BookName": "The Scinde Dawk",
                                     "Amount": "3500", "Status": "Sold"})
        
        with pytest.raises(ValidationRejected, match="sold"):
            cart.add_item(sold)
        
        assert cart.is_empty()
    
    @pytest.mark.parametrize("row", [
        {"ID": "9", "BookName": "Overdiscounted", "Amount": "1000", "Discount": "150"},
        {"ID": "9", "BookName": "Negative Listing", "Amount": "-5"},
        {"ID": "9", "BookName": "Both Wrong", "Amount": "-5", "Discount": "-20"},
    ])
    def test_out_of_range_feed_values_add_at_zero(self, cart, row):
        item = CatalogItem.from_row(row)
        
        line = cart.add_item(item)
        
        assert line.unit_price == 0
        assert cart.total() == 0
        assert cart.item_count() == 1
    
    def test_set_quantity(self, cart, travancore):
        cart.add_item(travancore)
        
        cart.set_quantity("1", 3)
        
        assert cart.get_line("1").quantity == 3
        assert cart.total() == pytest.approx(13500)
    
    @pytest.mark.parametrize("qty", [0, -2, "abc", None, "2.5", 2.5, float("inf"), float("-inf"), float("nan")])
    def test_set_quantity_invalid_defaults_to_one(self, cart, travancore, qty):
        cart.add_item(travancore)
        cart.add_item(travancore)
        
        cart.set_quantity("1", qty)
        
        assert cart.get_line("1").quantity == 1
    
    def test_set_quantity_integral_float(self, cart, travancore):
        cart.add_item(travancore)
        
        cart.set_quantity("1", 3.0)
        
        assert cart.get_line("1").quantity == 3
    
    def test_set_quantity_unknown_is_noop(self, cart, travancore):
        cart.add_item(travancore)
        
        assert cart.set_quantity("missing", 5) is None
        assert cart.item_count() == 1
    
    def test_remove_item(self, cart, lithographs, travancore):
        cart.add_item(lithographs)
        cart.add_item(travancore)
        
        removed = cart.remove_item("2")
        
        assert removed is True
        assert [line.identity for line in cart.lines()] == ["1"]
        assert cart.total() == pytest.approx(4500)
    
    def test_remove_nonexistent_item(self, cart, travancore):
        cart.add_item(travancore)
        
        assert cart.remove_item("BOOK-999") is False
        assert cart.remove_item("BOOK-999") is False
        assert len(cart.lines()) == 1
    
    def test_empty_cart_total(self, cart):
        assert cart.total() == 0
        assert cart.item_count() == 0
    
    def test_clear(self, cart, lithographs, travancore):
        cart.add_item(lithographs)
        cart.add_item(travancore)
        
        cart.clear()
        
        assert cart.is_empty()
        assert cart.total() == 0


class TestCartEvents:
    """Every mutation announces the recomputed badge count and total"""
    
    def test_mutations_publish_totals(self, cart, bus, travancore):
        events = []
        bus.subscribe("cart.updated", events.append)
        
        cart.add_item(travancore)
        cart.set_quantity("1", 4)
        cart.remove_item("1")
        cart.clear()
        
        assert [e.payload["action"] for e in events] == ["add", "set_quantity", "remove", "clear"]
        assert events[0].payload["item_count"] == 1
        assert events[1].payload["item_count"] == 4
        assert events[1].payload["total"] == pytest.approx(18000)
        assert events[2].payload["total"] == 0
    
    def test_noop_remove_publishes_nothing(self, cart, bus):
        events = []
        bus.subscribe("cart.updated", events.append)
        
        cart.remove_item("nothing")
        
        assert events == []


def test_coerce_quantity():
    assert coerce_quantity("3") == 3
    assert coerce_quantity(7) == 7
    assert coerce_quantity("x") == 1


def test_coerce_quantity_non_finite():
    assert coerce_quantity(float("inf")) == 1
    assert coerce_quantity(2.5) == 1
