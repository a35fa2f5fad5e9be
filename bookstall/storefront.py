"""
Storefront: owns the stores and applies user intents
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import structlog

from bookstall.cart import CartStore
from bookstall.catalog import ALL_CATEGORIES, CatalogStore, filter_catalog
from bookstall.checkout import CheckoutFlow, CheckoutResult
from bookstall.clients.feed_client import FeedClient
from bookstall.clients.notifier_client import NotifierClient
from bookstall.config import Config
from bookstall.errors import ValidationRejected
from bookstall.events import EventBus
from bookstall.models import BuyerDetails
from bookstall.views import BookCard, empty_message, render_cards


@dataclass
class SearchChanged:
    term: str


@dataclass
class CategoryChanged:
    category: str


@dataclass
class AddToCart:
    identity: str


@dataclass
class SetQuantity:
    identity: str
    quantity: Any


@dataclass
class RemoveFromCart:
    identity: str


@dataclass
class OpenCheckout:
    pass


@dataclass
class CountryChanged:
    country: str


@dataclass
class PlaceOrder:
    name: str
    email: str
    address: str = ""
    country: str = ""


@dataclass
class CloseCheckout:
    pass


class UnknownItem(LookupError):
    """Intent referenced an identity that is not in the catalog"""


class Storefront:
    """Single-shopper session: catalog, filters, cart and checkout"""

    def __init__(
        self,
        config: Config,
        feed_client: Optional[FeedClient] = None,
        notifier: Optional[NotifierClient] = None,
        bus: Optional[EventBus] = None,
    ):
        self.config = config
        self.bus = bus or EventBus()
        self.feed_client = feed_client or FeedClient(timeout=config.feed_timeout_seconds)
        self.catalog = CatalogStore(config, self.bus)
        self.cart = CartStore(config, self.bus)
        self.checkout = CheckoutFlow(self.cart, config, notifier=notifier, bus=self.bus)

        self.search_term = ""
        self.category = ALL_CATEGORIES
        # Last user-facing notice (rejections, checkout outcomes)
        self.notice: Optional[str] = None
        self.logger = structlog.get_logger().bind(component="storefront")

        self._handlers = {
            SearchChanged: self._search_changed,
            CategoryChanged: self._category_changed,
            AddToCart: self._add_to_cart,
            SetQuantity: self._set_quantity,
            RemoveFromCart: self._remove_from_cart,
            OpenCheckout: self._open_checkout,
            CountryChanged: self._country_changed,
            PlaceOrder: self._place_order,
            CloseCheckout: self._close_checkout,
        }

    @classmethod
    def from_config(cls, config: Config) -> "Storefront":
        """Wire real clients; the notifier only when a URL is configured"""
        notifier = None
        if config.notifier_configured:
            notifier = NotifierClient(config.notifier_url, timeout=config.notifier_timeout_seconds)
        return cls(config, FeedClient(timeout=config.feed_timeout_seconds), notifier)

    def refresh(self) -> None:
        """Reload the catalog; the category filter resets when it no longer exists"""
        self.catalog.refresh(self.feed_client)
        if self.category != ALL_CATEGORIES and self.category not in self.catalog.categories():
            self.category = ALL_CATEGORIES

    def dispatch(self, intent) -> Any:
        """
        Apply an intent.

        ValidationRejected is recorded in notice and re-raised so callers can
        report it; state is unchanged.
        """
        handler = self._handlers.get(type(intent))
        if handler is None:
            raise TypeError(f"Unsupported intent: {type(intent).__name__}")
        self.logger.debug("Applying intent", intent=type(intent).__name__)
        try:
            return handler(intent)
        except ValidationRejected as e:
            self.notice = str(e)
            raise

    def category_options(self) -> List[str]:
        return [ALL_CATEGORIES] + self.catalog.categories()

    def visible_cards(self) -> List[BookCard]:
        items = filter_catalog(self.catalog.items, self.search_term, self.category)
        return render_cards(items, self.config)

    def grid_state(self) -> Dict[str, Any]:
        cards = self.visible_cards()
        return {
            "status": self.catalog.status.value,
            "search": self.search_term,
            "category": self.category,
            "cards": [card.model_dump() for card in cards],
            "message": empty_message(cards, self.catalog.error),
        }

    def cart_state(self) -> Dict[str, Any]:
        return self.cart.snapshot()

    def checkout_state(self) -> Dict[str, Any]:
        instructions = self.checkout.instructions
        return {
            "state": self.checkout.state.value,
            "country": self.checkout.country,
            "instructions": instructions.model_dump(mode="json") if instructions else None,
            "message": self.checkout.message,
            "submitting": self.checkout.submitting,
        }

    def _search_changed(self, intent: SearchChanged):
        self.search_term = intent.term or ""
        return self.visible_cards()

    def _category_changed(self, intent: CategoryChanged):
        self.category = intent.category or ALL_CATEGORIES
        return self.visible_cards()

    def _add_to_cart(self, intent: AddToCart):
        item = self.catalog.get(intent.identity)
        if item is None:
            raise UnknownItem(intent.identity)
        return self.cart.add_item(item)

    def _set_quantity(self, intent: SetQuantity):
        return self.cart.set_quantity(intent.identity, intent.quantity)

    def _remove_from_cart(self, intent: RemoveFromCart):
        return self.cart.remove_item(intent.identity)

    def _open_checkout(self, intent: OpenCheckout):
        return self.checkout.open()

    def _country_changed(self, intent: CountryChanged):
        return self.checkout.change_country(intent.country)

    def _place_order(self, intent: PlaceOrder) -> CheckoutResult:
        buyer = BuyerDetails(
            name=intent.name or "",
            email=intent.email or "",
            address=intent.address or "",
            country=intent.country or "",
        )
        result = self.checkout.place_order(buyer)
        self.notice = result.message
        return result

    def _close_checkout(self, intent: CloseCheckout):
        self.checkout.close()
