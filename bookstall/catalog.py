"""
Catalog store and filtering
"""
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional
import structlog

from bookstall.config import Config
from bookstall.errors import FeedUnavailable
from bookstall.events import EventBus
from bookstall.models import CatalogItem


logger = structlog.get_logger()

ALL_CATEGORIES = "All"

# Shown when no feed is configured; covers discounted, full-price, sold and
# cover-less rendering.
DEMO_ROWS = [
    {"ID": "1", "BookName": "Postal History of Travancore", "Author": "N.S. Mooss",
     "Category": "Princely States", "Condition": "USED - FINE", "Year": "1984",
     "Amount": "4500", "Discount": "0", "BookCover": "", "Status": "Available"},
    {"ID": "2", "BookName": "India: The 1854 Lithographs", "Author": "D.R. Martin",
     "Category": "British India", "Condition": "USED - GOOD", "Year": "1928",
     "Amount": "12000", "Discount": "10", "BookCover": "", "Status": "Available"},
    {"ID": "3", "BookName": "The Scinde Dawk", "Author": "L.E. Dawson",
     "Category": "British India", "Condition": "USED - FINE", "Year": "1968",
     "Amount": "3500", "Discount": "0", "BookCover": "", "Status": "Sold"},
    {"ID": "4", "BookName": "Maritime Mail of the Indian Ocean", "Author": "Philip Cockrill",
     "Category": "Maritime", "Condition": "NEW", "Year": "1987",
     "Amount": "3200", "Discount": "15", "BookCover": "", "Status": "Available"},
]


class CatalogStatus(str, Enum):
    """Catalog load status"""
    EMPTY = "EMPTY"
    READY = "READY"
    DEMO = "DEMO"
    ERROR = "ERROR"


class CatalogStore:
    """Holds the parsed catalog; replaced wholesale on every load"""

    def __init__(self, config: Config, bus: Optional[EventBus] = None):
        self.config = config
        self.bus = bus
        self._items: List[CatalogItem] = []
        self.status = CatalogStatus.EMPTY
        self.error: Optional[str] = None
        self.logger = structlog.get_logger().bind(component="catalog_store")

    @property
    def items(self) -> List[CatalogItem]:
        return list(self._items)

    def load(self, rows: Iterable[Mapping[str, Any]], status: CatalogStatus = CatalogStatus.READY) -> None:
        """
        Parse feed rows and replace the catalog.

        Args:
            rows: String-keyed feed rows
            status: Status to report once loaded
        """
        self._items = [CatalogItem.from_row(row) for row in rows]
        self.status = status
        self.error = None
        self.logger.info("Catalog loaded", items=len(self._items), status=status.value)
        self._publish()

    def load_demo(self) -> None:
        self.load(DEMO_ROWS, status=CatalogStatus.DEMO)

    def refresh(self, feed_client) -> None:
        """
        Reload from the configured feed, or the demo set when the feed is unconfigured.

        A failed fetch leaves the catalog empty with status ERROR.
        """
        if not self.config.feed_configured:
            self.logger.warning("No feed URL configured, loading demo data")
            self.load_demo()
            return

        try:
            rows = feed_client.fetch_rows(self.config.feed_url)
        except FeedUnavailable as e:
            self._items = []
            self.status = CatalogStatus.ERROR
            self.error = str(e)
            self.logger.error("Error fetching catalog feed", url=self.config.feed_url, error=str(e))
            self._publish()
            return

        self.load(rows)

    def get(self, identity: str) -> Optional[CatalogItem]:
        """Get an item by identity"""
        for item in self._items:
            if item.identity == identity:
                return item
        return None

    def categories(self) -> List[str]:
        """Sorted distinct non-empty categories, without the 'All' sentinel"""
        return sorted({item.category for item in self._items if item.category})

    def _publish(self) -> None:
        if self.bus:
            self.bus.publish("catalog.loaded", {
                "status": self.status.value,
                "items": len(self._items),
                "error": self.error,
            })


def filter_catalog(items: Iterable[CatalogItem], search_term: str = "", category: str = ALL_CATEGORIES) -> List[CatalogItem]:
    """
    Visible subset of the catalog, in catalog order.

    An item matches when its title or author contains search_term
    (case-insensitive; empty matches everything) and its category equals
    category, unless category is the 'All' sentinel.
    """
    term = (search_term or "").lower()
    category = category or ALL_CATEGORIES

    def matches(item: CatalogItem) -> bool:
        if term and term not in item.title.lower() and term not in item.author.lower():
            return False
        return category == ALL_CATEGORIES or item.category == category

    return [item for item in items if matches(item)]
