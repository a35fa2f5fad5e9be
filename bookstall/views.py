"""
Display state for catalog cards
"""
from typing import Iterable, List, Optional
from pydantic import BaseModel

from bookstall.config import Config
from bookstall.links import normalize_cover_url
from bookstall.models import CatalogItem
from bookstall.pricing import format_amount


DEFAULT_CATEGORY = "General"
NO_MATCHES_MESSAGE = "No books found matching criteria."
FEED_ERROR_MESSAGE = "Error loading library. Please try again later."


class BookCard(BaseModel):
    """Everything a renderer needs for one catalog card"""
    identity: str
    title: str
    author: str
    category: str
    year: str
    condition: str
    image_url: str
    is_sold: bool
    show_discount: bool
    discount_percent: float
    original_price: str
    price: str
    purchasable: bool


def cover_image_url(item: CatalogItem, config: Config) -> str:
    return normalize_cover_url(item.cover_ref) or config.placeholder_image_url


def build_card(item: CatalogItem, config: Config) -> BookCard:
    """
    Derive display state for an item.

    Sold items never show a discount; the price shown for them is the
    listed amount.
    """
    symbol = config.currency_symbol
    show_discount = item.discount_percent > 0 and not item.is_sold
    price = item.effective_price if show_discount else item.listed_amount
    return BookCard(
        identity=item.identity,
        title=item.title,
        author=item.author,
        category=item.category or DEFAULT_CATEGORY,
        year=item.year,
        condition=item.condition,
        image_url=cover_image_url(item, config),
        is_sold=item.is_sold,
        show_discount=show_discount,
        discount_percent=item.discount_percent,
        original_price=f"{symbol}{format_amount(item.listed_amount)}",
        price=f"{symbol}{format_amount(price)}",
        purchasable=not item.is_sold,
    )


def render_cards(items: Iterable[CatalogItem], config: Config) -> List[BookCard]:
    """Cards for the given items; items without a title are skipped"""
    return [build_card(item, config) for item in items if item.title]


def empty_message(cards: List[BookCard], error: Optional[str] = None) -> Optional[str]:
    """Message to show instead of the grid, if any"""
    if error:
        return FEED_ERROR_MESSAGE
    if not cards:
        return NO_MATCHES_MESSAGE
    return None
