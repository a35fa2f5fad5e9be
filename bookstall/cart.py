"""
Business logic for cart operations
"""
from typing import Any, Dict, List, Optional
import structlog

from bookstall.config import Config
from bookstall.errors import ValidationRejected
from bookstall.events import EventBus
from bookstall.models import CartLine, CatalogItem
from bookstall.views import cover_image_url


logger = structlog.get_logger()


def coerce_quantity(qty: Any) -> int:
    """Positive integer quantity; anything invalid, fractional or infinite becomes 1"""
    if isinstance(qty, float) and not qty.is_integer():
        return 1
    try:
        value = int(qty)
    except (TypeError, ValueError, OverflowError):
        return 1
    return value if value >= 1 else 1


class CartStore:
    """Session cart keyed by item identity, in first-insertion order"""

    def __init__(self, config: Config, bus: Optional[EventBus] = None):
        self.config = config
        self.bus = bus
        # dicts keep insertion order
        self._lines: Dict[str, CartLine] = {}
        self.logger = structlog.get_logger().bind(component="cart_store")

    def lines(self) -> List[CartLine]:
        return list(self._lines.values())

    def get_line(self, identity: str) -> Optional[CartLine]:
        return self._lines.get(identity)

    def is_empty(self) -> bool:
        return not self._lines

    def item_count(self) -> int:
        """Sum of quantities, shown on the cart badge"""
        return sum(line.quantity for line in self._lines.values())

    def total(self) -> float:
        """Calculate total cart value"""
        return sum(line.line_total for line in self._lines.values())

    def add_item(self, item: CatalogItem) -> CartLine:
        """
        Add one unit of item to the cart.

        A repeat add increments quantity and keeps the unit price captured
        on the first add.

        Raises:
            ValidationRejected: If the item is sold
        """
        if item.is_sold:
            self.logger.warning("Rejected add of sold item", identity=item.identity)
            raise ValidationRejected(f"'{item.title}' has already been sold")

        line = self._lines.get(item.identity)
        if line:
            line.quantity += 1
        else:
            line = CartLine(
                identity=item.identity,
                title=item.title,
                author=item.author,
                image_url=cover_image_url(item, self.config),
                quantity=1,
                unit_price=item.effective_price,
            )
            self._lines[item.identity] = line

        self.logger.info("Item added to cart", identity=item.identity, quantity=line.quantity)
        self._changed("add", item.identity)
        return line

    def set_quantity(self, identity: str, qty: Any) -> Optional[CartLine]:
        """Set a line's quantity; no-op when identity is not in the cart"""
        line = self._lines.get(identity)
        if line is None:
            return None
        line.quantity = coerce_quantity(qty)
        self._changed("set_quantity", identity)
        return line

    def remove_item(self, identity: str) -> bool:
        """Remove line from cart. Returns True if it was present."""
        if self._lines.pop(identity, None) is None:
            return False
        self.logger.info("Item removed from cart", identity=identity)
        self._changed("remove", identity)
        return True

    def clear(self) -> None:
        """Remove all lines from cart"""
        self._lines = {}
        self.logger.info("Cart cleared")
        self._changed("clear", None)

    def snapshot(self) -> Dict[str, Any]:
        return {
            "items": [line.model_dump() for line in self._lines.values()],
            "item_count": self.item_count(),
            "total": self.total(),
        }

    def _changed(self, action: str, identity: Optional[str]) -> None:
        if self.bus:
            self.bus.publish("cart.updated", {
                "action": action,
                "identity": identity,
                "item_count": self.item_count(),
                "total": self.total(),
            })
