"""
Data models and validation using Pydantic
"""
import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional
from pydantic import BaseModel, ConfigDict, Field, computed_field

from bookstall.pricing import effective_price, format_fixed, to_amount


SOLD_STATUS = "sold"


def _text(row: Mapping[str, Any], key: str) -> str:
    value = row.get(key)
    if value is None:
        return ""
    return str(value).strip()


class CatalogItem(BaseModel):
    """One book parsed from a feed row"""
    model_config = ConfigDict(frozen=True)

    identity: str = Field(..., description="Feed ID, or title|author when absent")
    title: str = Field(default="", description="Book title (BookName)")
    author: str = ""
    category: str = ""
    condition: str = ""
    year: str = ""
    listed_amount: float = Field(default=0.0, description="Listed price")
    discount_percent: float = Field(default=0.0, description="Percentage discount")
    cover_ref: Optional[str] = Field(default=None, description="Raw cover reference")
    status: str = ""

    @property
    def is_sold(self) -> bool:
        return self.status.lower() == SOLD_STATUS

    @property
    def effective_price(self) -> float:
        return effective_price(self.listed_amount, self.discount_percent)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "CatalogItem":
        """Parse a string-keyed feed row; unknown fields are ignored"""
        title = _text(row, "BookName")
        author = _text(row, "Author")
        identity = _text(row, "ID") or f"{title}|{author}"
        return cls(
            identity=identity,
            title=title,
            author=author,
            category=_text(row, "Category"),
            condition=_text(row, "Condition"),
            year=_text(row, "Year"),
            listed_amount=max(0.0, to_amount(row.get("Amount"))),
            discount_percent=min(100.0, max(0.0, to_amount(row.get("Discount")))),
            cover_ref=_text(row, "BookCover") or None,
            status=_text(row, "Status"),
        )


class CartLine(BaseModel):
    """Represents a book in the shopping cart"""
    identity: str
    title: str
    author: str = ""
    image_url: Optional[str] = None
    quantity: int = Field(default=1, ge=1, description="Quantity (must be >= 1)")
    unit_price: float = Field(..., ge=0, description="Unit price captured on first add")

    @computed_field
    @property
    def line_total(self) -> float:
        return self.quantity * self.unit_price


class BuyerDetails(BaseModel):
    """Details collected by the checkout form"""
    name: str = ""
    email: str = ""
    address: str = ""
    country: str = ""


class OrderLine(BaseModel):
    id: str
    title: str
    qty: int
    unit: float


class OrderRequest(BaseModel):
    """Order payload sent to the notifier webhook"""
    model_config = ConfigDict(populate_by_name=True)

    order_id: str = Field(..., alias="OrderID")
    name: str = Field(..., alias="Name")
    email: str = Field(..., alias="Email")
    address: str = Field(default="", alias="Address")
    country: str = Field(..., alias="Country")
    items: List[OrderLine] = Field(default_factory=list, alias="Items")
    total: float = Field(..., ge=0, alias="TotalAmount")
    payment_method: str = Field(..., alias="PaymentMethod")

    def to_payload(self) -> Dict[str, str]:
        """Wire form: Items is a JSON string and TotalAmount a fixed 2-decimal string"""
        return {
            "OrderID": self.order_id,
            "Name": self.name,
            "Email": self.email,
            "Address": self.address,
            "Country": self.country,
            "Items": json.dumps([line.model_dump() for line in self.items]),
            "TotalAmount": format_fixed(self.total),
            "PaymentMethod": self.payment_method,
        }


class DomainEvent(BaseModel):
    """In-process domain event envelope"""
    event_id: str
    event_type: str
    event_version: str = "1.0.0"
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    correlation_id: Optional[str] = None
    payload: dict

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "event_id": "550e8400-e29b-41d4-a716-446655440000",
                "event_type": "cart.updated",
                "event_version": "1.0.0",
                "timestamp": "2026-01-10T10:00:00+00:00",
                "payload": {
                    "item_count": 2,
                    "total": 14300.0
                }
            }
        }
    )
