"""
Country-dependent payment instructions
"""
from enum import Enum
from typing import Optional
from urllib.parse import urlencode
from pydantic import BaseModel

from bookstall.config import Config
from bookstall.pricing import format_amount, format_fixed


class PaymentMethod(str, Enum):
    """Payment method tag sent with the order"""
    UPI = "UPI"
    WISE = "Wise"


class PaymentInstructions(BaseModel):
    """Instructions shown next to the checkout form"""
    country: str
    method: PaymentMethod
    total: float
    total_display: str
    message: str
    upi_id: Optional[str] = None
    payee_name: Optional[str] = None


def payment_method_for(country: str, config: Config) -> PaymentMethod:
    if (country or "").strip().lower() == config.domestic_country.lower():
        return PaymentMethod.UPI
    return PaymentMethod.WISE


def build_instructions(country: str, total: float, config: Config) -> PaymentInstructions:
    """Derive instructions purely from country and cart total"""
    method = payment_method_for(country, config)
    total_display = f"{config.currency_symbol}{format_amount(total)}"
    if method is PaymentMethod.UPI:
        return PaymentInstructions(
            country=country,
            method=method,
            total=total,
            total_display=total_display,
            message=f"Pay {total_display} by UPI to {config.upi_id}, then place your order.",
            upi_id=config.upi_id,
            payee_name=config.payee_name,
        )
    return PaymentInstructions(
        country=country,
        method=method,
        total=total,
        total_display=total_display,
        message=(
            f"International orders are paid by Wise. Place your order for {total_display} "
            "and an invoice will be requested for you."
        ),
    )


def build_upi_link(total: float, config: Config) -> str:
    """upi://pay deep link for the domestic payment affordance"""
    query = urlencode({
        "pa": config.upi_id,
        "pn": config.payee_name,
        "am": format_fixed(total),
        "cu": config.currency_code,
    })
    return f"upi://pay?{query}"


def manual_payment_message(country: str, total: float, config: Config) -> str:
    """Instructions used when no order notifier is configured"""
    total_display = f"{config.currency_symbol}{format_amount(total)}"
    if payment_method_for(country, config) is PaymentMethod.UPI:
        return (
            f"Please pay {total_display} by UPI to {config.upi_id} and send the payment "
            f"reference to {config.seller_contact} to confirm your order."
        )
    return (
        f"Please contact {config.seller_contact} to request a Wise invoice for "
        f"{total_display}."
    )


def failure_message(config: Config) -> str:
    return (
        "We could not send your order. Your cart has been kept; please contact "
        f"{config.seller_contact} directly to complete the purchase."
    )


def success_message(order_id: str) -> str:
    return f"Thank you! Order {order_id} has been placed."
