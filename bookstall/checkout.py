"""
Checkout flow state machine
"""
import threading
import uuid
from enum import Enum
from typing import Callable, Optional
from pydantic import BaseModel
import structlog

from bookstall.cart import CartStore
from bookstall.config import Config
from bookstall.errors import NotificationFailed, ValidationRejected
from bookstall.events import EventBus
from bookstall.models import BuyerDetails, DomainEvent, OrderLine, OrderRequest
from bookstall.payment import (
    PaymentInstructions,
    PaymentMethod,
    build_instructions,
    build_upi_link,
    failure_message,
    manual_payment_message,
    payment_method_for,
    success_message,
)


logger = structlog.get_logger()


class CheckoutState(str, Enum):
    """Checkout state"""
    IDLE = "IDLE"
    FORM_OPEN = "FORM_OPEN"
    PAYMENT_INSTRUCTIONS_SHOWN = "PAYMENT_INSTRUCTIONS_SHOWN"
    SUBMITTING = "SUBMITTING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    MANUAL_PAYMENT = "MANUAL_PAYMENT"


# States in which the buyer is looking at the form
FORM_STATES = (
    CheckoutState.FORM_OPEN,
    CheckoutState.PAYMENT_INSTRUCTIONS_SHOWN,
    CheckoutState.FAILED,
)


class CheckoutResult(BaseModel):
    """Outcome of an order placement"""
    state: CheckoutState
    message: Optional[str] = None
    order_id: Optional[str] = None
    payment_method: Optional[PaymentMethod] = None


def generate_order_id() -> str:
    return f"ORD-{uuid.uuid4().hex[:12].upper()}"


class CheckoutFlow:
    """
    Drives checkout from the cart to the order notifier.

    IDLE -> FORM_OPEN -> PAYMENT_INSTRUCTIONS_SHOWN -> SUBMITTING -> SUCCEEDED | FAILED,
    or MANUAL_PAYMENT when no notifier is configured. close() returns to IDLE
    from anywhere without touching the cart.
    """

    def __init__(
        self,
        cart: CartStore,
        config: Config,
        notifier=None,
        bus: Optional[EventBus] = None,
        timer_factory: Callable = threading.Timer,
    ):
        self.cart = cart
        self.config = config
        self.notifier = notifier
        self.bus = bus
        self.timer_factory = timer_factory

        self.state = CheckoutState.IDLE
        self.country = config.default_country
        self.instructions: Optional[PaymentInstructions] = None
        self.message: Optional[str] = None
        self.last_order: Optional[OrderRequest] = None

        self._submit_lock = threading.Lock()
        # Bumped on open/close so late submission results can be discarded
        self._session = 0
        self.logger = structlog.get_logger().bind(component="checkout_flow")

        if bus:
            bus.subscribe("cart.updated", self._on_cart_updated)

    @property
    def submitting(self) -> bool:
        return self._submit_lock.locked()

    def open(self) -> PaymentInstructions:
        """
        Open the checkout form and show instructions for the current country

        Raises:
            ValidationRejected: If the cart is empty or an order is in flight
        """
        if self.cart.is_empty():
            self.logger.warning("Checkout rejected, cart is empty")
            raise ValidationRejected("Your cart is empty")
        if self.state is CheckoutState.SUBMITTING:
            raise ValidationRejected("An order is already being placed")

        self._session += 1
        self.state = CheckoutState.FORM_OPEN
        self.message = None
        self._publish("checkout.opened", {"item_count": self.cart.item_count()})
        return self.change_country(self.country)

    def change_country(self, country: str) -> PaymentInstructions:
        """Replace the payment instructions for country"""
        if self.state not in FORM_STATES:
            raise ValidationRejected("Checkout is not open")

        self.country = (country or "").strip()
        self.instructions = build_instructions(self.country, self.cart.total(), self.config)
        if self.state is not CheckoutState.FAILED:
            self.state = CheckoutState.PAYMENT_INSTRUCTIONS_SHOWN
        self.logger.info("Payment instructions shown",
                         country=self.country,
                         method=self.instructions.method.value)
        return self.instructions

    def build_order(self, buyer: BuyerDetails) -> OrderRequest:
        """Snapshot the cart into an order request with a fresh order id"""
        country = buyer.country.strip() or self.country
        return OrderRequest(
            order_id=generate_order_id(),
            name=buyer.name.strip(),
            email=buyer.email.strip(),
            address=buyer.address.strip(),
            country=country,
            items=[
                OrderLine(id=line.identity, title=line.title, qty=line.quantity, unit=line.unit_price)
                for line in self.cart.lines()
            ],
            total=self.cart.total(),
            payment_method=payment_method_for(country, self.config).value,
        )

    def place_order(self, buyer: BuyerDetails) -> CheckoutResult:
        """
        Submit the order to the notifier

        Args:
            buyer: Details from the checkout form

        Returns:
            CheckoutResult describing the new state and the message to show

        Raises:
            ValidationRejected: If checkout is not open, name or email is
                missing, the cart is empty or an order is already in flight
        """
        if self.state not in (CheckoutState.PAYMENT_INSTRUCTIONS_SHOWN, CheckoutState.FAILED):
            raise ValidationRejected("Checkout is not open")
        if not buyer.name.strip() or not buyer.email.strip():
            self.logger.warning("Order rejected, missing buyer details")
            raise ValidationRejected("Please enter your name and email")
        if self.cart.is_empty():
            raise ValidationRejected("Your cart is empty")
        if not self._submit_lock.acquire(blocking=False):
            self.logger.warning("Order rejected, submission already in flight")
            raise ValidationRejected("An order is already being placed")

        try:
            if buyer.country.strip() and buyer.country.strip() != self.country:
                self.change_country(buyer.country)
            order = self.build_order(buyer)
            self.last_order = order
            method = PaymentMethod(order.payment_method)

            if self.notifier is None:
                self.state = CheckoutState.MANUAL_PAYMENT
                self.message = manual_payment_message(order.country, order.total, self.config)
                self.logger.info("No notifier configured, manual payment",
                                 order_id=order.order_id,
                                 method=method.value)
                self._publish("checkout.manual_payment", {"order_id": order.order_id})
                return CheckoutResult(state=self.state, message=self.message,
                                      order_id=order.order_id, payment_method=method)

            return self._submit(order, method)
        finally:
            self._submit_lock.release()

    def _submit(self, order: OrderRequest, method: PaymentMethod) -> CheckoutResult:
        session = self._session
        self.state = CheckoutState.SUBMITTING
        self.logger.info("Submitting order", order_id=order.order_id, total=order.total)

        try:
            self.notifier.send_order(order)
        except NotificationFailed as e:
            if session != self._session:
                self.logger.warning("Order failed after checkout was closed", order_id=order.order_id)
                return CheckoutResult(state=self.state, order_id=order.order_id, payment_method=method)
            self.state = CheckoutState.FAILED
            self.message = failure_message(self.config)
            self.logger.error("Order submission failed", order_id=order.order_id, error=str(e))
            self._publish("checkout.order_failed", {"order_id": order.order_id, "error": str(e)})
            return CheckoutResult(state=self.state, message=self.message,
                                  order_id=order.order_id, payment_method=method)

        if session != self._session:
            self.logger.warning("Order delivered after checkout was closed", order_id=order.order_id)
            return CheckoutResult(state=self.state, order_id=order.order_id, payment_method=method)

        self.cart.clear()
        self.state = CheckoutState.SUCCEEDED
        self.message = success_message(order.order_id)
        self.logger.info("Order placed", order_id=order.order_id)
        self._publish("checkout.order_placed", {"order_id": order.order_id, "total": order.total})
        self._schedule_dismiss(session)
        return CheckoutResult(state=self.state, message=self.message,
                              order_id=order.order_id, payment_method=method)

    def close(self) -> None:
        """Hide the checkout surface; the cart is left as it is"""
        self._session += 1
        self.state = CheckoutState.IDLE
        self.instructions = None
        self._publish("checkout.closed", {})

    def payment_link(self) -> str:
        """UPI deep link for the current total (domestic country only)"""
        if self.instructions is None or self.instructions.method is not PaymentMethod.UPI:
            raise ValidationRejected("UPI payment is only available for domestic orders")
        return build_upi_link(self.cart.total(), self.config)

    def copy_payment_id(self) -> str:
        """Identifier the buyer copies to their clipboard"""
        if self.instructions is None or self.instructions.method is not PaymentMethod.UPI:
            raise ValidationRejected("UPI payment is only available for domestic orders")
        return self.config.upi_id

    def _schedule_dismiss(self, session: int) -> None:
        timer = self.timer_factory(self.config.dismiss_delay_seconds, self._dismiss, args=(session,))
        timer.daemon = True
        timer.start()

    def _dismiss(self, session: int) -> None:
        if session == self._session and self.state is CheckoutState.SUCCEEDED:
            self.close()

    def _on_cart_updated(self, event: DomainEvent) -> None:
        # Keep the shown total in step with quantity edits made while the form is open
        if self.state in FORM_STATES and self.instructions is not None:
            self.instructions = build_instructions(self.country, self.cart.total(), self.config)

    def _publish(self, event_type: str, payload: dict) -> None:
        if self.bus:
            self.bus.publish(event_type, payload)
