"""
Client for the order notification webhook
"""
from typing import Optional
import requests
import structlog

from bookstall.errors import NotificationFailed
from bookstall.models import OrderRequest

logger = structlog.get_logger()


class NotifierClient:
    """Posts order payloads to the seller's notification endpoint"""
    
    def __init__(self, url: str, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()
    
    def send_order(self, order: OrderRequest) -> None:
        """
        Deliver an order. The response body is not interpreted.
        
        Raises:
            NotificationFailed: On transport errors or an HTTP error status
        """
        try:
            response = self.session.post(
                self.url,
                json=order.to_payload(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("Order notification failed", order_id=order.order_id, error=str(e))
            raise NotificationFailed(f"Could not reach order notifier: {e}") from e
        
        if response.status_code >= 400:
            logger.error("Order notification rejected",
                         order_id=order.order_id,
                         status_code=response.status_code)
            raise NotificationFailed(f"Order notifier returned HTTP {response.status_code}")
        
        logger.info("Order notification sent", order_id=order.order_id)
    
    def close(self):
        """Close HTTP session"""
        self.session.close()
