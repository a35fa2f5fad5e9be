"""
In-process domain event bus
"""
import uuid
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional
import structlog

from bookstall.models import DomainEvent


logger = structlog.get_logger()

Handler = Callable[[DomainEvent], None]

# Subscribe with this to receive every event type
ALL_EVENTS = "*"


class EventBus:
    """Publisher for storefront domain events to in-process subscribers"""
    
    def __init__(self):
        self._handlers: Dict[str, List[Handler]] = defaultdict(list)
        self.logger = structlog.get_logger().bind(component="event_bus")
    
    def subscribe(self, event_type: str, handler: Handler) -> None:
        """Register handler for event_type (or ALL_EVENTS)"""
        self._handlers[event_type].append(handler)
    
    def unsubscribe(self, event_type: str, handler: Handler) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)
    
    def publish(
        self,
        event_type: str,
        payload: Dict[str, Any],
        correlation_id: Optional[str] = None
    ) -> DomainEvent:
        """
        Build an event envelope and deliver it synchronously
        
        Args:
            event_type: Event type (e.g., 'cart.updated')
            payload: Event payload
            correlation_id: Optional correlation ID for tracing
            
        Returns:
            The delivered event
        """
        event = DomainEvent(
            event_id=str(uuid.uuid4()),
            event_type=event_type,
            correlation_id=correlation_id,
            payload=payload,
        )
        
        handlers = self._handlers.get(event_type, []) + self._handlers.get(ALL_EVENTS, [])
        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                self.logger.error("Event handler failed",
                                  event_type=event_type,
                                  event_id=event.event_id,
                                  error=str(e))
                raise
        
        self.logger.debug("Event published", event_type=event_type, event_id=event.event_id)
        return event
