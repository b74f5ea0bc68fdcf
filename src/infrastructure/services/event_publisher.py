"""Event Publisher Infrastructure Service.

This service provides the concrete implementation of the domain event
publishing interface, so that the orchestrator can announce committed
outcomes without coupling to any message transport.
"""

from typing import Awaitable, Callable, List, Optional, Set

import structlog

from src.domain.events.identity_events import BaseDomainEvent
from src.domain.interfaces.infrastructure import IEventPublisher

logger = structlog.get_logger(__name__)

Subscriber = Callable[[BaseDomainEvent], Awaitable[None]]


class InMemoryEventPublisher(IEventPublisher):
    """In-memory event publisher for development and testing.

    This implementation stores events in memory and can be used for:
    - Development and testing environments
    - Event inspection in integration tests
    - Fan-out to in-process subscribers

    Publishing never fails the operation that raised the event: the operation
    has already committed when its events are published.
    """

    def __init__(self):
        self._published_events: List[BaseDomainEvent] = []
        self._event_filters: Set[str] = set()
        self._subscribers: List[Subscriber] = []

        logger.info("InMemoryEventPublisher initialized")

    async def publish(self, event: BaseDomainEvent) -> None:
        """Publish a single domain event.

        Args:
            event: Domain event to publish
        """
        event_type = type(event).__name__
        self._published_events.append(event)

        if self._event_filters and event_type not in self._event_filters:
            logger.debug("Event filtered out", event_type=event_type)
            return

        for subscriber in self._subscribers:
            try:
                await subscriber(event)
            except Exception as e:
                logger.error(
                    "Event subscriber failed",
                    event_type=event_type,
                    account_id=event.account_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )

        logger.info(
            "Domain event published",
            event_type=event_type,
            account_id=event.account_id,
            correlation_id=event.correlation_id,
            occurred_at=event.occurred_at.isoformat(),
        )

    async def publish_many(self, events: List[BaseDomainEvent]) -> None:
        """Publish the events of one operation in order.

        Args:
            events: List of domain events to publish
        """
        for event in events:
            await self.publish(event)

        if events:
            logger.debug(
                "Multiple domain events published",
                event_count=len(events),
                event_types=[type(e).__name__ for e in events],
            )

    def add_event_filter(self, event_type: str) -> None:
        """Only events whose type name was added are delivered to subscribers."""
        self._event_filters.add(event_type)

    def add_subscriber(self, callback: Subscriber) -> None:
        self._subscribers.append(callback)
        logger.debug("Event subscriber added")

    def get_published_events(
        self,
        event_type: Optional[type] = None,
        account_id: Optional[str] = None,
    ) -> List[BaseDomainEvent]:
        """Get published events with optional filtering.

        Args:
            event_type: Filter by event class
            account_id: Filter by account

        Returns:
            List[BaseDomainEvent]: Filtered list of published events
        """
        events = self._published_events
        if event_type is not None:
            events = [e for e in events if isinstance(e, event_type)]
        if account_id is not None:
            events = [e for e in events if e.account_id == account_id]
        return list(events)

    def clear_published_events(self) -> None:
        self._published_events.clear()
