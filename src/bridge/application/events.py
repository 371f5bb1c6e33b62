"""In-process publisher for domain events."""

import logging
from collections import defaultdict
from typing import Awaitable, Callable, Union

from bridge.domain.shared.events import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], Union[Awaitable[None], None]]


class DomainEventPublisher:
    """Dispatch events to subscribers registered per event type.

    Subscribing to DomainEvent receives every event. A failing handler is
    logged and does not affect the operation that raised the event or the
    remaining handlers.
    """

    def __init__(self) -> None:
        self._handlers: dict[type[DomainEvent], list[EventHandler]] = defaultdict(list)

    def subscribe(self, event_type: type[DomainEvent], handler: EventHandler) -> None:
        self._handlers[event_type].append(handler)

    async def publish(self, event: DomainEvent) -> None:
        logger.debug("Publishing %s", event.name)
        for event_type, handlers in list(self._handlers.items()):
            if not isinstance(event, event_type):
                continue
            for handler in handlers:
                try:
                    result = handler(event)
                    if result is not None:
                        await result
                except Exception:
                    logger.exception(
                        "Event handler %r failed for %s",
                        handler,
                        event.name,
                    )
