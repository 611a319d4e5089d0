# powerbudget/core/event_bus.py
"""
Event bus for allocator lifecycle notifications.
Lets callers observe admissions, removals and rebalancing without
coupling to the allocator internals.
"""

import logging

logger = logging.getLogger(__name__)


class EventBus:
    """Simple synchronous publish/subscribe bus."""

    def __init__(self):
        self.subscribers = {}

    def subscribe(self, event_type, callback):
        """Subscribe a callback to an event type."""
        self.subscribers.setdefault(event_type, []).append(callback)
        return callback

    def unsubscribe(self, event_type, callback):
        """Unsubscribe a callback from an event type."""
        if event_type in self.subscribers and callback in self.subscribers[event_type]:
            self.subscribers[event_type].remove(callback)
            return True
        return False

    def publish(self, event_type, data=None, source=None):
        """Publish an event to all subscribers.

        Args:
            event_type (str): The type of event being published.
            data (any, optional): Data associated with the event.
            source (str, optional): Name of the publisher.

        Returns:
            int: Number of subscribers that handled the event.
        """
        event = {"type": event_type, "data": data, "source": source}
        logger.debug(f"Event published: {event_type} from {source or 'unknown'}")

        count = 0
        for callback in list(self.subscribers.get(event_type, [])):
            try:
                callback(event)
                count += 1
            except Exception as e:
                logger.error(f"Error in event handler for {event_type}: {e}")
        return count

    def clear(self):
        """Remove all subscriptions."""
        self.subscribers = {}
