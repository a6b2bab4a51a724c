"""
In-memory publish/subscribe fan-out for match notifications.

topic -> {client_id: Subscriber}. Each subscriber owns an unbounded
asyncio.Queue that the stream route drains; publishing only ever calls
put_nowait, so a mutation is never blocked by a slow or gone viewer.
"""
from typing import Dict, List, Optional
import asyncio
import json
import logging
import uuid

from .models import Notification

logger = logging.getLogger("live_match.hub")

# Sentinel topic that receives every match notification
ALL_MATCHES_TOPIC = "match-list"


def encode_notification(notification: Notification) -> str:
    """Frame a notification as a single server-sent-events message."""
    return f"data: {json.dumps(notification.to_dict())}\n\n"


class SubscriberClosedError(Exception):
    """Write attempted on a subscriber whose connection has gone away."""


class Subscriber:
    """
    One streaming connection attached to a topic.

    The subscriber is also the subscription handle returned by
    SubscriptionHub.subscribe(). Iterate it (async) to receive framed
    messages until it is closed.
    """

    def __init__(self, topic: str, client_id: Optional[str] = None):
        self.topic = topic
        self.client_id = client_id or str(uuid.uuid4())
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        """Messages written but not yet consumed."""
        return self._queue.qsize()

    def send(self, message: str) -> None:
        if self._closed:
            raise SubscriberClosedError(f"Subscriber {self.client_id} is closed")
        self._queue.put_nowait(message)

    def close(self) -> None:
        """Stop the stream after already-queued messages. Idempotent."""
        if self._closed:
            return
        self._closed = True
        # Sentinel to unblock the consumer
        self._queue.put_nowait(None)

    def drain(self) -> List[str]:
        """Pop every queued message without waiting."""
        messages = []
        while not self._queue.empty():
            message = self._queue.get_nowait()
            if message is not None:
                messages.append(message)
        return messages

    def __aiter__(self):
        return self

    async def __anext__(self) -> str:
        message = await self._queue.get()
        if message is None:
            raise StopAsyncIteration
        return message

    def __repr__(self):
        return f"Subscriber(topic={self.topic}, client_id={self.client_id}, closed={self._closed})"


class SubscriptionHub:
    """
    Maps topics to their live subscribers and fans out notifications.

    Delivery is best-effort per subscriber: a failed write drops that
    subscriber and never reaches the publisher. The aggregate
    ALL_MATCHES_TOPIC always exists.
    """

    def __init__(self):
        self._topics: Dict[str, Dict[str, Subscriber]] = {ALL_MATCHES_TOPIC: {}}

    def add_topic(self, topic: str) -> None:
        self._topics.setdefault(topic, {})

    def has_topic(self, topic: str) -> bool:
        return topic in self._topics

    def topics(self) -> List[str]:
        return list(self._topics.keys())

    def subscriber_count(self, topic: str) -> int:
        return len(self._topics.get(topic, {}))

    def subscribe(self, subscriber: Subscriber, initial: Notification) -> Subscriber:
        """
        Register ``subscriber`` under its topic and queue ``initial``.

        Registration and the INITIAL write happen in one step, so the
        snapshot is always the first message the subscriber sees and no
        live notification can slip in ahead of it.
        """
        subscriber.send(encode_notification(initial))
        self._topics.setdefault(subscriber.topic, {})[subscriber.client_id] = subscriber
        logger.debug(f"Subscribed {subscriber.client_id} to {subscriber.topic}")
        return subscriber

    def unsubscribe(self, subscriber: Subscriber) -> None:
        """Remove and close a subscriber. Safe to repeat or call after topic removal."""
        subscribers = self._topics.get(subscriber.topic)
        if subscribers is not None and subscribers.pop(subscriber.client_id, None) is not None:
            logger.debug(f"Unsubscribed {subscriber.client_id} from {subscriber.topic}")
        subscriber.close()

    def publish(self, topic: str, notification: Notification) -> int:
        """
        Deliver ``notification`` to every subscriber of ``topic``.

        Returns the number of successful deliveries.
        """
        subscribers = self._topics.get(topic)
        if not subscribers:
            return 0

        message = encode_notification(notification)
        delivered = 0
        for subscriber in list(subscribers.values()):
            try:
                subscriber.send(message)
                delivered += 1
            except Exception as e:
                logger.warning(
                    f"Dropping subscriber {subscriber.client_id} on {topic}: {e}"
                )
                self.unsubscribe(subscriber)
        return delivered

    def remove_topic(self, topic: str) -> None:
        """Discard a topic, closing whatever subscribers are still attached."""
        subscribers = self._topics.pop(topic, None)
        if not subscribers:
            return
        for subscriber in subscribers.values():
            subscriber.close()
        logger.debug(f"Removed topic {topic} ({len(subscribers)} subscribers closed)")
