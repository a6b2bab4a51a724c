"""
Unit tests for SubscriptionHub fan-out.
"""
import asyncio
import json

import pytest

from app.live_match.hub import (
    ALL_MATCHES_TOPIC,
    Subscriber,
    SubscriberClosedError,
    SubscriptionHub,
    encode_notification,
)
from app.live_match.models import Notification, NotificationKind


def note(kind, **match):
    return Notification(kind=kind, match=match or {"id": "m1"})


def decode(message):
    assert message.startswith("data: ")
    assert message.endswith("\n\n")
    return json.loads(message[len("data: "):])


def kinds(subscriber):
    return [decode(m)["kind"] for m in subscriber.drain()]


class BrokenSubscriber(Subscriber):
    """Subscriber whose transport fails on every live write."""

    def __init__(self, topic):
        super().__init__(topic)
        self.writes = 0

    def send(self, message):
        self.writes += 1
        if self.writes > 1:
            raise ConnectionResetError("peer went away")
        super().send(message)


@pytest.fixture
def hub():
    hub = SubscriptionHub()
    hub.add_topic("m1")
    return hub


def test_aggregate_topic_always_exists():
    hub = SubscriptionHub()
    assert hub.has_topic(ALL_MATCHES_TOPIC)
    assert hub.subscriber_count(ALL_MATCHES_TOPIC) == 0


def test_encode_notification_framing():
    message = encode_notification(note(NotificationKind.GOAL, id="m1", scoreA=1))
    assert message.count("\n") == 2
    assert decode(message) == {"kind": "GOAL", "match": {"id": "m1", "scoreA": 1}}


def test_initial_is_first_message(hub):
    sub = hub.subscribe(Subscriber("m1"), note(NotificationKind.INITIAL))
    hub.publish("m1", note(NotificationKind.MATCH_STARTED))
    assert kinds(sub) == ["INITIAL", "MATCH_STARTED"]


def test_exactly_one_initial(hub):
    sub = hub.subscribe(Subscriber("m1"), note(NotificationKind.INITIAL))
    for _ in range(3):
        hub.publish("m1", note(NotificationKind.GOAL))
    received = kinds(sub)
    assert received.count("INITIAL") == 1
    assert received == ["INITIAL", "GOAL", "GOAL", "GOAL"]


def test_publish_only_reaches_topic(hub):
    hub.add_topic("m2")
    sub1 = hub.subscribe(Subscriber("m1"), note(NotificationKind.INITIAL))
    sub2 = hub.subscribe(Subscriber("m2"), note(NotificationKind.INITIAL))
    delivered = hub.publish("m1", note(NotificationKind.FOUL))
    assert delivered == 1
    assert kinds(sub1) == ["INITIAL", "FOUL"]
    assert kinds(sub2) == ["INITIAL"]


def test_publish_to_empty_topic(hub):
    assert hub.publish("m1", note(NotificationKind.GOAL)) == 0
    assert hub.publish("unknown", note(NotificationKind.GOAL)) == 0


def test_unsubscribe_stops_delivery(hub):
    sub = hub.subscribe(Subscriber("m1"), note(NotificationKind.INITIAL))
    hub.unsubscribe(sub)
    hub.publish("m1", note(NotificationKind.GOAL))
    assert kinds(sub) == ["INITIAL"]
    assert sub.closed
    assert hub.subscriber_count("m1") == 0


def test_unsubscribe_is_idempotent(hub):
    sub = hub.subscribe(Subscriber("m1"), note(NotificationKind.INITIAL))
    hub.unsubscribe(sub)
    hub.unsubscribe(sub)
    assert hub.subscriber_count("m1") == 0


def test_unsubscribe_after_topic_removed(hub):
    sub = hub.subscribe(Subscriber("m1"), note(NotificationKind.INITIAL))
    hub.remove_topic("m1")
    assert sub.closed
    assert not hub.has_topic("m1")
    hub.unsubscribe(sub)
    hub.publish("m1", note(NotificationKind.GOAL))
    assert kinds(sub) == ["INITIAL"]


def test_failed_subscriber_is_dropped_others_still_served(hub):
    good = hub.subscribe(Subscriber("m1"), note(NotificationKind.INITIAL))
    bad = hub.subscribe(BrokenSubscriber("m1"), note(NotificationKind.INITIAL))
    also_good = hub.subscribe(Subscriber("m1"), note(NotificationKind.INITIAL))

    delivered = hub.publish("m1", note(NotificationKind.GOAL))

    assert delivered == 2
    assert hub.subscriber_count("m1") == 2
    assert bad.closed
    assert kinds(good) == ["INITIAL", "GOAL"]
    assert kinds(also_good) == ["INITIAL", "GOAL"]

    hub.publish("m1", note(NotificationKind.FOUL))
    assert bad.writes == 2


def test_send_after_close_raises():
    sub = Subscriber("m1")
    sub.close()
    with pytest.raises(SubscriberClosedError):
        sub.send("data: {}\n\n")


def test_async_iteration_ends_on_close(hub):
    sub = hub.subscribe(Subscriber("m1"), note(NotificationKind.INITIAL))
    hub.publish("m1", note(NotificationKind.GOAL))
    hub.unsubscribe(sub)

    async def collect():
        return [decode(m)["kind"] async for m in sub]

    assert asyncio.run(collect()) == ["INITIAL", "GOAL"]


def test_async_consumer_receives_live_publish(hub):
    """A waiting consumer wakes up for each publish, in order."""

    async def scenario():
        sub = hub.subscribe(Subscriber("m1"), note(NotificationKind.INITIAL))
        received = []

        async def consume():
            async for message in sub:
                received.append(decode(message)["kind"])

        task = asyncio.create_task(consume())
        await asyncio.sleep(0)
        hub.publish("m1", note(NotificationKind.MATCH_STARTED))
        await asyncio.sleep(0)
        hub.publish("m1", note(NotificationKind.GOAL))
        hub.unsubscribe(sub)
        await asyncio.wait_for(task, timeout=1)
        return received

    assert asyncio.run(scenario()) == ["INITIAL", "MATCH_STARTED", "GOAL"]
