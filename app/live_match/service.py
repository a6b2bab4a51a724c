"""
MatchService: the single entry point for match mutations, reads and streams.

Every successful mutation updates the registry first, then publishes the
resulting notification twice: to the match's own topic, then to the
aggregate ALL_MATCHES_TOPIC.
"""
from typing import List, Optional, Tuple, Union
import logging

from .hub import ALL_MATCHES_TOPIC, Subscriber, SubscriptionHub
from .models import (
    EventKind,
    Match,
    MatchEvent,
    Notification,
    NotificationKind,
    TeamSide,
)
from .registry import Clock, MatchRegistry

logger = logging.getLogger("live_match.service")

CARD_KINDS = (EventKind.YELLOW_CARD, EventKind.RED_CARD)


class MatchService:
    """
    Facade over MatchRegistry and SubscriptionHub.

    Usage:
        service = MatchService()
        match = service.create_match("Red", "Blue")
        stream = service.open_match_stream(match.id)
        service.start_match(match.id)
        service.record_goal(match.id, "A", "Smith")
    """

    def __init__(
        self,
        registry: Optional[MatchRegistry] = None,
        hub: Optional[SubscriptionHub] = None,
    ):
        self.registry = registry or MatchRegistry()
        self.hub = hub or SubscriptionHub()

    def _broadcast(self, notification: Notification, match_id: str) -> None:
        # Fixed fan-out: match topic first, then the aggregate topic
        to_match = self.hub.publish(match_id, notification)
        to_list = self.hub.publish(ALL_MATCHES_TOPIC, notification)
        logger.debug(
            f"{notification.kind.value} for {match_id} delivered to "
            f"{to_match} match / {to_list} list subscribers"
        )

    # ===== MUTATIONS =====

    def create_match(
        self,
        team_a: Optional[str],
        team_b: Optional[str],
        venue: Optional[str] = None,
        competition: Optional[str] = None,
    ) -> Match:
        match = self.registry.create(team_a, team_b, venue, competition)
        self.hub.add_topic(match.id)
        self._broadcast(
            Notification.for_match(NotificationKind.MATCH_CREATED, match), match.id
        )
        return match

    def start_match(self, match_id: str) -> Match:
        match = self.registry.start(match_id)
        self._broadcast(
            Notification.for_match(NotificationKind.MATCH_STARTED, match), match.id
        )
        return match

    def end_match(self, match_id: str) -> Match:
        match = self.registry.end(match_id)
        self._broadcast(
            Notification.for_match(NotificationKind.MATCH_ENDED, match), match.id
        )
        return match

    def record_event(
        self,
        match_id: str,
        kind: Union[EventKind, str],
        team: Union[TeamSide, str],
        player: Optional[str] = None,
        description: Optional[str] = None,
        allowed_kinds: Optional[Tuple[EventKind, ...]] = None,
    ) -> MatchEvent:
        match, event = self.registry.record_event(
            match_id, kind, team, player, description, allowed_kinds
        )
        self._broadcast(
            Notification.for_match(NotificationKind.for_event(event.kind), match, event),
            match.id,
        )
        return event

    def record_goal(
        self,
        match_id: str,
        team: Union[TeamSide, str],
        player: Optional[str] = None,
        description: Optional[str] = None,
    ) -> MatchEvent:
        return self.record_event(match_id, EventKind.GOAL, team, player, description)

    def record_card(
        self,
        match_id: str,
        team: Union[TeamSide, str],
        card_kind: Union[EventKind, str],
        player: Optional[str] = None,
        description: Optional[str] = None,
    ) -> MatchEvent:
        """Record a yellow or red card; any other kind is a ValidationError."""
        return self.record_event(
            match_id, card_kind, team, player, description, allowed_kinds=CARD_KINDS
        )

    def record_foul(
        self,
        match_id: str,
        team: Union[TeamSide, str],
        player: Optional[str] = None,
        description: Optional[str] = None,
    ) -> MatchEvent:
        return self.record_event(match_id, EventKind.FOUL, team, player, description)

    def delete_match(self, match_id: str) -> None:
        """Remove a match, tell viewers, then close its topic."""
        match = self.registry.delete(match_id)
        self._broadcast(
            Notification.for_match(NotificationKind.MATCH_DELETED, match), match.id
        )
        self.hub.remove_topic(match.id)

    # ===== READS =====

    def get_match(self, match_id: str) -> Match:
        return self.registry.get(match_id)

    def list_matches(self) -> List[Match]:
        return self.registry.list()

    # ===== STREAMS =====

    def open_match_stream(self, match_id: str) -> Subscriber:
        """Attach a new subscriber to one match; INITIAL carries its snapshot."""
        match = self.registry.get(match_id)
        subscriber = Subscriber(match.id)
        return self.hub.subscribe(
            subscriber, Notification.for_match(NotificationKind.INITIAL, match)
        )

    def open_list_stream(self) -> Subscriber:
        """Attach a new subscriber to every match; INITIAL carries the full list."""
        subscriber = Subscriber(ALL_MATCHES_TOPIC)
        return self.hub.subscribe(
            subscriber, Notification.for_list(self.registry.list())
        )

    def close_stream(self, subscriber: Subscriber) -> None:
        self.hub.unsubscribe(subscriber)


def build_match_service(clock: Optional[Clock] = None) -> MatchService:
    """Create a service wired with the configured placeholder labels."""
    from config.settings import settings

    registry = MatchRegistry(
        clock=clock,
        default_venue=settings.default_venue,
        default_competition=settings.default_competition,
    )
    return MatchService(registry=registry)


# Singleton, built at import so concurrent first requests share one instance
_service: MatchService = build_match_service()


def get_match_service() -> MatchService:
    """Get the process-wide match service instance."""
    return _service
