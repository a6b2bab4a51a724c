"""
Data models for the live match tracker.

These dataclasses are the canonical shape of a match and its events.
``to_dict()`` produces the wire shape shared by REST responses and
stream notifications.
"""
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any
from datetime import datetime
from enum import Enum
import uuid

from .event_log import EventLog


class MatchStatus(Enum):
    """Lifecycle states. Transitions only ever go PENDING -> ONGOING -> COMPLETED."""
    PENDING = "pending"
    ONGOING = "ongoing"
    COMPLETED = "completed"


class EventKind(Enum):
    """Types of match events."""
    GOAL = "goal"
    YELLOW_CARD = "yellow_card"
    RED_CARD = "red_card"
    FOUL = "foul"
    SUBSTITUTION = "substitution"
    PENALTY = "penalty"

    @property
    def is_card(self) -> bool:
        return self in (EventKind.YELLOW_CARD, EventKind.RED_CARD)


class TeamSide(Enum):
    """Which of the two teams an event belongs to."""
    A = "A"
    B = "B"


class NotificationKind(Enum):
    """Tag carried by every stream notification."""
    INITIAL = "INITIAL"
    MATCH_CREATED = "MATCH_CREATED"
    MATCH_STARTED = "MATCH_STARTED"
    MATCH_ENDED = "MATCH_ENDED"
    MATCH_DELETED = "MATCH_DELETED"
    GOAL = "GOAL"
    CARD = "CARD"
    FOUL = "FOUL"
    SUBSTITUTION = "SUBSTITUTION"
    PENALTY = "PENALTY"

    @classmethod
    def for_event(cls, kind: EventKind) -> "NotificationKind":
        """Notification tag published when an event of ``kind`` is recorded."""
        if kind.is_card:
            return cls.CARD
        return cls[kind.name]


def new_id() -> str:
    return str(uuid.uuid4())


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass(frozen=True)
class MatchEvent:
    """A single match event. Immutable once created."""
    kind: EventKind
    team: TeamSide
    player: str
    minute: int
    timestamp: datetime
    description: Optional[str] = None
    id: str = field(default_factory=new_id)

    @property
    def is_goal(self) -> bool:
        return self.kind is EventKind.GOAL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.kind.value,
            "team": self.team.value,
            "player": self.player,
            "minute": self.minute,
            "timestamp": _iso(self.timestamp),
            "description": self.description,
        }


@dataclass
class Match:
    """
    A tracked match.

    Owned by MatchRegistry and mutated only through it. ``score_a`` and
    ``score_b`` always equal the number of goal events for each side.
    """
    team_a: str
    team_b: str
    venue: str
    competition: str
    id: str = field(default_factory=new_id)
    score_a: int = 0
    score_b: int = 0
    status: MatchStatus = MatchStatus.PENDING
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    events: EventLog = field(default_factory=EventLog)

    @property
    def is_live(self) -> bool:
        return self.status is MatchStatus.ONGOING

    @property
    def score_display(self) -> str:
        """Format score as 'X - Y'."""
        return f"{self.score_a} - {self.score_b}"

    def goals_for(self, team: TeamSide) -> int:
        """Count goal events recorded for ``team``."""
        return sum(1 for e in self.events if e.is_goal and e.team is team)

    def to_dict(self) -> Dict[str, Any]:
        """Full snapshot, including the complete event list."""
        return {
            "id": self.id,
            "teamA": self.team_a,
            "teamB": self.team_b,
            "scoreA": self.score_a,
            "scoreB": self.score_b,
            "status": self.status.value,
            "events": [e.to_dict() for e in self.events.snapshot()],
            "startTime": _iso(self.start_time),
            "endTime": _iso(self.end_time),
            "venue": self.venue,
            "competition": self.competition,
        }


@dataclass(frozen=True)
class Notification:
    """
    Envelope pushed to stream subscribers.

    Snapshots are captured as plain dicts when the notification is built,
    so a queued notification never reflects later mutations.
    """
    kind: NotificationKind
    match: Optional[Dict[str, Any]] = None
    matches: Optional[List[Dict[str, Any]]] = None
    event: Optional[Dict[str, Any]] = None

    @classmethod
    def for_match(
        cls,
        kind: NotificationKind,
        match: Match,
        event: Optional[MatchEvent] = None,
    ) -> "Notification":
        return cls(
            kind=kind,
            match=match.to_dict(),
            event=event.to_dict() if event is not None else None,
        )

    @classmethod
    def for_list(cls, matches: List[Match]) -> "Notification":
        """INITIAL notification for the aggregate topic."""
        return cls(
            kind=NotificationKind.INITIAL,
            matches=[m.to_dict() for m in matches],
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"kind": self.kind.value}
        if self.matches is not None:
            result["matches"] = self.matches
        else:
            result["match"] = self.match
        if self.event is not None:
            result["event"] = self.event
        return result
