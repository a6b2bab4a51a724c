"""
Match registry and lifecycle state machine.

Owns every Match by id (creation order preserved) and is the only place
match state changes. All operations are synchronous, so a mutation never
interleaves with another mutation or read on the event loop.
"""
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union
import logging

from app.utils.helpers import safe_strip

from .errors import (
    InvalidStateError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from .models import EventKind, Match, MatchEvent, MatchStatus, TeamSide

logger = logging.getLogger("live_match.registry")

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def match_minute(start_time: Optional[datetime], now: datetime) -> int:
    """Whole minutes elapsed since kickoff, 0 if the match has no start time."""
    if start_time is None:
        return 0
    elapsed = (now - start_time).total_seconds()
    return max(0, int(elapsed // 60))


def placeholder_player(team: TeamSide) -> str:
    return f"Player {team.value}"


def _coerce_team(team: Union[TeamSide, str, None]) -> TeamSide:
    if isinstance(team, TeamSide):
        return team
    try:
        return TeamSide(safe_strip(team).upper())
    except ValueError:
        raise ValidationError(f"Unknown team side: {team!r} (expected 'A' or 'B')")


def _coerce_kind(kind: Union[EventKind, str, None]) -> EventKind:
    if isinstance(kind, EventKind):
        return kind
    try:
        return EventKind(safe_strip(kind).lower())
    except ValueError:
        raise ValidationError(f"Unknown event kind: {kind!r}")


class MatchRegistry:
    """
    In-memory store of matches plus the pending -> ongoing -> completed
    state machine.

    Usage:
        registry = MatchRegistry()
        match = registry.create("Red", "Blue")
        registry.start(match.id)
        match, event = registry.record_event(match.id, "goal", "A", "Smith")
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        default_venue: str = "Stadium",
        default_competition: str = "Friendly Match",
    ):
        self._matches: Dict[str, Match] = {}
        self._clock = clock or utc_now
        self._default_venue = default_venue
        self._default_competition = default_competition

    def create(
        self,
        team_a: Optional[str],
        team_b: Optional[str],
        venue: Optional[str] = None,
        competition: Optional[str] = None,
    ) -> Match:
        """Create a pending match with a 0-0 score and an empty event log."""
        team_a = safe_strip(team_a)
        team_b = safe_strip(team_b)
        if not team_a or not team_b:
            raise ValidationError("Both teams are required")

        match = Match(
            team_a=team_a,
            team_b=team_b,
            venue=safe_strip(venue) or self._default_venue,
            competition=safe_strip(competition) or self._default_competition,
        )
        self._matches[match.id] = match
        logger.info(f"Created match {match.id}: {team_a} vs {team_b}")
        return match

    def get(self, match_id: str) -> Match:
        match = self._matches.get(match_id)
        if match is None:
            raise NotFoundError(f"Match {match_id} not found")
        return match

    def list(self) -> List[Match]:
        """All matches in creation order."""
        return list(self._matches.values())

    def __contains__(self, match_id: str) -> bool:
        return match_id in self._matches

    def __len__(self) -> int:
        return len(self._matches)

    def start(self, match_id: str) -> Match:
        match = self.get(match_id)
        if match.status is not MatchStatus.PENDING:
            raise InvalidTransitionError(
                f"Match {match_id} cannot start: status is {match.status.value}"
            )
        match.status = MatchStatus.ONGOING
        match.start_time = self._clock()
        logger.info(f"Started match {match_id}")
        return match

    def end(self, match_id: str) -> Match:
        match = self.get(match_id)
        if match.status is not MatchStatus.ONGOING:
            raise InvalidTransitionError(
                f"Match {match_id} cannot end: status is {match.status.value}"
            )
        match.status = MatchStatus.COMPLETED
        match.end_time = self._clock()
        logger.info(f"Ended match {match_id} ({match.score_display})")
        return match

    def record_event(
        self,
        match_id: str,
        kind: Union[EventKind, str],
        team: Union[TeamSide, str],
        player: Optional[str] = None,
        description: Optional[str] = None,
        allowed_kinds: Optional[Iterable[EventKind]] = None,
    ) -> Tuple[Match, MatchEvent]:
        """
        Append an event to an ongoing match.

        Goals bump the scoring side's score before the event is appended,
        keeping each score equal to that side's goal-event count.

        Args:
            allowed_kinds: restrict the accepted kinds (e.g. cards only)

        Raises:
            NotFoundError: unknown match id
            InvalidStateError: match is not ongoing
            ValidationError: unknown or disallowed event kind, unknown team side
        """
        match = self.get(match_id)
        if match.status is not MatchStatus.ONGOING:
            raise InvalidStateError(
                f"Match {match_id} is not ongoing (status is {match.status.value})"
            )
        kind = _coerce_kind(kind)
        if allowed_kinds is not None:
            allowed = tuple(allowed_kinds)
            if kind not in allowed:
                expected = ", ".join(repr(k.value) for k in allowed)
                raise ValidationError(f"Event kind {kind.value!r} not allowed here (expected {expected})")
        team = _coerce_team(team)

        now = self._clock()
        event = MatchEvent(
            kind=kind,
            team=team,
            player=safe_strip(player) or placeholder_player(team),
            minute=match_minute(match.start_time, now),
            timestamp=now,
            description=safe_strip(description) or None,
        )

        if kind is EventKind.GOAL:
            if team is TeamSide.A:
                match.score_a += 1
            else:
                match.score_b += 1
        match.events.append(event)

        logger.info(
            f"Match {match_id}: {kind.value} for team {team.value} "
            f"at {event.minute}' ({match.score_display})"
        )
        return match, event

    def delete(self, match_id: str) -> Match:
        match = self.get(match_id)
        del self._matches[match_id]
        logger.info(f"Deleted match {match_id}")
        return match
