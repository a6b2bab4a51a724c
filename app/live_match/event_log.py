"""
Append-only event log owned by a single match.
"""
from typing import TYPE_CHECKING, Iterator, List, Tuple

if TYPE_CHECKING:
    from .models import MatchEvent


class EventLog:
    """
    Ordered, append-only sequence of match events.

    No validation happens here; the registry checks match state before
    appending. Events are never reordered, replaced or removed.
    """

    def __init__(self):
        self._events: List["MatchEvent"] = []

    def append(self, event: "MatchEvent") -> None:
        self._events.append(event)

    def snapshot(self) -> Tuple["MatchEvent", ...]:
        """Immutable copy of the events in insertion order."""
        return tuple(self._events)

    def __iter__(self) -> Iterator["MatchEvent"]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        return len(self._events)

    def __repr__(self):
        return f"EventLog(events={len(self._events)})"
