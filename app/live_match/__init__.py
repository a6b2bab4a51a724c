"""
Live Match module: match state machine, event log and live fan-out.

Viewers attach to a single match or to the aggregate list and receive
every state change as it happens.
"""
from .models import (
    EventKind,
    Match,
    MatchEvent,
    MatchStatus,
    Notification,
    NotificationKind,
    TeamSide,
)
from .event_log import EventLog
from .errors import (
    MatchError,
    ValidationError,
    NotFoundError,
    InvalidTransitionError,
    InvalidStateError,
)
from .registry import MatchRegistry
from .hub import (
    ALL_MATCHES_TOPIC,
    Subscriber,
    SubscriptionHub,
    encode_notification,
)
from .service import (
    MatchService,
    build_match_service,
    get_match_service,
)

__all__ = [
    # Models
    "EventKind",
    "Match",
    "MatchEvent",
    "MatchStatus",
    "Notification",
    "NotificationKind",
    "TeamSide",
    "EventLog",
    # Errors
    "MatchError",
    "ValidationError",
    "NotFoundError",
    "InvalidTransitionError",
    "InvalidStateError",
    # Core
    "MatchRegistry",
    "ALL_MATCHES_TOPIC",
    "Subscriber",
    "SubscriptionHub",
    "encode_notification",
    "MatchService",
    "build_match_service",
    "get_match_service",
]
