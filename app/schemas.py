"""
Pydantic schemas for API request bodies.
Field names follow the JSON the admin UI sends (camelCase).
"""
from pydantic import BaseModel, Field
from typing import Literal, Optional


TeamSideField = Literal["A", "B"]
CardType = Literal["yellow_card", "red_card"]
EventType = Literal["goal", "yellow_card", "red_card", "foul", "substitution", "penalty"]


# ===== MATCH SCHEMAS =====

class CreateMatchRequest(BaseModel):
    """Body for creating a match. Missing or empty team names are rejected by the core."""
    teamA: Optional[str] = None
    teamB: Optional[str] = None
    venue: Optional[str] = None
    competition: Optional[str] = None


# ===== EVENT SCHEMAS =====

class EventBase(BaseModel):
    """Fields shared by every event-recording request"""
    team: TeamSideField
    player: Optional[str] = None
    description: Optional[str] = None


class GoalRequest(EventBase):
    pass


class FoulRequest(EventBase):
    pass


class CardRequest(EventBase):
    cardType: CardType


class EventRequest(EventBase):
    """Generic event, covers substitutions and penalties"""
    type: EventType = Field(..., description="Event kind")
