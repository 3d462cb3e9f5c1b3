"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, ConfigDict, Field
from typing import Literal


# Requests
class FaceUpRequest(BaseModel):
    """Cards chosen to go face-up during setup."""

    # Count is checked by the engine so a wrong count gets its status message
    card_ids: list[str] = Field(default_factory=list)


class PlayRequest(BaseModel):
    """Cards to play from the hand or face-up cards."""

    card_ids: list[str] = Field(..., min_length=1)
    zone: Literal["hand", "face_up"] = "hand"


class FaceDownRequest(BaseModel):
    """Face-down card to flip, by position (ids would give the rank away)."""

    position: int = Field(..., ge=0)


# Responses
class CardResponse(BaseModel):
    """Card representation."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    rank: str
    suit: str
    value: int


class PlayerZonesResponse(BaseModel):
    """The user's own cards. Face-down cards are only counted."""

    hand: list[CardResponse]
    face_up: list[CardResponse]
    face_down_count: int


class OpponentZonesResponse(BaseModel):
    """The computer's cards as the user may see them."""

    hand_count: int
    face_up: list[CardResponse]
    face_down_count: int


class GameStateResponse(BaseModel):
    """Current game state."""

    phase: str
    current_player: str
    turn_phase: str
    winner: str | None
    status: str
    user: PlayerZonesResponse
    computer: OpponentZonesResponse
    draw_pile_count: int
    discard_pile_count: int
    burned_count: int
    discard_top: CardResponse | None
    playable_zone: str
    must_pick_up_pile: bool
    computer_step: str
    can_draw: bool
    can_pick_up: bool
