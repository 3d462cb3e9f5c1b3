"""Core Crack engine - 100% UI-agnostic."""

from core.cards import Card, Rank, Suit, create_deck, shuffle
from core.zones import PlayerZones, Zone
from core.rules import can_play_on, resolve_playable_zone

__all__ = [
    "Card",
    "Rank",
    "Suit",
    "create_deck",
    "shuffle",
    "PlayerZones",
    "Zone",
    "can_play_on",
    "resolve_playable_zone",
]
