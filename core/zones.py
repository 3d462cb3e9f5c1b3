"""Per-player card zones."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable

from core.cards import Card


class Zone(Enum):
    """Where a player's cards live, and where they may currently play from."""

    HAND = "hand"
    FACE_UP = "face_up"
    FACE_DOWN = "face_down"
    NONE = "none"

    def __str__(self) -> str:
        return self.value.replace("_", "-")


@dataclass(frozen=True)
class PlayerZones:
    """
    One player's cards.

    ``hand`` is kept sorted by rank; the order is cosmetic. ``face_up`` is
    visible to both players, ``face_down`` to neither.
    """

    hand: tuple[Card, ...] = ()
    face_up: tuple[Card, ...] = ()
    face_down: tuple[Card, ...] = ()

    def cards_in(self, zone: Zone) -> tuple[Card, ...]:
        """Return the cards held in ``zone`` (empty for Zone.NONE)."""
        if zone == Zone.HAND:
            return self.hand
        if zone == Zone.FACE_UP:
            return self.face_up
        if zone == Zone.FACE_DOWN:
            return self.face_down
        return ()

    def with_cards(self, zone: Zone, cards: Iterable[Card]) -> "PlayerZones":
        """Return a copy with ``zone`` replaced by ``cards``."""
        if zone == Zone.NONE:
            raise ValueError("Cannot assign cards to Zone.NONE")
        return replace(self, **{zone.value: tuple(cards)})

    def without(self, zone: Zone, cards: Iterable[Card]) -> "PlayerZones":
        """Return a copy with ``cards`` removed from ``zone``."""
        removed = {c.id for c in cards}
        return self.with_cards(
            zone, (c for c in self.cards_in(zone) if c.id not in removed)
        )

    def find(self, zone: Zone, card_ids: Iterable[str]) -> list[Card] | None:
        """
        Look up cards in ``zone`` by id.

        Returns None if any id is not present in the zone.
        """
        by_id = {c.id: c for c in self.cards_in(zone)}
        found = []
        for card_id in card_ids:
            if card_id not in by_id:
                return None
            found.append(by_id[card_id])
        return found

    @property
    def is_empty(self) -> bool:
        """True once hand, face-up and face-down are all empty."""
        return not (self.hand or self.face_up or self.face_down)

    @property
    def card_count(self) -> int:
        return len(self.hand) + len(self.face_up) + len(self.face_down)

    def all_cards(self) -> list[Card]:
        return [*self.hand, *self.face_up, *self.face_down]
