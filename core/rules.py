"""Play legality, zone priority, and play effects for Crack."""

from typing import Sequence

from core.cards import Card, Rank
from core.zones import PlayerZones, Zone

# Deal sizes
FACE_DOWN_COUNT = 3
DEAL_HAND_SIZE = 6
FACE_UP_COUNT = 3

# Hands are topped back up to this size after a play
MIN_HAND_SIZE = 3

# Playing this many of one rank at once burns the pile
FOUR_OF_A_KIND = 4


def can_play_on(card: Card, top: Card | None = None) -> bool:
    """
    Check whether ``card`` may land on the discard pile.

    Args:
        card: Candidate card
        top: Current top of the discard pile, or None if the pile is empty

    Returns:
        True if the play is legal
    """
    if top is None:
        return True
    # Anything goes on a 10
    if top.rank == Rank.TEN:
        return True
    if card.is_wild:
        return True
    return card.value >= top.value


def resolve_playable_zone(zones: PlayerZones, draw_pile_size: int) -> Zone:
    """
    Decide which zone a player must play from.

    The hand always comes first. Table cards open up only once the draw
    pile is exhausted; with an empty hand and cards left to draw the
    player has to draw first.
    """
    if zones.hand:
        return Zone.HAND
    if draw_pile_size == 0:
        if zones.face_up:
            return Zone.FACE_UP
        if zones.face_down:
            return Zone.FACE_DOWN
        return Zone.NONE
    return Zone.NONE


def is_same_rank(cards: Sequence[Card]) -> bool:
    """True for a non-empty run of cards that all share one rank."""
    return bool(cards) and all(c.rank == cards[0].rank for c in cards)


def clears_pile(cards: Sequence[Card]) -> bool:
    """A 2, or four of a kind in one play, burns the discard pile."""
    return cards[0].rank == Rank.TWO or len(cards) == FOUR_OF_A_KIND


def grants_go_again(cards: Sequence[Card]) -> bool:
    """2s, 10s and four of a kind let the same player play again."""
    return cards[0].rank in (Rank.TWO, Rank.TEN) or len(cards) == FOUR_OF_A_KIND


def has_legal_play(cards: Sequence[Card], top: Card | None) -> bool:
    return any(can_play_on(c, top) for c in cards)


def toggle_selection(selection: Sequence[Card], card: Card) -> tuple[Card, ...]:
    """
    Update a play selection with a clicked card.

    Selected cards toggle off. A card of another rank starts a new
    selection, so a selection never mixes ranks.
    """
    if any(c.id == card.id for c in selection):
        return tuple(c for c in selection if c.id != card.id)
    if selection and selection[0].rank != card.rank:
        return (card,)
    return (*selection, card)


def toggle_setup_selection(selection: Sequence[Card], card: Card) -> tuple[Card, ...]:
    """Update the face-up choice during setup; capped at FACE_UP_COUNT cards."""
    if any(c.id == card.id for c in selection):
        return tuple(c for c in selection if c.id != card.id)
    if len(selection) < FACE_UP_COUNT:
        return (*selection, card)
    return tuple(selection)
