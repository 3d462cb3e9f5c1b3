"""Dealing the opening table."""

from typing import Sequence

from core.cards import Card, create_deck, sort_by_rank
from core.game.state import GamePhase, GameState, Player, TurnPhase
from core.rules import DEAL_HAND_SIZE, FACE_DOWN_COUNT, FACE_UP_COUNT
from core.zones import PlayerZones

DECK_SIZE = len(create_deck())


def deal(shuffled_deck: Sequence[Card]) -> GameState:
    """
    Deal a new game from an already shuffled deck.

    Face-down cards go out first (user, then computer), then six cards to
    each hand. Whatever is left becomes the draw pile; for two players
    that is 34 cards.

    Args:
        shuffled_deck: All 52 cards in dealing order

    Returns:
        The opening GameState, in SETUP
    """
    if len(shuffled_deck) != DECK_SIZE or len({c.id for c in shuffled_deck}) != DECK_SIZE:
        raise ValueError(f"Expected {DECK_SIZE} distinct cards, got {len(shuffled_deck)}")

    cards = list(shuffled_deck)

    def take(n: int) -> tuple[Card, ...]:
        dealt = tuple(cards[:n])
        del cards[:n]
        return dealt

    user_face_down = take(FACE_DOWN_COUNT)
    computer_face_down = take(FACE_DOWN_COUNT)
    user_hand = sort_by_rank(take(DEAL_HAND_SIZE))
    computer_hand = sort_by_rank(take(DEAL_HAND_SIZE))

    return GameState(
        user=PlayerZones(hand=user_hand, face_down=user_face_down),
        computer=PlayerZones(hand=computer_hand, face_down=computer_face_down),
        draw_pile=tuple(cards),
        discard_pile=(),
        current_player=Player.USER,
        turn_phase=TurnPhase.PLAY,
        phase=GamePhase.SETUP,
        winner=None,
    )


def choose_computer_face_up(hand: Sequence[Card]) -> tuple[Card, ...]:
    """
    The computer's setup choice: its three highest cards go face-up.

    Low cards are the flexible ones, so they stay in hand.
    """
    return tuple(sorted(hand, key=lambda c: c.value, reverse=True)[:FACE_UP_COUNT])
