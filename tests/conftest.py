"""Pytest fixtures for Crack tests."""

import pytest
from random import Random

from core.cards import Card, create_deck, sort_by_rank
from core.engine import CrackGame
from core.game.scheduler import ManualScheduler
from core.game.state import GamePhase, GameState, Player, TurnPhase
from core.zones import PlayerZones


def _cards(text: str) -> tuple[Card, ...]:
    """'7H 10S KD' -> three cards."""
    return tuple(Card.from_string(s) for s in text.split())


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def cards():
    """Build cards from short labels, e.g. cards('7H 10S')."""
    return _cards


@pytest.fixture
def full_deck_ids():
    """Sorted ids of the 52-card deck."""
    return sorted(c.id for c in create_deck())


@pytest.fixture
def table():
    """
    Build a hand-crafted GameState.

    Defaults to the user's PLAY turn with everything empty.
    """

    def build(
        *,
        user_hand: str = "",
        user_up: str = "",
        user_down: str = "",
        computer_hand: str = "",
        computer_up: str = "",
        computer_down: str = "",
        draw: str = "",
        discard: str = "",
        current: Player = Player.USER,
        turn_phase: TurnPhase = TurnPhase.PLAY,
        phase: GamePhase = GamePhase.PLAYING,
    ) -> GameState:
        return GameState(
            user=PlayerZones(
                hand=sort_by_rank(_cards(user_hand)),
                face_up=_cards(user_up),
                face_down=_cards(user_down),
            ),
            computer=PlayerZones(
                hand=sort_by_rank(_cards(computer_hand)),
                face_up=_cards(computer_up),
                face_down=_cards(computer_down),
            ),
            draw_pile=_cards(draw),
            discard_pile=_cards(discard),
            current_player=current,
            turn_phase=turn_phase,
            phase=phase,
        )

    return build


@pytest.fixture
def scheduler():
    """A scheduler that only runs when the test advances it."""
    return ManualScheduler()


@pytest.fixture
def game(rng, scheduler):
    """A new game instance."""
    return CrackGame(rng=rng, scheduler=scheduler)


@pytest.fixture
def seat():
    """Put a hand-crafted state on the table of a CrackGame."""

    def place(game: CrackGame, state: GameState) -> CrackGame:
        game._state = state
        return game

    return place
