"""Game state: phases, seats, and the immutable table snapshot."""

from dataclasses import dataclass, replace
from enum import Enum, auto

from core.cards import Card
from core.rules import resolve_playable_zone
from core.zones import PlayerZones, Zone


class GamePhase(Enum):
    """
    Overall game phase.

    Flow: SETUP → PLAYING → GAME_OVER
    """

    # Hands dealt, face-up cards not yet chosen
    SETUP = auto()

    # Turns in progress
    PLAYING = auto()

    # Somebody emptied all three zones
    GAME_OVER = auto()

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()


class TurnPhase(Enum):
    """Sub-phase within a turn: draw first while the draw pile lasts, then play."""

    DRAW = auto()
    PLAY = auto()


class Player(Enum):
    """The two seats."""

    USER = auto()
    COMPUTER = auto()

    @property
    def opponent(self) -> "Player":
        return Player.COMPUTER if self == Player.USER else Player.USER


# Valid phase transitions. A new game may start from anywhere.
VALID_TRANSITIONS: dict[GamePhase, list[GamePhase]] = {
    GamePhase.SETUP: [GamePhase.PLAYING, GamePhase.SETUP],
    GamePhase.PLAYING: [GamePhase.GAME_OVER, GamePhase.SETUP],
    GamePhase.GAME_OVER: [GamePhase.SETUP],
}


def is_valid_transition(from_phase: GamePhase, to_phase: GamePhase) -> bool:
    """
    Check if a phase transition is valid.

    Args:
        from_phase: Current phase
        to_phase: Desired phase

    Returns:
        True if the transition is allowed
    """
    return to_phase in VALID_TRANSITIONS.get(from_phase, [])


@dataclass(frozen=True)
class GameState:
    """
    Immutable snapshot of the whole table.

    Every command produces a new GameState; nothing mutates one in place.
    The draw pile is drawn from the front, the discard pile's top is its
    last element. Cleared piles go to ``burned`` and stay out of play.
    """

    user: PlayerZones = PlayerZones()
    computer: PlayerZones = PlayerZones()
    draw_pile: tuple[Card, ...] = ()
    discard_pile: tuple[Card, ...] = ()
    burned: tuple[Card, ...] = ()
    current_player: Player = Player.USER
    turn_phase: TurnPhase = TurnPhase.PLAY
    phase: GamePhase = GamePhase.SETUP
    winner: Player | None = None

    @property
    def top_card(self) -> Card | None:
        """Current top of the discard pile."""
        return self.discard_pile[-1] if self.discard_pile else None

    def zones_for(self, player: Player) -> PlayerZones:
        return self.user if player == Player.USER else self.computer

    def with_zones(self, player: Player, zones: PlayerZones) -> "GameState":
        """Return a copy with ``player``'s zones replaced."""
        if player == Player.USER:
            return replace(self, user=zones)
        return replace(self, computer=zones)

    def playable_zone(self, player: Player) -> Zone:
        """Zone ``player`` is allowed to play from right now."""
        return resolve_playable_zone(self.zones_for(player), len(self.draw_pile))

    def next_turn_phase(self) -> TurnPhase:
        """Turns open with a draw while the draw pile lasts."""
        return TurnPhase.DRAW if self.draw_pile else TurnPhase.PLAY

    def with_phase(self, phase: GamePhase, **changes) -> "GameState":
        """Return a copy in ``phase``, rejecting transitions the game never makes."""
        if not is_valid_transition(self.phase, phase):
            raise ValueError(f"Invalid phase transition: {self.phase.name} -> {phase.name}")
        return replace(self, phase=phase, **changes)

    def all_cards(self) -> list[Card]:
        """Every card on the table, in no particular order."""
        return [
            *self.user.all_cards(),
            *self.computer.all_cards(),
            *self.draw_pile,
            *self.discard_pile,
            *self.burned,
        ]

    @property
    def is_over(self) -> bool:
        return self.phase == GamePhase.GAME_OVER
