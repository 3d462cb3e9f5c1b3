"""Computer opponent decision policy."""

from dataclasses import dataclass
from enum import Enum, auto
from random import Random
from typing import Sequence

from core.cards import Card
from core.game.commands import (
    CommandResult,
    draw_card,
    pass_turn,
    pick_up_pile,
    play_cards,
    play_face_down_card,
)
from core.game.state import GameState, Player, TurnPhase
from core.rules import can_play_on
from core.zones import Zone


class Move(Enum):
    """What the computer decided to do on its play step."""

    PLAY = auto()
    PLAY_FACE_DOWN = auto()
    PICK_UP = auto()
    PASS = auto()

    def __str__(self) -> str:
        return self.name.replace("_", " ").lower()


@dataclass(frozen=True)
class Decision:
    """A play-step decision and the cards it involves."""

    move: Move
    zone: Zone = Zone.NONE
    cards: tuple[Card, ...] = ()

    @property
    def card_ids(self) -> list[str]:
        return [c.id for c in self.cards]


def candidate_groups(cards: Sequence[Card], top: Card | None) -> list[tuple[Card, ...]]:
    """
    Every legal play from ``cards``: one maximal same-rank group per legal rank.

    Returned lowest rank first.
    """
    groups: dict[int, tuple[Card, ...]] = {}
    for card in cards:
        if card.value in groups or not can_play_on(card, top):
            continue
        groups[card.value] = tuple(c for c in cards if c.rank == card.rank)
    return [groups[value] for value in sorted(groups)]


def best_group(groups: Sequence[tuple[Card, ...]]) -> tuple[Card, ...] | None:
    """
    Pick the group to play.

    The lowest non-wild rank wins; 2s and 10s are saved until nothing
    else is legal, and then the lowest of them goes.
    """
    if not groups:
        return None
    for group in groups:
        if not group[0].is_wild:
            return group
    return groups[0]


class ComputerPolicy:
    """
    Decides and carries out a seat's turn.

    Works through the same command functions a human uses. The seat is a
    parameter so simulations can let the policy play both sides.
    """

    def __init__(self, rng: Random | None = None, player: Player = Player.COMPUTER) -> None:
        """
        Initialize the policy.

        Args:
            rng: Random source for blind face-down picks
            player: Seat this policy plays for
        """
        self._rng = rng or Random()
        self.player = player

    def decide(self, state: GameState) -> Decision:
        """Choose the play-step move for the current state."""
        zone = state.playable_zone(self.player)
        zones = state.zones_for(self.player)

        if zone in (Zone.HAND, Zone.FACE_UP):
            group = best_group(candidate_groups(zones.cards_in(zone), state.top_card))
            if group is not None:
                return Decision(Move.PLAY, zone, group)
        elif zone == Zone.FACE_DOWN:
            # Blind: the rank is unknown, so any position is as good as another
            index = int(self._rng.random() * len(zones.face_down))
            return Decision(Move.PLAY_FACE_DOWN, zone, (zones.face_down[index],))

        if state.discard_pile and zone in (Zone.HAND, Zone.FACE_UP):
            return Decision(Move.PICK_UP, zone)
        return Decision(Move.PASS, zone)

    def draw_step(self, state: GameState) -> CommandResult:
        """Draw if this turn opens with a draw; otherwise leave the state alone."""
        if state.turn_phase == TurnPhase.DRAW and state.draw_pile:
            return draw_card(state, self.player)
        return CommandResult(state=state, message="Computer is thinking...")

    def play_step(self, state: GameState) -> CommandResult:
        """Decide and apply the play step."""
        decision = self.decide(state)
        if decision.move == Move.PLAY:
            return play_cards(state, decision.card_ids, decision.zone, self.player)
        if decision.move == Move.PLAY_FACE_DOWN:
            return play_face_down_card(state, decision.card_ids[0], self.player)
        if decision.move == Move.PICK_UP:
            return pick_up_pile(state, self.player)
        return pass_turn(state, self.player)

    def take_turn(self, state: GameState) -> CommandResult:
        """Run both steps back to back, with no delay."""
        drawn = self.draw_step(state)
        played = self.play_step(drawn.state)
        return CommandResult(
            state=played.state,
            message=played.message,
            accepted=played.accepted,
            events=drawn.events + played.events,
        )
