"""Crack game session: current state, computer turn scheduling, and events."""

from enum import Enum, auto
from random import Random
from typing import Callable, Iterable

from transitions import Machine

from core.cards import Card
from core.game import commands
from core.game.commands import MUST_PICK_UP, CommandResult
from core.game.events import EventEmitter, EventHandler, EventType
from core.game.scheduler import ManualScheduler, ScheduledCall, Scheduler
from core.game.state import GamePhase, GameState, Player, TurnPhase
from core.rules import toggle_selection, toggle_setup_selection
from core.strategy.computer import ComputerPolicy
from core.zones import Zone
from logging_utils import get_logger

logger = get_logger(__name__)

# Thinking delays, in seconds
COMPUTER_DRAW_DELAY = 0.75
COMPUTER_PLAY_DELAY = 1.5


class AiStep(Enum):
    """
    Computer turn scheduler states.

    Flow: IDLE → AWAITING_DRAW → AWAITING_PLAY → IDLE
    """

    IDLE = auto()
    AWAITING_DRAW = auto()
    AWAITING_PLAY = auto()


class CrackGame:
    """
    One game of Crack against the computer.

    Holds the current immutable GameState and swaps it for the result of
    each command. The computer's turn runs as two delayed steps through
    the injected scheduler; each step acts on the snapshot taken when it
    was scheduled and is dropped if the game has moved on since.
    Communication with the presentation layer happens through events and
    return values only.
    """

    # State machine states
    STATES = [s.name.lower() for s in AiStep]

    # State machine transitions
    TRANSITIONS = [
        {"trigger": "schedule_draw", "source": "idle", "dest": "awaiting_draw"},
        {"trigger": "schedule_play", "source": "awaiting_draw", "dest": "awaiting_play"},
        {"trigger": "finish_turn", "source": "awaiting_play", "dest": "idle"},
        {"trigger": "cancel_turn", "source": "*", "dest": "idle"},
    ]

    def __init__(
        self,
        rng: Random | None = None,
        scheduler: Scheduler | None = None,
        draw_delay: float = COMPUTER_DRAW_DELAY,
        play_delay: float = COMPUTER_PLAY_DELAY,
        policy: ComputerPolicy | None = None,
    ) -> None:
        """
        Initialize and deal a new game.

        Args:
            rng: Random number generator for shuffling and blind computer picks
            scheduler: Timer for the computer's steps. Defaults to a
                ManualScheduler, which runs nothing until advanced.
            draw_delay: Seconds before the computer's draw step
            play_delay: Seconds between the computer's draw and play steps
            policy: Computer decision policy
        """
        self._rng = rng or Random()
        self.scheduler = scheduler or ManualScheduler()
        self.draw_delay = draw_delay
        self.play_delay = play_delay
        self.policy = policy or ComputerPolicy(rng=self._rng)
        self.events = EventEmitter()

        self._state = GameState()
        self._message = ""
        self._selection: tuple[Card, ...] = ()
        self._generation = 0
        self._version = 0
        self._pending: ScheduledCall | None = None

        # Initialize state machine
        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="idle",
            auto_transitions=False,
            model_attribute="_machine_state",
        )

        self.new_game()

    @property
    def ai_step(self) -> AiStep:
        """Get the computer scheduler state as enum."""
        return AiStep[self._machine_state.upper()]  # type: ignore

    @property
    def state(self) -> GameState:
        """Current (immutable) game state."""
        return self._state

    @property
    def status(self) -> str:
        """Status line for the player."""
        if self.must_pick_up_pile:
            return MUST_PICK_UP
        return self._message

    @property
    def must_pick_up_pile(self) -> bool:
        return commands.must_pick_up_pile(self._state)

    @property
    def playable_zone(self) -> Zone:
        """Zone the user may currently play from."""
        return self._state.playable_zone(Player.USER)

    @property
    def selection(self) -> tuple[Card, ...]:
        return self._selection

    @property
    def generation(self) -> int:
        """Number of games started on this instance."""
        return self._generation

    def subscribe(
        self,
        handler: EventHandler,
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to game events."""
        self.events.subscribe(handler, event_type)

    def unsubscribe(
        self,
        handler: EventHandler,
        event_type: EventType | None = None,
    ) -> None:
        self.events.unsubscribe(handler, event_type)

    # Commands

    def close(self) -> None:
        """Drop any pending computer step."""
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        self.cancel_turn()

    def new_game(self) -> CommandResult:
        """Throw away the current game, including any pending computer step, and deal again."""
        self.close()
        self._generation += 1
        self.events.clear_history()
        logger.info("Starting game %d", self._generation)
        return self._commit(commands.new_game(self._rng.random))

    def choose_face_up(self, card_ids: Iterable[str]) -> CommandResult:
        ids = list(card_ids)
        return self._run(lambda s: commands.choose_face_up(s, ids))

    def draw_card(self) -> CommandResult:
        return self._run(commands.draw_card)

    def play_cards(self, card_ids: Iterable[str], zone: Zone | str = Zone.HAND) -> CommandResult:
        """Play same-rank cards from the hand or face-up cards."""
        try:
            zone = Zone(zone)
        except ValueError:
            return self._reject(f"Unknown zone: {zone}")
        ids = list(card_ids)
        return self._run(lambda s: commands.play_cards(s, ids, zone))

    def play_face_down_card(self, card_id: str) -> CommandResult:
        return self._run(lambda s: commands.play_face_down_card(s, card_id))

    def play_face_down_position(self, position: int) -> CommandResult:
        """Play the face-down card at ``position`` without revealing ids to the caller."""
        face_down = self._state.user.face_down
        if not 0 <= position < len(face_down):
            return self._reject("There is no face-down card in that position.")
        return self.play_face_down_card(face_down[position].id)

    def pick_up_pile(self) -> CommandResult:
        return self._run(commands.pick_up_pile)

    # Selection helpers

    def select_card(self, card_id: str) -> CommandResult:
        """
        Toggle a card in the user's selection.

        During setup the selection is the face-up choice (at most three
        cards). During play it is the set of cards to play next and may
        only hold cards of one rank from the playable zone.
        """
        blocked = self._blocked()
        if blocked:
            return self._reject(blocked)

        state = self._state
        if state.phase == GamePhase.SETUP:
            found = state.user.find(Zone.HAND, [card_id])
            if found is None:
                return self._reject("You can only choose cards from your hand.")
            self._selection = toggle_setup_selection(self._selection, found[0])
            return self._note(f"Selected {len(self._selection)}/3 cards.")

        if state.phase != GamePhase.PLAYING:
            return self._reject("The game is over. Start a new game to play again.")
        if state.current_player != Player.USER or state.turn_phase != TurnPhase.PLAY:
            return self._reject("You can't select cards right now.")

        zone = self.playable_zone
        if zone not in (Zone.HAND, Zone.FACE_UP):
            return self._reject("Pick one of your face-down cards instead.")
        found = state.user.find(zone, [card_id])
        if found is None:
            return self._reject(f"You must play from your {zone} cards first.")
        self._selection = toggle_selection(self._selection, found[0])
        return self._note("Select card(s) to play.")

    def clear_selection(self) -> None:
        self._selection = ()

    def confirm_face_up(self) -> CommandResult:
        return self.choose_face_up([c.id for c in self._selection])

    def play_selected(self) -> CommandResult:
        return self.play_cards([c.id for c in self._selection], self.playable_zone)

    # Internals

    def _blocked(self) -> str | None:
        if self.ai_step != AiStep.IDLE:
            return "Please wait for the computer to finish its turn."
        return None

    def _note(self, message: str) -> CommandResult:
        self._message = message
        return CommandResult(state=self._state, message=message)

    def _reject(self, message: str) -> CommandResult:
        return self._commit(CommandResult.rejected(self._state, message))

    def _run(self, command: Callable[[GameState], CommandResult]) -> CommandResult:
        """Apply a user command, then hand over to the computer if it's now its turn."""
        blocked = self._blocked()
        if blocked:
            return self._reject(blocked)
        result = self._commit(command(self._state))
        self._schedule_computer_turn()
        return result

    def _commit(self, result: CommandResult) -> CommandResult:
        """Adopt an accepted result's state and publish its events."""
        if result.accepted:
            if result.state is not self._state:
                self._version += 1
                self._selection = ()
            self._state = result.state
            logger.debug("Accepted: %s", result.message)
        else:
            logger.debug("Rejected: %s", result.message)
        self._message = result.message

        self.events.emit_all(result.events)

        if result.accepted and self._state.is_over and self._state.winner is not None:
            logger.info("Game %d over: %s wins", self._generation, self._state.winner.name)
        return result

    def _schedule_computer_turn(self) -> None:
        state = self._state
        if (
            state.phase == GamePhase.PLAYING
            and state.current_player == Player.COMPUTER
            and self.ai_step == AiStep.IDLE
        ):
            self.schedule_draw()
            self.events.emit_new(EventType.COMPUTER_THINKING, step="draw")
            self._schedule(self.draw_delay, self._computer_draw)

    def _schedule(self, delay: float, step: Callable[[GameState], None]) -> None:
        """Queue a computer step bound to the current state snapshot."""
        stamp = (self._generation, self._version)
        snapshot = self._state

        def fire() -> None:
            if stamp != (self._generation, self._version):
                logger.debug("Discarding stale computer step %s", stamp)
                self.events.emit_new(
                    EventType.STALE_STEP_DISCARDED,
                    generation=stamp[0],
                    version=stamp[1],
                )
                return
            self._pending = None
            step(snapshot)

        self._pending = self.scheduler.call_later(delay, fire)

    def _computer_draw(self, snapshot: GameState) -> None:
        self._commit(self.policy.draw_step(snapshot))
        self.schedule_play()
        self.events.emit_new(EventType.COMPUTER_THINKING, step="play")
        self._schedule(self.play_delay, self._computer_play)

    def _computer_play(self, snapshot: GameState) -> None:
        result = self._commit(self.policy.play_step(snapshot))
        if not result.accepted:
            logger.warning("Computer move rejected: %s", result.message)
        self.finish_turn()
        # A go-again play leaves the turn with the computer
        self._schedule_computer_turn()
