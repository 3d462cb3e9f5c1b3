"""Events published by a Crack game as its state changes."""

from collections import defaultdict, deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any, Callable, Iterable


class EventType(Enum):
    """Types of game events."""

    # Game flow events
    GAME_STARTED = auto()
    FACE_UP_CHOSEN = auto()
    GAME_OVER = auto()

    # Card movement events
    CARD_DRAWN = auto()
    CARDS_PLAYED = auto()
    HAND_REPLENISHED = auto()
    PILE_PICKED_UP = auto()

    # Effects
    PILE_CLEARED = auto()
    GO_AGAIN = auto()
    TURN_PASSED = auto()

    # Blind play from the face-down stack
    FACE_DOWN_REVEALED = auto()
    FACE_DOWN_FAILED = auto()

    # Computer opponent
    COMPUTER_THINKING = auto()
    STALE_STEP_DISCARDED = auto()

    # Error events
    INVALID_ACTION = auto()


@dataclass(frozen=True)
class GameEvent:
    """Something that happened in a game, with the details a listener needs."""

    event_type: EventType
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"{self.event_type.name}: {self.data}"


def event(event_type: EventType, **data: Any) -> GameEvent:
    """Shorthand used by the pure command functions."""
    return GameEvent(event_type=event_type, data=data)


EventHandler = Callable[[GameEvent], None]

# Older events fall off the front of the history
HISTORY_LIMIT = 500


class EventEmitter:
    """
    Fans game events out to listeners and keeps a bounded history.

    Listeners registered for a specific EventType run before catch-all
    listeners (registered with ``event_type=None``).
    """

    def __init__(self, history_limit: int = HISTORY_LIMIT) -> None:
        self._listeners: defaultdict[EventType | None, list[EventHandler]] = defaultdict(list)
        self._history: deque[GameEvent] = deque(maxlen=history_limit)

    def subscribe(self, handler: EventHandler, event_type: EventType | None = None) -> None:
        self._listeners[event_type].append(handler)

    def unsubscribe(self, handler: EventHandler, event_type: EventType | None = None) -> None:
        """Remove a listener; unknown listeners are ignored."""
        listeners = self._listeners.get(event_type)
        if listeners and handler in listeners:
            listeners.remove(handler)

    def emit(self, game_event: GameEvent) -> None:
        self._history.append(game_event)
        # Copies, so a listener may unsubscribe itself while being called
        targeted = list(self._listeners.get(game_event.event_type, ()))
        catch_all = list(self._listeners.get(None, ()))
        for handler in targeted + catch_all:
            handler(game_event)

    def emit_all(self, game_events: Iterable[GameEvent]) -> None:
        """Emit a command's events in order."""
        for game_event in game_events:
            self.emit(game_event)

    def emit_new(self, event_type: EventType, **data: Any) -> GameEvent:
        game_event = event(event_type, **data)
        self.emit(game_event)
        return game_event

    @property
    def history(self) -> list[GameEvent]:
        """Events emitted so far, oldest first."""
        return list(self._history)

    def clear_history(self) -> None:
        self._history.clear()
