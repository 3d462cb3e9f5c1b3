"""Pure game rules: state, commands, dealing, events, and timers."""

from core.game.events import EventEmitter, EventType, GameEvent
from core.game.state import GamePhase, GameState, Player, TurnPhase
from core.game.dealer import deal
from core.game.commands import CommandResult, must_pick_up_pile
from core.game.scheduler import AsyncioScheduler, ManualScheduler, Scheduler

__all__ = [
    "EventEmitter",
    "EventType",
    "GameEvent",
    "GamePhase",
    "GameState",
    "Player",
    "TurnPhase",
    "deal",
    "CommandResult",
    "must_pick_up_pile",
    "AsyncioScheduler",
    "ManualScheduler",
    "Scheduler",
]
