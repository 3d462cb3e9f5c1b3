"""Live game feed over WebSockets: events out, commands in."""

import asyncio
import json
from fastapi import APIRouter, HTTPException, WebSocket, WebSocketDisconnect
from pydantic import ValidationError
from typing import Any

from api.routes.game import game_state_response, get_game
from api.schemas import FaceDownRequest, FaceUpRequest, PlayRequest
from core.engine import CrackGame
from core.game.commands import CommandResult
from core.game.events import EventHandler, GameEvent
from logging_utils import get_logger

logger = get_logger(__name__)

router = APIRouter()


class ConnectionManager:
    """Manage WebSocket connections and the game event feeds behind them."""

    def __init__(self) -> None:
        self._connections: dict[str, WebSocket] = {}
        self._event_queues: dict[str, asyncio.Queue] = {}
        self._handlers: dict[str, tuple[CrackGame, EventHandler]] = {}

    async def connect(self, websocket: WebSocket, session_id: str, game: CrackGame) -> None:
        """Accept a connection and start queueing the game's events for it."""
        await websocket.accept()
        self._connections[session_id] = websocket
        self._event_queues[session_id] = asyncio.Queue(maxsize=256)
        self.follow(session_id, game)

    def follow(self, session_id: str, game: CrackGame) -> None:
        """Point the session's event feed at ``game``, leaving any previous game."""
        self._unfollow(session_id)

        def handler(event: GameEvent) -> None:
            self._queue_event(session_id, event)

        game.subscribe(handler)
        self._handlers[session_id] = (game, handler)

    def game_for(self, session_id: str) -> CrackGame | None:
        followed = self._handlers.get(session_id)
        return followed[0] if followed else None

    def _unfollow(self, session_id: str) -> None:
        game, handler = self._handlers.pop(session_id, (None, None))
        if game is not None:
            game.unsubscribe(handler)

    def disconnect(self, session_id: str) -> None:
        """Remove a connection and stop following its game."""
        self._connections.pop(session_id, None)
        self._event_queues.pop(session_id, None)
        self._unfollow(session_id)

    def _queue_event(self, session_id: str, event: GameEvent) -> None:
        """Buffer an event for the sender task; drops it if the client lags."""
        queue = self._event_queues.get(session_id)
        if queue is not None and not queue.full():
            queue.put_nowait(event)

    async def get_event(self, session_id: str) -> GameEvent | None:
        """Next buffered event, or None after a short wait."""
        queue = self._event_queues.get(session_id)
        if queue is None:
            return None
        try:
            return await asyncio.wait_for(queue.get(), timeout=0.1)
        except asyncio.TimeoutError:
            return None

    async def send_message(self, session_id: str, message: dict[str, Any]) -> None:
        websocket = self._connections.get(session_id)
        if websocket is not None:
            await websocket.send_json(message)

    @property
    def active_connections(self) -> int:
        """Open sockets, reported by the health check."""
        return len(self._connections)


# One manager per process, shared by every socket
manager = ConnectionManager()


def _event_to_message(event: GameEvent, game: CrackGame) -> dict[str, Any]:
    """Event plus the state it left behind, as the client renders both."""
    return {
        "type": "event",
        "event_type": event.event_type.name,
        "data": event.data,
        "state": game_state_response(game).model_dump(),
    }


def _describe(exc: ValidationError) -> str:
    """One line per bad field, e.g. ``position: Input should be a valid integer``."""
    return "; ".join(
        f"{'.'.join(str(part) for part in error['loc']) or 'message'}: {error['msg']}"
        for error in exc.errors()
    )


def _dispatch(game: CrackGame, message: dict[str, Any]) -> CommandResult | None:
    """
    Run the command named by a client message.

    Returns None for unknown types. Malformed fields raise
    ``pydantic.ValidationError`` before the game is touched.
    """
    msg_type = message.get("type")
    if msg_type == "new_game":
        return game.new_game()
    if msg_type == "setup":
        return game.choose_face_up(FaceUpRequest.model_validate(message).card_ids)
    if msg_type == "draw":
        return game.draw_card()
    if msg_type == "play":
        request = PlayRequest.model_validate(message)
        return game.play_cards(request.card_ids, request.zone)
    if msg_type == "face_down":
        return game.play_face_down_position(FaceDownRequest.model_validate(message).position)
    if msg_type == "pick_up":
        return game.pick_up_pile()
    return None


async def _current_game(session_id: str) -> CrackGame:
    """
    The session's live game, switching the event feed over if it changed.

    A session closed or expired over HTTP gets a fresh game here too.
    """
    game = await get_game(session_id)
    if manager.game_for(session_id) is not game:
        logger.debug("Socket for session now follows a new game")
        manager.follow(session_id, game)
    return game


@router.websocket("/game/{session_id}")
async def game_websocket(websocket: WebSocket, session_id: str) -> None:
    """
    Stream one session's game and accept commands for it.

    Messages from client:
    - {"type": "get_state"}
    - {"type": "new_game"}
    - {"type": "setup", "card_ids": [...]}
    - {"type": "draw"}
    - {"type": "play", "card_ids": [...], "zone": "hand"|"face_up"}
    - {"type": "face_down", "position": 0}
    - {"type": "pick_up"}

    Messages to client:
    - {"type": "state_update", "state": {...}}
    - {"type": "event", "event_type": "...", "data": {...}, "state": {...}}
    - {"type": "error", "message": "..."}
    """
    try:
        game = await get_game(session_id)
    except HTTPException:
        await websocket.close(code=1008)
        return

    await manager.connect(websocket, session_id, game)

    async def send_error(text: str) -> None:
        await manager.send_message(session_id, {"type": "error", "message": text})

    async def send_state(current: CrackGame) -> None:
        await manager.send_message(session_id, {
            "type": "state_update",
            "state": game_state_response(current).model_dump(),
        })

    await send_state(game)

    async def process_events():
        """Forward game events, including the computer's delayed steps."""
        while True:
            event = await manager.get_event(session_id)
            followed = manager.game_for(session_id)
            if event is not None and followed is not None:
                await manager.send_message(session_id, _event_to_message(event, followed))

    event_task = asyncio.create_task(process_events())

    try:
        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                message = None
            if not isinstance(message, dict):
                await send_error("Messages must be JSON objects")
                continue

            try:
                game = await _current_game(session_id)
            except HTTPException:
                await websocket.close(code=1008)
                break

            if message.get("type") == "get_state":
                await send_state(game)
                continue

            try:
                result = _dispatch(game, message)
            except ValidationError as exc:
                await send_error(f"Invalid {message.get('type')} message: {_describe(exc)}")
                continue

            if result is None:
                await send_error(f"Unknown message type: {message.get('type')}")
            elif not result.accepted:
                await send_error(result.message)

    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.exception("WebSocket handler failed")
        await send_error(str(e))
    finally:
        event_task.cancel()
        try:
            await event_task
        except asyncio.CancelledError:
            pass
        manager.disconnect(session_id)
