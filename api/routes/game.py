"""Game API endpoints."""

from fastapi import APIRouter, HTTPException, Header
from typing import Annotated

from api.schemas import (
    CardResponse,
    FaceDownRequest,
    FaceUpRequest,
    GameStateResponse,
    OpponentZonesResponse,
    PlayRequest,
    PlayerZonesResponse,
)
from api.session import close_session, get_session_store, open_session, read_token, touch_session
from config import config
from core.cards import Card
from core.engine import AiStep, CrackGame
from core.game.commands import CommandResult
from core.game.scheduler import AsyncioScheduler
from core.game.state import GamePhase, Player, TurnPhase
from core.zones import Zone
from logging_utils import get_logger

logger = get_logger(__name__)

router = APIRouter()

# Live games by session token. Games are never persisted.
_games: dict[str, CrackGame] = {}


def _make_game() -> CrackGame:
    """Create a game whose computer turns run on the event loop."""
    return CrackGame(
        scheduler=AsyncioScheduler(),
        draw_delay=config.game.computer_draw_delay,
        play_delay=config.game.computer_play_delay,
    )


def _drop_game(token: str) -> None:
    game = _games.pop(token, None)
    if game is not None:
        game.close()


async def _evict_expired() -> None:
    expired = await get_session_store().expire()
    for token in expired:
        _drop_game(token)
    if expired:
        logger.info("Evicted %d expired sessions", len(expired))


def live_game_count() -> int:
    return len(_games)


def close_all_games() -> None:
    """Cancel every pending computer step; used on shutdown."""
    for token in list(_games):
        _drop_game(token)


async def get_game(session_id: str) -> CrackGame:
    """Get or create the game for a session token."""
    if read_token(session_id) is None:
        raise HTTPException(status_code=401, detail="Invalid or expired session")

    await _evict_expired()
    game = _games.get(session_id)
    if game is None:
        game = _games[session_id] = _make_game()
    await touch_session(session_id, game.generation)
    return game


def _card_response(card: Card) -> CardResponse:
    return CardResponse(id=card.id, rank=str(card.rank), suit=str(card.suit), value=card.value)


def game_state_response(game: CrackGame) -> GameStateResponse:
    """Project the game for the user: the computer's hand and all face-down cards stay hidden."""
    state = game.state
    user_turn = (
        state.phase == GamePhase.PLAYING
        and state.current_player == Player.USER
        and game.ai_step == AiStep.IDLE
    )
    zone = game.playable_zone
    top = state.top_card

    return GameStateResponse(
        phase=state.phase.name,
        current_player=state.current_player.name,
        turn_phase=state.turn_phase.name,
        winner=state.winner.name if state.winner else None,
        status=game.status,
        user=PlayerZonesResponse(
            hand=[_card_response(c) for c in state.user.hand],
            face_up=[_card_response(c) for c in state.user.face_up],
            face_down_count=len(state.user.face_down),
        ),
        computer=OpponentZonesResponse(
            hand_count=len(state.computer.hand),
            face_up=[_card_response(c) for c in state.computer.face_up],
            face_down_count=len(state.computer.face_down),
        ),
        draw_pile_count=len(state.draw_pile),
        discard_pile_count=len(state.discard_pile),
        burned_count=len(state.burned),
        discard_top=_card_response(top) if top else None,
        playable_zone=zone.value,
        must_pick_up_pile=game.must_pick_up_pile,
        computer_step=game.ai_step.name,
        can_draw=user_turn and state.turn_phase == TurnPhase.DRAW and bool(state.draw_pile),
        can_pick_up=(
            user_turn
            and state.turn_phase == TurnPhase.PLAY
            and bool(state.discard_pile)
            and (zone == Zone.HAND or game.must_pick_up_pile)
        ),
    )


def _respond(game: CrackGame, result: CommandResult) -> GameStateResponse:
    if not result.accepted:
        raise HTTPException(status_code=400, detail=result.message)
    return game_state_response(game)


@router.post("/new")
async def new_game(
    session_id: Annotated[str | None, Header(alias="X-Session-ID")] = None,
) -> dict[str, str]:
    """Start a new game, creating a session if needed."""
    if session_id is None or read_token(session_id) is None:
        session_id = await open_session()

    game = _games.get(session_id)
    if game is None:
        _games[session_id] = game = _make_game()
    else:
        game.new_game()
    await touch_session(session_id, game.generation)

    return {"session_id": session_id}


@router.delete("/session")
async def end_session(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> dict[str, str]:
    """Abandon the session's game and forget the session."""
    if read_token(session_id) is None:
        raise HTTPException(status_code=401, detail="Invalid or expired session")
    _drop_game(session_id)
    await close_session(session_id)
    return {"status": "closed"}


@router.get("/state")
async def get_state(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Get current game state."""
    game = await get_game(session_id)
    return game_state_response(game)


@router.post("/setup")
async def choose_face_up(
    request: FaceUpRequest,
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Choose the three face-up cards."""
    game = await get_game(session_id)
    return _respond(game, game.choose_face_up(request.card_ids))


@router.post("/draw")
async def draw_card(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Draw the top card of the draw pile."""
    game = await get_game(session_id)
    return _respond(game, game.draw_card())


@router.post("/play")
async def play_cards(
    request: PlayRequest,
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Play same-rank cards from the hand or face-up cards."""
    game = await get_game(session_id)
    return _respond(game, game.play_cards(request.card_ids, request.zone))


@router.post("/face-down")
async def play_face_down(
    request: FaceDownRequest,
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Flip and play a face-down card."""
    game = await get_game(session_id)
    return _respond(game, game.play_face_down_position(request.position))


@router.post("/pick-up")
async def pick_up_pile(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Pick up the discard pile."""
    game = await get_game(session_id)
    return _respond(game, game.pick_up_pile())
