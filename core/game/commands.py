"""
Turn engine: pure command functions.

Every command takes a GameState (plus arguments) and returns a
CommandResult carrying the next state, a status line for the player,
and the events the command produced. Rule violations never raise: they
come back as a rejected result holding the unchanged state.
"""

from dataclasses import dataclass, replace
from typing import Iterable, Sequence

from core.cards import Card, RandomSource, card_ids, create_deck, shuffle, sort_by_rank
from core.game.dealer import choose_computer_face_up, deal
from core.game.events import EventType, GameEvent, event
from core.game.state import GamePhase, GameState, Player, TurnPhase
from core.rules import (
    FACE_UP_COUNT,
    MIN_HAND_SIZE,
    can_play_on,
    clears_pile,
    grants_go_again,
    has_legal_play,
    is_same_rank,
)
from core.zones import PlayerZones, Zone

SETUP_PROMPT = "Select 3 cards from your hand to place on the table."
MUST_PICK_UP = "No playable cards. You must pick up the pile."


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one command."""

    state: GameState
    message: str
    accepted: bool = True
    events: tuple[GameEvent, ...] = ()

    @classmethod
    def rejected(cls, state: GameState, message: str) -> "CommandResult":
        """A no-op result: same state, explanatory message."""
        return cls(
            state=state,
            message=message,
            accepted=False,
            events=(event(EventType.INVALID_ACTION, message=message),),
        )

    def __bool__(self) -> bool:
        return self.accepted


def _turn_prompt(player: Player, turn_phase: TurnPhase) -> str:
    if player == Player.COMPUTER:
        return "Computer's turn..."
    if turn_phase == TurnPhase.DRAW:
        return "Your turn! Click the draw pile."
    return "Your turn! Play a card."


def _check_turn(state: GameState, player: Player, turn_phase: TurnPhase) -> str | None:
    """Return why ``player`` cannot act in ``turn_phase`` now, or None."""
    if state.phase == GamePhase.GAME_OVER:
        return "The game is over. Start a new game to play again."
    if state.phase != GamePhase.PLAYING:
        return "Choose your face-up cards first."
    if state.current_player != player:
        if player == Player.USER:
            return "It's not your turn."
        return "It's not the computer's turn."
    if state.turn_phase != turn_phase:
        if turn_phase == TurnPhase.PLAY:
            return "Draw a card first."
        return "You have already drawn this turn."
    return None


def _replenish(
    zones: PlayerZones, draw_pile: tuple[Card, ...]
) -> tuple[PlayerZones, tuple[Card, ...], int]:
    """Top the hand back up to MIN_HAND_SIZE from the front of the draw pile."""
    hand = list(zones.hand)
    pile = list(draw_pile)
    drawn = 0
    while len(hand) < MIN_HAND_SIZE and pile:
        hand.append(pile.pop(0))
        drawn += 1
    return zones.with_cards(Zone.HAND, sort_by_rank(hand)), tuple(pile), drawn


def _pass_turn(
    state: GameState,
    player: Player,
    events: list[GameEvent],
    lead: str = "",
) -> CommandResult:
    """Hand the turn to ``player``'s opponent."""
    nxt = player.opponent
    state = replace(state, current_player=nxt, turn_phase=state.next_turn_phase())
    events.append(event(EventType.TURN_PASSED, player=nxt.name, turn_phase=state.turn_phase.name))
    message = " ".join(part for part in (lead, _turn_prompt(nxt, state.turn_phase)) if part)
    return CommandResult(state=state, message=message, events=tuple(events))


def _play_message(player: Player, cards: Sequence[Card]) -> str:
    who = "You play" if player == Player.USER else "Computer plays"
    if len(cards) > 1:
        return f"{who} {len(cards)}x {cards[0].rank}."
    return f"{who} {cards[0]}."


def _resolve_play(
    state: GameState,
    player: Player,
    zone: Zone,
    cards: Sequence[Card],
    events: list[GameEvent],
) -> CommandResult:
    """
    Apply a legal same-rank play.

    Order matters: pile effect, then replenishment, then the win check,
    and only then go-again or passing the turn.
    """
    zones = state.zones_for(player).without(zone, cards)
    burn = clears_pile(cards)
    go_again = grants_go_again(cards)

    burned = state.burned
    if burn:
        burned = (*burned, *state.discard_pile, *cards)
        discard = ()
    else:
        discard = state.discard_pile + tuple(cards)
    events.append(
        event(
            EventType.CARDS_PLAYED,
            player=player.name,
            zone=zone.value,
            cards=card_ids(cards),
            rank=str(cards[0].rank),
        )
    )
    if burn:
        events.append(event(EventType.PILE_CLEARED, player=player.name, burned=len(state.discard_pile) + len(cards)))

    zones, draw_pile, drawn = _replenish(zones, state.draw_pile)
    if drawn:
        events.append(event(EventType.HAND_REPLENISHED, player=player.name, count=drawn))

    state = replace(state, discard_pile=discard, burned=burned, draw_pile=draw_pile).with_zones(player, zones)
    lead = _play_message(player, cards)

    if zones.is_empty:
        state = state.with_phase(GamePhase.GAME_OVER, winner=player)
        events.append(event(EventType.GAME_OVER, winner=player.name))
        verdict = "Congratulations, you win!" if player == Player.USER else "The computer wins!"
        return CommandResult(state=state, message=f"{lead} {verdict}", events=tuple(events))

    if go_again:
        state = replace(state, current_player=player, turn_phase=state.next_turn_phase())
        events.append(event(EventType.GO_AGAIN, player=player.name, turn_phase=state.turn_phase.name))
        if player == Player.COMPUTER:
            follow = "Computer gets another turn..."
        elif state.turn_phase == TurnPhase.DRAW:
            follow = "Wild card! Click the draw pile for your bonus turn."
        else:
            follow = "Wild card! Play again."
        return CommandResult(state=state, message=f"{lead} {follow}", events=tuple(events))

    return _pass_turn(state, player, events, lead)


def _obliged_to_pick_up(state: GameState, player: Player) -> bool:
    if state.phase != GamePhase.PLAYING or state.current_player != player:
        return False
    if state.turn_phase != TurnPhase.PLAY or state.top_card is None:
        return False
    zone = state.playable_zone(player)
    if zone not in (Zone.HAND, Zone.FACE_UP):
        return False
    return not has_legal_play(state.zones_for(player).cards_in(zone), state.top_card)


def must_pick_up_pile(state: GameState) -> bool:
    """
    True when the user has nothing legal to play and has to take the pile.

    Derived from the state on demand; never stored.
    """
    return _obliged_to_pick_up(state, Player.USER)


def new_game(rng: RandomSource | None = None) -> CommandResult:
    """Shuffle a fresh deck and deal it."""
    state = deal(shuffle(create_deck(), rng))
    return CommandResult(
        state=state,
        message=SETUP_PROMPT,
        events=(event(EventType.GAME_STARTED, draw_pile=len(state.draw_pile)),),
    )


def choose_face_up(state: GameState, chosen_ids: Iterable[str]) -> CommandResult:
    """
    Move the user's three chosen hand cards face-up and start play.

    The computer commits its three highest cards in the same step.
    """
    if state.phase != GamePhase.SETUP:
        return CommandResult.rejected(state, "Face-up cards can only be chosen during setup.")

    ids = list(chosen_ids)
    if len(ids) != FACE_UP_COUNT or len(set(ids)) != FACE_UP_COUNT:
        return CommandResult.rejected(state, "You must select exactly 3 cards.")

    chosen = state.user.find(Zone.HAND, ids)
    if chosen is None:
        return CommandResult.rejected(state, "You can only choose cards from your hand.")

    user = state.user.without(Zone.HAND, chosen).with_cards(Zone.FACE_UP, chosen)
    computer_up = choose_computer_face_up(state.computer.hand)
    computer = state.computer.without(Zone.HAND, computer_up).with_cards(Zone.FACE_UP, computer_up)

    state = state.with_zones(Player.USER, user).with_zones(Player.COMPUTER, computer)
    state = state.with_phase(
        GamePhase.PLAYING,
        current_player=Player.USER,
        turn_phase=state.next_turn_phase(),
    )

    if state.turn_phase == TurnPhase.DRAW:
        message = "Your turn! Click the draw pile to begin."
    else:
        message = "Your turn! Play a card."
    events = (
        event(EventType.FACE_UP_CHOSEN, player=Player.USER.name, cards=card_ids(chosen)),
        event(EventType.FACE_UP_CHOSEN, player=Player.COMPUTER.name, cards=card_ids(computer_up)),
    )
    return CommandResult(state=state, message=message, events=events)


def draw_card(state: GameState, player: Player = Player.USER) -> CommandResult:
    """Draw the front card of the draw pile into the hand, then move to PLAY."""
    problem = _check_turn(state, player, TurnPhase.DRAW)
    if problem:
        return CommandResult.rejected(state, problem)
    if not state.draw_pile:
        return CommandResult.rejected(state, "The draw pile is empty.")

    card, rest = state.draw_pile[0], state.draw_pile[1:]
    zones = state.zones_for(player)
    zones = zones.with_cards(Zone.HAND, sort_by_rank((*zones.hand, card)))
    state = replace(state, draw_pile=rest, turn_phase=TurnPhase.PLAY).with_zones(player, zones)

    if player == Player.USER:
        message = "Select card(s) to play."
        data = {"player": player.name, "card": card.id, "draw_pile": len(rest)}
    else:
        message = "Computer is drawing a card..."
        data = {"player": player.name, "draw_pile": len(rest)}
    return CommandResult(state=state, message=message, events=(event(EventType.CARD_DRAWN, **data),))


def play_cards(
    state: GameState,
    ids: Iterable[str],
    zone: Zone,
    player: Player = Player.USER,
) -> CommandResult:
    """
    Play one or more same-rank cards from the hand or the face-up cards.

    Args:
        state: Current state
        ids: Ids of the cards to play
        zone: Zone the cards come from (must be the playable zone)
        player: Acting seat

    Returns:
        The resolved play, or a rejection
    """
    problem = _check_turn(state, player, TurnPhase.PLAY)
    if problem:
        return CommandResult.rejected(state, problem)

    if zone not in (Zone.HAND, Zone.FACE_UP):
        return CommandResult.rejected(state, "Only hand or face-up cards can be played this way.")

    playable = state.playable_zone(player)
    if zone != playable:
        if playable == Zone.NONE:
            return CommandResult.rejected(state, "You have no cards you can play right now.")
        return CommandResult.rejected(state, f"You must play from your {playable} cards first.")

    wanted = list(dict.fromkeys(ids))
    if not wanted:
        return CommandResult.rejected(state, "Select at least one card to play.")

    cards = state.zones_for(player).find(zone, wanted)
    if cards is None:
        return CommandResult.rejected(state, f"Those cards are not in your {zone} cards.")
    if not is_same_rank(cards):
        return CommandResult.rejected(state, "Cards played together must all share one rank.")

    if _obliged_to_pick_up(state, player):
        return CommandResult.rejected(state, MUST_PICK_UP)
    if not can_play_on(cards[0], state.top_card):
        return CommandResult.rejected(
            state, "Invalid move. You must play a card of the same rank or higher."
        )

    return _resolve_play(state, player, zone, cards, [])


def play_face_down_card(
    state: GameState,
    card_id: str,
    player: Player = Player.USER,
) -> CommandResult:
    """
    Turn over one face-down card and play it blind.

    If it cannot go on the pile, the card and the whole pile go to the
    player's hand and the turn passes.
    """
    problem = _check_turn(state, player, TurnPhase.PLAY)
    if problem:
        return CommandResult.rejected(state, problem)
    if state.playable_zone(player) != Zone.FACE_DOWN:
        return CommandResult.rejected(
            state, "Face-down cards are played only after your hand and face-up cards."
        )

    zones = state.zones_for(player)
    found = zones.find(Zone.FACE_DOWN, [card_id])
    if found is None:
        return CommandResult.rejected(state, "That is not one of your face-down cards.")

    card = found[0]
    top = state.top_card
    events = [
        event(
            EventType.FACE_DOWN_REVEALED,
            player=player.name,
            card=card.id,
            top=top.id if top else None,
        )
    ]

    if can_play_on(card, top):
        return _resolve_play(state, player, Zone.FACE_DOWN, [card], events)

    zones = zones.without(Zone.FACE_DOWN, [card])
    zones = zones.with_cards(Zone.HAND, sort_by_rank((*zones.hand, *state.discard_pile, card)))
    events.append(
        event(
            EventType.FACE_DOWN_FAILED,
            player=player.name,
            card=card.id,
            picked_up=len(state.discard_pile) + 1,
        )
    )
    state = replace(state, discard_pile=()).with_zones(player, zones)
    if player == Player.USER:
        lead = "Bad luck! Your card was too low. You picked up the pile."
    else:
        lead = "Computer played a low card and picked up the pile."
    return _pass_turn(state, player, events, lead)


def pick_up_pile(state: GameState, player: Player = Player.USER) -> CommandResult:
    """
    Take the whole discard pile into the hand; the turn passes.

    Allowed while playing from the hand, and also from the face-up cards
    when none of them can be played.
    """
    problem = _check_turn(state, player, TurnPhase.PLAY)
    if problem:
        return CommandResult.rejected(state, problem)
    if not state.discard_pile:
        return CommandResult.rejected(state, "There is no pile to pick up.")

    zone = state.playable_zone(player)
    zones = state.zones_for(player)
    stuck_on_face_up = zone == Zone.FACE_UP and not has_legal_play(zones.face_up, state.top_card)
    if zone != Zone.HAND and not stuck_on_face_up:
        return CommandResult.rejected(
            state, "You can only pick up the pile when playing from your hand."
        )

    picked = state.discard_pile
    zones = zones.with_cards(Zone.HAND, sort_by_rank((*zones.hand, *picked)))
    state = replace(state, discard_pile=()).with_zones(player, zones)
    events = [event(EventType.PILE_PICKED_UP, player=player.name, count=len(picked))]

    if player == Player.USER:
        lead = "You picked up the pile."
    else:
        lead = "Computer couldn't play and picked up the pile."
    return _pass_turn(state, player, events, lead)


def pass_turn(state: GameState, player: Player) -> CommandResult:
    """Give up the turn when there is nothing to play and no pile to take."""
    problem = _check_turn(state, player, TurnPhase.PLAY)
    if problem:
        return CommandResult.rejected(state, problem)

    zone = state.playable_zone(player)
    if zone == Zone.FACE_DOWN:
        return CommandResult.rejected(state, "You still have a face-down card to play.")
    if zone in (Zone.HAND, Zone.FACE_UP):
        if has_legal_play(state.zones_for(player).cards_in(zone), state.top_card):
            return CommandResult.rejected(state, "You still have a legal play.")
        if state.discard_pile:
            return CommandResult.rejected(state, MUST_PICK_UP)

    who = "You pass." if player == Player.USER else "Computer passes."
    return _pass_turn(state, player, [], who)
