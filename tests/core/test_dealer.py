"""Tests for dealing."""

import pytest
from random import Random

from core.cards import Card, Rank, Suit, card_ids, create_deck, shuffle
from core.game.dealer import DECK_SIZE, choose_computer_face_up, deal
from core.game.state import GamePhase, Player, TurnPhase


class TestDeal:
    """Tests for the opening deal."""

    @pytest.fixture
    def dealt(self, rng):
        return deal(shuffle(create_deck(), rng.random))

    def test_zone_sizes(self, dealt):
        for zones in (dealt.user, dealt.computer):
            assert len(zones.face_down) == 3
            assert len(zones.hand) == 6
            assert zones.face_up == ()
        assert len(dealt.draw_pile) == 34
        assert dealt.discard_pile == ()

    def test_opening_state(self, dealt):
        assert dealt.phase == GamePhase.SETUP
        assert dealt.turn_phase == TurnPhase.PLAY
        assert dealt.current_player == Player.USER
        assert dealt.winner is None

    def test_all_cards_dealt_once(self, dealt, full_deck_ids):
        assert sorted(card_ids(dealt.all_cards())) == full_deck_ids

    def test_deal_order(self):
        """Face-down first (user, computer), then six to each hand."""
        deck = create_deck()
        state = deal(deck)
        assert state.user.face_down == tuple(deck[0:3])
        assert state.computer.face_down == tuple(deck[3:6])
        assert set(state.user.hand) == set(deck[6:12])
        assert set(state.computer.hand) == set(deck[12:18])
        assert state.draw_pile == tuple(deck[18:])

    def test_hands_sorted(self, dealt):
        for hand in (dealt.user.hand, dealt.computer.hand):
            values = [c.value for c in hand]
            assert values == sorted(values)

    def test_short_deck_rejected(self):
        with pytest.raises(ValueError):
            deal(create_deck()[:51])

    def test_duplicate_cards_rejected(self):
        deck = create_deck()
        deck[-1] = deck[0]
        with pytest.raises(ValueError):
            deal(deck)

    def test_deck_size(self):
        assert DECK_SIZE == 52

    def test_different_seeds_deal_differently(self):
        a = deal(shuffle(create_deck(), Random(1).random))
        b = deal(shuffle(create_deck(), Random(2).random))
        assert a != b


class TestComputerFaceUp:
    """Tests for the computer's setup choice."""

    def test_three_highest(self, cards):
        hand = cards("3H 5C 9D JS 2H KC")
        chosen = choose_computer_face_up(hand)
        assert [c.value for c in chosen] == [13, 11, 9]

    def test_ties_still_three(self):
        hand = [Card(Rank.ACE, suit) for suit in Suit] + [Card(Rank.TWO, Suit.HEARTS)] * 2
        assert len(choose_computer_face_up(hand)) == 3
