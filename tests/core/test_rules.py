"""Tests for play legality, zone priority, and play effects."""

import pytest

from hypothesis import given, strategies as st

from core.cards import Card, Rank, Suit
from core.rules import (
    can_play_on,
    clears_pile,
    grants_go_again,
    has_legal_play,
    is_same_rank,
    resolve_playable_zone,
    toggle_selection,
    toggle_setup_selection,
)
from core.zones import PlayerZones, Zone

ranks = st.sampled_from(list(Rank))
suits = st.sampled_from(list(Suit))
any_card = st.builds(Card, ranks, suits)


class TestCanPlayOn:
    """Tests for the play validator."""

    def test_anything_on_empty_pile(self):
        for rank in Rank:
            assert can_play_on(Card(rank, Suit.HEARTS), None)

    def test_higher_or_equal_rank(self, cards):
        nine, seven, five = cards("9H 7S 5C")
        assert can_play_on(nine, seven)
        assert can_play_on(Card(Rank.SEVEN, Suit.CLUBS), seven)
        assert not can_play_on(five, seven)

    def test_wild_cards_go_on_anything(self, cards):
        two, ten, ace = cards("2H 10S AC")
        assert can_play_on(two, ace)
        assert can_play_on(ten, ace)

    def test_anything_goes_on_a_ten(self, cards):
        three, ten = cards("3H 10S")
        assert can_play_on(three, ten)

    def test_two_on_top_allows_everything(self, cards):
        """A 2 is the lowest rank, so every card is equal or higher."""
        three, two = cards("3H 2S")
        assert can_play_on(three, two)

    @given(any_card, any_card)
    def test_validator_matches_rule(self, card, top):
        expected = top.rank == Rank.TEN or card.is_wild or card.value >= top.value
        assert can_play_on(card, top) == expected

    @given(any_card)
    def test_wild_always_legal(self, top):
        for rank in (Rank.TWO, Rank.TEN):
            assert can_play_on(Card(rank, Suit.SPADES), top)

    def test_has_legal_play(self, cards):
        assert has_legal_play(cards("3H 9C"), Card(Rank.EIGHT, Suit.SPADES))
        assert not has_legal_play(cards("3H 4C"), Card(Rank.EIGHT, Suit.SPADES))
        assert not has_legal_play((), None)


class TestPlayableZone:
    """Tests for zone priority."""

    def test_hand_first(self, cards):
        zones = PlayerZones(hand=cards("3H"), face_up=cards("4H"), face_down=cards("5H"))
        assert resolve_playable_zone(zones, 10) == Zone.HAND
        assert resolve_playable_zone(zones, 0) == Zone.HAND

    def test_empty_hand_with_draw_pile_means_draw_first(self, cards):
        zones = PlayerZones(face_up=cards("4H"), face_down=cards("5H"))
        assert resolve_playable_zone(zones, 1) == Zone.NONE

    def test_face_up_then_face_down(self, cards):
        zones = PlayerZones(face_up=cards("4H"), face_down=cards("5H"))
        assert resolve_playable_zone(zones, 0) == Zone.FACE_UP
        zones = PlayerZones(face_down=cards("5H"))
        assert resolve_playable_zone(zones, 0) == Zone.FACE_DOWN

    def test_nothing_left(self):
        assert resolve_playable_zone(PlayerZones(), 0) == Zone.NONE


class TestPlayEffects:
    """Tests for same-rank grouping, burning, and go-again."""

    def test_is_same_rank(self, cards):
        assert is_same_rank(cards("7H 7S 7C"))
        assert not is_same_rank(cards("7H 8S"))
        assert not is_same_rank(())

    @pytest.mark.parametrize(
        "played,burns,again",
        [
            ("2H", True, True),
            ("2H 2S", True, True),
            ("10H", False, True),
            ("8H 8C 8D 8S", True, True),
            ("8H 8C 8D", False, False),
            ("KH", False, False),
        ],
    )
    def test_effects(self, cards, played, burns, again):
        group = cards(played)
        assert clears_pile(group) is burns
        assert grants_go_again(group) is again

    def test_four_tens_burn(self, cards):
        tens = cards("10H 10C 10D 10S")
        assert clears_pile(tens)
        assert grants_go_again(tens)


class TestSelection:
    """Tests for selection toggling."""

    def test_toggle_adds_same_rank(self, cards):
        a, b = cards("7H 7S")
        assert toggle_selection((a,), b) == (a, b)

    def test_toggle_removes_selected(self, cards):
        a, b = cards("7H 7S")
        assert toggle_selection((a, b), a) == (b,)

    def test_other_rank_starts_over(self, cards):
        a, b, c = cards("7H 7S 9C")
        assert toggle_selection((a, b), c) == (c,)

    def test_setup_selection_caps_at_three(self, cards):
        a, b, c, d = cards("3H 5S 9C KD")
        selection = ()
        for card in (a, b, c, d):
            selection = toggle_setup_selection(selection, card)
        assert selection == (a, b, c)
        assert toggle_setup_selection(selection, b) == (a, c)
