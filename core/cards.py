"""Card values, the 52-card deck, and shuffling."""

import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Sequence

# A source of floats in [0, 1), e.g. ``random.random`` or ``Random(42).random``.
RandomSource = Callable[[], float]


class Suit(Enum):
    """Card suits, valued by their symbol."""

    HEARTS = "♥"
    DIAMONDS = "♦"
    CLUBS = "♣"
    SPADES = "♠"

    def __str__(self) -> str:
        return self.value


class Rank(Enum):
    """Card ranks, valued by their position in the play order (2 low, Ace high)."""

    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14

    def __str__(self) -> str:
        if self.value <= 10:
            return str(self.value)
        return {
            Rank.JACK: "J",
            Rank.QUEEN: "Q",
            Rank.KING: "K",
            Rank.ACE: "A",
        }[self]

    @property
    def is_wild(self) -> bool:
        """2s and 10s can be played on anything."""
        return self in (Rank.TWO, Rank.TEN)


_RANK_LABELS = {str(rank): rank for rank in Rank}
_RANK_LABELS["T"] = Rank.TEN

_SUIT_LABELS = {
    "H": Suit.HEARTS,
    "♥": Suit.HEARTS,
    "D": Suit.DIAMONDS,
    "♦": Suit.DIAMONDS,
    "C": Suit.CLUBS,
    "♣": Suit.CLUBS,
    "S": Suit.SPADES,
    "♠": Suit.SPADES,
}


@dataclass(frozen=True, slots=True)
class Card:
    """Immutable playing card."""

    rank: Rank
    suit: Suit

    def __str__(self) -> str:
        return f"{self.rank}{self.suit}"

    def __repr__(self) -> str:
        return f"Card({self.rank.name}, {self.suit.name})"

    @property
    def id(self) -> str:
        """Stable identifier, e.g. ``"10-♥"``."""
        return f"{self.rank}-{self.suit}"

    @property
    def value(self) -> int:
        """Position in the rank order."""
        return self.rank.value

    @property
    def is_wild(self) -> bool:
        return self.rank.is_wild

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """Create a card from a string like '2♣', 'AS', 'Kh' or '10-♥'."""
        s = s.strip().upper().replace("-", "")
        if len(s) < 2:
            raise ValueError(f"Invalid card string: {s}")

        rank_str = s[:-1]
        suit_str = s[-1]

        if rank_str not in _RANK_LABELS:
            raise ValueError(f"Invalid rank: {rank_str}")
        if suit_str not in _SUIT_LABELS:
            raise ValueError(f"Invalid suit: {suit_str}")

        return cls(_RANK_LABELS[rank_str], _SUIT_LABELS[suit_str])


def create_deck() -> list[Card]:
    """Return the 52 distinct cards in suit-major order."""
    return [Card(rank, suit) for suit in Suit for rank in Rank]


def shuffle(deck: Sequence[Card], rng: RandomSource | None = None) -> list[Card]:
    """
    Return a uniformly shuffled copy of ``deck``.

    Runs a Fisher-Yates pass from the back of the list. ``rng`` must
    return floats in [0, 1); pass a seeded source for reproducible deals.
    """
    rng = rng or random.random
    cards = list(deck)
    for i in range(len(cards) - 1, 0, -1):
        j = int(rng() * (i + 1))
        cards[i], cards[j] = cards[j], cards[i]
    return cards


def sort_by_rank(cards: Iterable[Card]) -> tuple[Card, ...]:
    """Sort cards low to high for presentation."""
    return tuple(sorted(cards, key=lambda c: c.value))


def card_ids(cards: Iterable[Card]) -> list[str]:
    return [c.id for c in cards]
