"""Card, Rank, Suit, and Deck definitions."""
from __future__ import annotations
import random
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, List, Optional


class DeckExhaustedError(ValueError):
    """Raised when more cards are requested than the deck holds."""


class Suit(Enum):
    def __new__(cls, symbol: str, color: str):
        obj = object.__new__(cls)
        obj._value_ = symbol
        obj.color = color
        return obj

    CLUBS = ("c", "black")
    DIAMONDS = ("d", "red")
    HEARTS = ("h", "red")
    SPADES = ("s", "black")
    JOKER = ("k", "none")

    @property
    def symbol(self) -> str:
        return self._value_

    def __str__(self) -> str:
        return self._value_


# The four real suits, in deck-building order
STANDARD_SUITS = (Suit.CLUBS, Suit.DIAMONDS, Suit.HEARTS, Suit.SPADES)


class Rank(Enum):
    def __new__(cls, rank_value: int, symbol: str):
        obj = object.__new__(cls)
        obj._value_ = rank_value
        obj.symbol = symbol
        return obj

    TWO   = (2,  "2")
    THREE = (3,  "3")
    FOUR  = (4,  "4")
    FIVE  = (5,  "5")
    SIX   = (6,  "6")
    SEVEN = (7,  "7")
    EIGHT = (8,  "8")
    NINE  = (9,  "9")
    TEN   = (10, "10")
    JACK  = (11, "J")
    QUEEN = (12, "Q")
    KING  = (13, "K")
    ACE   = (14, "A")

    @classmethod
    def from_symbol(cls, symbol: str) -> "Rank":
        for rank in cls:
            if rank.symbol == symbol:
                return rank
        raise ValueError(f"Unknown rank symbol: {symbol!r}")

    def __str__(self) -> str:
        return self.symbol

    def __lt__(self, other: "Rank") -> bool:
        return self._value_ < other._value_


@dataclass(frozen=True)
class Card:
    """A playing card. Jokers have no rank."""
    rank: Optional[Rank]
    suit: Suit
    face_down: bool = field(default=False, compare=False)

    @property
    def is_joker(self) -> bool:
        return self.suit is Suit.JOKER

    @property
    def value(self) -> int:
        """Numeric rank 2–14 (0 for a joker)."""
        return self.rank.value if self.rank is not None else 0

    def turned(self, face_down: bool) -> "Card":
        return replace(self, face_down=face_down)

    @classmethod
    def from_str(cls, text: str) -> "Card":
        """Parse 'As', '10h', 'Jk' (joker)."""
        text = text.strip()
        if text in ("Jk", "JK", "joker"):
            return cls(None, Suit.JOKER)
        rank_sym, suit_sym = text[:-1], text[-1].lower()
        suit = next((s for s in STANDARD_SUITS if s.symbol == suit_sym), None)
        if suit is None:
            raise ValueError(f"Unknown suit in card {text!r}")
        return cls(Rank.from_symbol(rank_sym.upper()), suit)

    def __str__(self) -> str:
        if self.is_joker:
            return "Jk"
        return f"{self.rank}{self.suit}"

    def __repr__(self) -> str:
        return f"Card({self})"


def parse_cards(text: str) -> List[Card]:
    """Parse a space separated list of cards: 'As Kd 10c'."""
    return [Card.from_str(tok) for tok in text.split()]


def full_deck(include_jokers: bool = False) -> List[Card]:
    cards = [Card(rank, suit) for suit in STANDARD_SUITS for rank in Rank]
    if include_jokers:
        cards.extend([Card(None, Suit.JOKER), Card(None, Suit.JOKER)])
    return cards


class Deck:
    def __init__(self, include_jokers: bool = False, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()
        self.include_jokers = include_jokers
        self._cards: List[Card] = []
        self.reset()

    def reset(self) -> None:
        self._cards = full_deck(self.include_jokers)
        self._rng.shuffle(self._cards)

    def shuffle(self) -> None:
        self._rng.shuffle(self._cards)

    def deal(self, n: int = 1) -> List[Card]:
        if n > len(self._cards):
            raise DeckExhaustedError(f"Not enough cards: requested {n}, have {len(self._cards)}")
        dealt = self._cards[:n]
        self._cards = self._cards[n:]
        return dealt

    def deal_one(self) -> Card:
        return self.deal(1)[0]

    def replenish(self, cards: Iterable[Card]) -> None:
        """Shuffle returned (mucked) cards back into the deck."""
        self._cards.extend(c.turned(False) for c in cards)
        self._rng.shuffle(self._cards)

    def __len__(self) -> int:
        return len(self._cards)
