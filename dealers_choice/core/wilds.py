"""
Wild card rules.

A WildSet is a small list of tagged rules evaluated against a card. It is
chosen once per hand; only follow-the-queen changes afterwards, through
observe_face_up() as face-up cards are dealt.
"""
from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from dealers_choice.core.card import Card, Rank, Suit


class WildKind(Enum):
    JOKERS = "jokers"
    ONE_EYED_JACKS = "one_eyed_jacks"
    BLACK_JACKS = "black_jacks"
    SUICIDE_KING = "suicide_king"
    DEUCES = "deuces"
    RANK = "rank"
    FOLLOW_THE_QUEEN = "follow_the_queen"


@dataclass(frozen=True)
class WildRule:
    kind: WildKind
    rank: Optional[Rank] = None   # only for WildKind.RANK

    @property
    def option_id(self) -> str:
        if self.kind is WildKind.RANK:
            return self.rank.symbol
        return self.kind.value

    def matches(self, card: Card) -> bool:
        if card.is_joker:
            return self.kind is WildKind.JOKERS
        kind = self.kind
        if kind is WildKind.ONE_EYED_JACKS:
            return card.rank is Rank.JACK and card.suit in (Suit.SPADES, Suit.HEARTS)
        if kind is WildKind.BLACK_JACKS:
            return card.rank is Rank.JACK and card.suit.color == "black"
        if kind is WildKind.SUICIDE_KING:
            return card.rank is Rank.KING and card.suit is Suit.HEARTS
        if kind is WildKind.DEUCES:
            return card.rank is Rank.TWO
        if kind is WildKind.RANK:
            return card.rank is self.rank
        # FOLLOW_THE_QUEEN is resolved by WildSet, which owns the followed rank
        return False


_NAMED_OPTIONS = {
    k.value: WildRule(k) for k in WildKind if k is not WildKind.RANK
}

# Every option id the dealer may pick from, in display order
WILD_OPTION_IDS: List[str] = [
    "jokers", "one_eyed_jacks", "black_jacks", "suicide_king", "deuces",
    "follow_the_queen",
] + [r.symbol for r in Rank]


def parse_wild_option(option: str) -> WildRule:
    if option in _NAMED_OPTIONS:
        return _NAMED_OPTIONS[option]
    try:
        return WildRule(WildKind.RANK, Rank.from_symbol(option))
    except ValueError:
        raise ValueError(f"Unknown wild card option: {option}") from None


@dataclass(frozen=True)
class WildSet:
    rules: Tuple[WildRule, ...] = ()
    followed_rank: Optional[Rank] = None
    queen_pending: bool = False

    @classmethod
    def from_options(cls, options: Iterable[str]) -> "WildSet":
        rules: List[WildRule] = []
        for option in options:
            rule = parse_wild_option(option)
            if rule not in rules:
                rules.append(rule)
        return cls(rules=tuple(rules))

    @property
    def options(self) -> List[str]:
        return [r.option_id for r in self.rules]

    @property
    def follow_the_queen(self) -> bool:
        return any(r.kind is WildKind.FOLLOW_THE_QUEEN for r in self.rules)

    @property
    def uses_jokers(self) -> bool:
        return any(r.kind is WildKind.JOKERS for r in self.rules)

    def is_wild(self, card: Card) -> bool:
        if card.is_joker:
            return True
        if self.follow_the_queen and (
            card.rank is Rank.QUEEN or (self.followed_rank is not None and card.rank is self.followed_rank)
        ):
            return True
        return any(rule.matches(card) for rule in self.rules)

    def observe_face_up(self, card: Card) -> "WildSet":
        """Return the set after `card` was dealt face up (follow the queen)."""
        if not self.follow_the_queen or card.is_joker:
            return self
        if card.rank is Rank.QUEEN:
            return replace(self, followed_rank=None, queen_pending=True)
        if self.queen_pending:
            return replace(self, followed_rank=card.rank, queen_pending=False)
        return self

    def wild_ranks(self) -> List[str]:
        """Ranks wild in full (for display)."""
        ranks = [r.rank.symbol for r in self.rules if r.kind is WildKind.RANK]
        if any(r.kind is WildKind.DEUCES for r in self.rules) and "2" not in ranks:
            ranks.append("2")
        if self.follow_the_queen:
            ranks.append("Q")
            if self.followed_rank is not None and self.followed_rank is not Rank.QUEEN:
                ranks.append(self.followed_rank.symbol)
        return ranks

    def __bool__(self) -> bool:
        return bool(self.rules)


NO_WILDS = WildSet()
