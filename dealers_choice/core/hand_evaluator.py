"""
Wild-card aware poker hand evaluator.

A hand evaluates to a HandResult: a HandRank (High Card=0 .. Five of a Kind=10)
plus a tiebreaker vector, high to low. Results compare lexicographically.

Wild cards are resolved by trying every multiset of ranks they could stand
for, highest ranks first, and checking each completion with the natural
evaluator. Wilds take the naturals' common suit when there is one; that
choice is never worse than any other suit. Five of a Kind is only reachable
with wilds.
"""
from __future__ import annotations
from collections import Counter
from dataclasses import dataclass
from enum import IntEnum
from functools import lru_cache
from itertools import combinations, combinations_with_replacement
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from dealers_choice.core.card import Card, Rank, Suit
from dealers_choice.core.wilds import NO_WILDS, WildSet


class HandRank(IntEnum):
    HIGH_CARD = 0
    ONE_PAIR = 1
    TWO_PAIR = 2
    THREE_OF_A_KIND = 3
    STRAIGHT = 4
    FLUSH = 5
    FULL_HOUSE = 6
    FOUR_OF_A_KIND = 7
    STRAIGHT_FLUSH = 8
    ROYAL_FLUSH = 9
    FIVE_OF_A_KIND = 10


_RANK_NAMES = {
    HandRank.HIGH_CARD: "High Card",
    HandRank.ONE_PAIR: "One Pair",
    HandRank.TWO_PAIR: "Two Pair",
    HandRank.THREE_OF_A_KIND: "Three of a Kind",
    HandRank.STRAIGHT: "Straight",
    HandRank.FLUSH: "Flush",
    HandRank.FULL_HOUSE: "Full House",
    HandRank.FOUR_OF_A_KIND: "Four of a Kind",
    HandRank.STRAIGHT_FLUSH: "Straight Flush",
    HandRank.ROYAL_FLUSH: "Royal Flush",
    HandRank.FIVE_OF_A_KIND: "Five of a Kind",
}


@dataclass(frozen=True)
class HandResult:
    rank: HandRank
    tiebreakers: Tuple[int, ...]

    @property
    def name(self) -> str:
        return _RANK_NAMES[self.rank]

    def to_dict(self) -> dict:
        return {"rank": int(self.rank), "name": self.name, "tiebreakers": list(self.tiebreakers)}

    def __str__(self) -> str:
        return self.name


def compare_hands(a: HandResult, b: HandResult) -> int:
    """Return 1 if a beats b, -1 if b beats a, 0 on a tie."""
    if a.rank != b.rank:
        return 1 if a.rank > b.rank else -1
    for x, y in zip(a.tiebreakers, b.tiebreakers):
        if x != y:
            return 1 if x > y else -1
    return 0


# ---------------------------------------------------------------------------
# Natural five-card evaluation
# ---------------------------------------------------------------------------

def _straight_high(values: Sequence[int]) -> int:
    """High card of a 5-value straight, 0 if not a straight (wheel = 5)."""
    unique = sorted(set(values), reverse=True)
    if len(unique) != 5:
        return 0
    if unique[0] - unique[4] == 4:
        return unique[0]
    if unique == [14, 5, 4, 3, 2]:
        return 5
    return 0


def _groups(values: Iterable[int]) -> List[Tuple[int, int]]:
    """(count, value) pairs, largest group first, then highest value."""
    counts = Counter(values)
    return sorted(((c, v) for v, c in counts.items()), reverse=True)


def evaluate_hand(cards: Sequence[Card]) -> HandResult:
    """Evaluate exactly five natural (non-joker) cards."""
    if len(cards) != 5:
        raise ValueError(f"evaluate_hand requires exactly 5 cards, got {len(cards)}")
    values = sorted((c.value for c in cards), reverse=True)
    flush = len({c.suit for c in cards}) == 1
    straight_high = _straight_high(values)
    groups = _groups(values)

    if flush and straight_high == 14:
        return HandResult(HandRank.ROYAL_FLUSH, (14,))
    if flush and straight_high:
        return HandResult(HandRank.STRAIGHT_FLUSH, (straight_high,))
    if groups[0][0] == 5:
        return HandResult(HandRank.FIVE_OF_A_KIND, (groups[0][1],))
    if groups[0][0] == 4:
        return HandResult(HandRank.FOUR_OF_A_KIND, (groups[0][1], groups[1][1]))
    if groups[0][0] == 3 and groups[1][0] == 2:
        return HandResult(HandRank.FULL_HOUSE, (groups[0][1], groups[1][1]))
    if flush:
        return HandResult(HandRank.FLUSH, tuple(values))
    if straight_high:
        return HandResult(HandRank.STRAIGHT, (straight_high,))
    if groups[0][0] == 3:
        kickers = sorted((v for c, v in groups[1:]), reverse=True)
        return HandResult(HandRank.THREE_OF_A_KIND, (groups[0][1], *kickers))
    if groups[0][0] == 2 and groups[1][0] == 2:
        return HandResult(HandRank.TWO_PAIR, (groups[0][1], groups[1][1], groups[2][1]))
    if groups[0][0] == 2:
        kickers = sorted((v for c, v in groups[1:]), reverse=True)
        return HandResult(HandRank.ONE_PAIR, (groups[0][1], *kickers))
    return HandResult(HandRank.HIGH_CARD, tuple(values))


# ---------------------------------------------------------------------------
# Wild cards
# ---------------------------------------------------------------------------

_RANKS_HIGH_FIRST = sorted(Rank, key=lambda r: r.value, reverse=True)


def _split_wilds(cards: Sequence[Card], wilds: WildSet) -> Tuple[List[Card], int]:
    naturals = [c for c in cards if not wilds.is_wild(c)]
    return naturals, len(cards) - len(naturals)


@lru_cache(maxsize=65536)
def _best_completion(naturals: Tuple[Card, ...], num_wilds: int) -> HandResult:
    if num_wilds == 0:
        return evaluate_hand(naturals)

    natural_values = {c.value for c in naturals}
    if len(natural_values) <= 1:
        # Every wild joins the only natural rank (five wilds play as aces)
        return HandResult(HandRank.FIVE_OF_A_KIND, (natural_values.pop() if natural_values else 14,))

    suits = {c.suit for c in naturals}
    wild_suit = suits.pop() if len(suits) == 1 else Suit.SPADES

    best: Optional[HandResult] = None
    for ranks in combinations_with_replacement(_RANKS_HIGH_FIRST, num_wilds):
        hand = list(naturals) + [Card(r, wild_suit) for r in ranks]
        result = evaluate_hand(hand)
        if best is None or compare_hands(result, best) > 0:
            best = result
            if best.rank == HandRank.ROYAL_FLUSH:
                break
    return best


def _sort_key(card: Card) -> Tuple[int, str]:
    return (card.value, card.suit.symbol)


def evaluate_hand_with_wilds(cards: Sequence[Card], wilds: WildSet = NO_WILDS) -> HandResult:
    """Evaluate exactly five cards, resolving wild cards to their best use."""
    if len(cards) != 5:
        raise ValueError(f"evaluate_hand_with_wilds requires exactly 5 cards, got {len(cards)}")
    naturals, num_wilds = _split_wilds(cards, wilds)
    naturals = tuple(sorted((c.turned(False) for c in naturals), key=_sort_key))
    return _best_completion(naturals, num_wilds)


def evaluate_best(cards: Sequence[Card], wilds: WildSet = NO_WILDS) -> HandResult:
    """Best five-card hand from 5–7 cards."""
    n = len(cards)
    if n == 5:
        return evaluate_hand_with_wilds(cards, wilds)
    if n < 5 or n > 7:
        raise ValueError(f"evaluate_best requires 5–7 cards, got {n}")
    best: Optional[HandResult] = None
    for combo in combinations(cards, 5):
        result = evaluate_hand_with_wilds(combo, wilds)
        if best is None or compare_hands(result, best) > 0:
            best = result
    return best


def evaluate_partial(cards: Sequence[Card], wilds: WildSet = NO_WILDS) -> HandResult:
    """
    Rank fewer than five cards (stud up-cards) by their groups only.

    Wild cards join the largest natural group. Straights and flushes are not
    considered. Four or more cards delegate to the full evaluator once five
    are showing.
    """
    if len(cards) >= 5:
        return evaluate_best(cards, wilds)
    if not cards:
        return HandResult(HandRank.HIGH_CARD, ())
    naturals, num_wilds = _split_wilds(cards, wilds)
    groups = _groups(c.value for c in naturals)
    if not groups:
        groups = [(0, 14)]
    top_count, top_value = groups[0]
    groups[0] = (top_count + num_wilds, top_value)

    counts = [c for c, v in groups]
    tiebreakers = tuple(v for c, v in groups)
    if counts[0] >= 4:
        rank = HandRank.FOUR_OF_A_KIND
    elif counts[0] == 3:
        rank = HandRank.THREE_OF_A_KIND
    elif counts[0] == 2 and len(counts) > 1 and counts[1] == 2:
        rank = HandRank.TWO_PAIR
    elif counts[0] == 2:
        rank = HandRank.ONE_PAIR
    else:
        rank = HandRank.HIGH_CARD
    return HandResult(rank, tiebreakers)


def determine_winners(
    hands: Dict[str, Sequence[Card]],
    wilds: WildSet = NO_WILDS,
) -> Tuple[List[str], Optional[HandResult]]:
    """
    Return (winner_ids, best_result) for {player_id: cards}.

    Winners are listed in the order the hands were given.
    """
    best: Optional[HandResult] = None
    winners: List[str] = []
    for player_id, cards in hands.items():
        result = evaluate_best(cards, wilds)
        cmp = 1 if best is None else compare_hands(result, best)
        if cmp > 0:
            best = result
            winners = [player_id]
        elif cmp == 0:
            winners.append(player_id)
    return winners, best


def rank_name(rank: HandRank) -> str:
    return _RANK_NAMES[rank]
