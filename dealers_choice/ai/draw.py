"""
Discard selection for 5-card draw bots.

Every function returns a sorted list of hand indices to throw away.
Wild cards are never discarded and the result always respects the
draw limit (see enforce_draw_limit).
"""
from __future__ import annotations
import random
from collections import Counter
from itertools import combinations
from typing import Iterable, List, Optional, Sequence

from dealers_choice.ai.hand_strength import continuous_strength
from dealers_choice.core.card import Card, Suit, full_deck
from dealers_choice.core.hand_evaluator import HandRank, evaluate_hand_with_wilds
from dealers_choice.core.wilds import NO_WILDS, WildSet
from dealers_choice.game.rules import max_discards


def _discard_all_but(hand: Sequence[Card], keep: Iterable[int], wilds: WildSet) -> List[int]:
    keep = set(keep)
    return [i for i, c in enumerate(hand) if i not in keep and not wilds.is_wild(c)]


def _natural_indices(hand: Sequence[Card], wilds: WildSet) -> List[int]:
    return [i for i, c in enumerate(hand) if not wilds.is_wild(c)]


def enforce_draw_limit(hand: Sequence[Card], discards: Iterable[int], wilds: WildSet = NO_WILDS) -> List[int]:
    """Drop wilds from the discards, then trim to the legal count keeping the higher cards."""
    discards = sorted(i for i in set(discards) if not wilds.is_wild(hand[i]))
    kept = [i for i in range(len(hand)) if i not in discards]
    limit = max_discards(hand, kept, wilds)
    if len(discards) <= limit:
        return discards
    lowest_first = sorted(discards, key=lambda i: hand[i].value)
    return sorted(lowest_first[:3])


def suggest_discards(hand: Sequence[Card], wilds: WildSet = NO_WILDS) -> List[int]:
    """Keep made hands, sets, pairs, and four-card draws; otherwise keep the best two."""
    naturals = _natural_indices(hand, wilds)
    if not naturals:
        return []
    result = evaluate_hand_with_wilds(hand, wilds)
    if result.rank >= HandRank.STRAIGHT:
        return []

    counts = Counter(hand[i].value for i in naturals)
    groups = sorted(((c, v) for v, c in counts.items()), reverse=True)

    # trips, two pair, one pair: discard the rest
    if groups[0][0] >= 2:
        keep_values = {v for c, v in groups if c >= 2}
        if groups[0][0] >= 3:
            keep_values = {groups[0][1]}
        return _discard_all_but(hand, (i for i in naturals if hand[i].value in keep_values), wilds)

    suits = Counter(hand[i].suit for i in naturals)
    for suit, count in suits.items():
        if count == 4:
            return _discard_all_but(hand, (i for i in naturals if hand[i].suit is suit), wilds)

    by_value = sorted(naturals, key=lambda i: hand[i].value, reverse=True)
    values = [hand[i].value for i in by_value]
    for start in range(0, max(0, len(values) - 3)):
        window = values[start:start + 4]
        if len(window) == 4 and window[0] - window[3] == 3 and len(set(window)) == 4:
            return _discard_all_but(hand, by_value[start:start + 4], wilds)

    return _discard_all_but(hand, by_value[:2], wilds)


def easy_draw(hand: Sequence[Card], wilds: WildSet = NO_WILDS) -> List[int]:
    """Keep pairs and wilds; without a pair keep the two highest cards."""
    if evaluate_hand_with_wilds(hand, wilds).rank >= HandRank.STRAIGHT:
        return []
    naturals = _natural_indices(hand, wilds)
    counts = Counter(hand[i].value for i in naturals)
    paired = {v for v, c in counts.items() if c >= 2}
    if not paired:
        ordered = sorted(range(len(hand)), key=lambda i: 100 if wilds.is_wild(hand[i]) else hand[i].value,
                         reverse=True)
        return _discard_all_but(hand, ordered[:2], wilds)
    return _discard_all_but(hand, (i for i in naturals if hand[i].value in paired), wilds)


def medium_draw(hand: Sequence[Card], wilds: WildSet = NO_WILDS) -> List[int]:
    """Draw to four-card flushes first, then fall back to suggest_discards."""
    if evaluate_hand_with_wilds(hand, wilds).rank >= HandRank.STRAIGHT:
        return []
    naturals = _natural_indices(hand, wilds)
    suits = Counter(hand[i].suit for i in naturals)
    for suit, count in suits.items():
        if count == 4:
            return _discard_all_but(hand, (i for i in naturals if hand[i].suit is suit), wilds)
    return suggest_discards(hand, wilds)


def hard_draw(
    hand: Sequence[Card],
    wilds: WildSet = NO_WILDS,
    samples: int = 30,
    rng: Optional[random.Random] = None,
) -> List[int]:
    """
    Choose the legal discard set with the best average strength over
    sampled replacement cards.
    """
    rng = rng or random.Random()
    held = set(hand)
    unseen = [c for c in full_deck() if c not in held]
    if wilds.uses_jokers:
        # jokers compare equal, so count them instead
        unseen += [Card(None, Suit.JOKER)] * max(0, 2 - sum(1 for c in hand if c.is_joker))

    naturals = _natural_indices(hand, wilds)
    candidates = {tuple(suggest_discards(hand, wilds)), ()}
    for size in range(1, len(naturals) + 1):
        for combo in combinations(naturals, size):
            kept = [i for i in range(len(hand)) if i not in combo]
            if size <= max_discards(hand, kept, wilds):
                candidates.add(combo)

    best_discards: tuple = ()
    best_score = continuous_strength(evaluate_hand_with_wilds(hand, wilds))
    for discards in sorted(candidates):
        if not discards:
            continue
        kept_cards = [c for i, c in enumerate(hand) if i not in discards]
        total = 0.0
        for _ in range(samples):
            drawn = rng.sample(unseen, len(discards))
            total += continuous_strength(evaluate_hand_with_wilds(kept_cards + drawn, wilds))
        score = total / samples
        if score > best_score:
            best_score, best_discards = score, discards
    return list(best_discards)
