"""
Hand strength estimation.

Every variant gets a [0, 1] score from the wild-aware evaluator:
  - rank/10 plus a small high-card bonus (easy/medium)
  - rank plus the whole tiebreaker vector, normalized (hard)
Hold'em preflop uses the Chen formula; hard bots blend a Monte Carlo
equity estimate into the hold'em postflop score.
"""
from __future__ import annotations
import random
from typing import List, Optional, Sequence

from dealers_choice.core.card import Card, full_deck
from dealers_choice.core.hand_evaluator import (
    HandRank,
    HandResult,
    compare_hands,
    evaluate_best,
    evaluate_partial,
)
from dealers_choice.core.wilds import NO_WILDS, WildSet


# ---------------------------------------------------------------------------
# Two-card starting hand score (hold'em preflop)
# ---------------------------------------------------------------------------

def chen_score(hole_cards: List[Card]) -> float:
    """
    Bill Chen's starting-hand points for two hole cards, clamped at 0.
    Pocket aces score 20; the weakest offsuit hands bottom out near 0.
    """
    if len(hole_cards) != 2:
        return 0.0

    c1, c2 = sorted(hole_cards, key=lambda c: c.value, reverse=True)
    r1, r2 = c1.value, c2.value
    suited = c1.suit == c2.suit
    gap = r1 - r2

    score_map = {14: 10, 13: 8, 12: 7, 11: 6}
    score = score_map.get(r1, r1 / 2.0)

    if r1 == r2:
        return max(score * 2, 5)

    if suited:
        score += 2

    gap_penalties = {0: 0, 1: 0, 2: -1, 3: -2, 4: -4}
    score += gap_penalties.get(gap, -5)

    # small connectors
    if gap <= 1 and r1 <= 11:
        score += 1

    return max(score, 0)


def preflop_equity_fast(hole_cards: List[Card]) -> float:
    """chen_score scaled into [0, 1]."""
    return min(chen_score(hole_cards) / 20.0, 1.0)


# ---------------------------------------------------------------------------
# Evaluator-based scores
# ---------------------------------------------------------------------------

def evaluate_any(cards: Sequence[Card], wilds: WildSet = NO_WILDS) -> HandResult:
    """Evaluate 1-7 cards: best five when there are enough, groups otherwise."""
    if len(cards) >= 5:
        return evaluate_best(cards, wilds)
    return evaluate_partial(cards, wilds)


def hand_strength(cards: Sequence[Card], wilds: WildSet = NO_WILDS) -> float:
    """rank/10 plus up to 0.05 for the top tiebreaker."""
    result = evaluate_any(cards, wilds)
    rank_score = int(result.rank) / int(HandRank.FIVE_OF_A_KIND)
    tb_score = (result.tiebreakers[0] - 2) / 12 * 0.05 if result.tiebreakers else 0.0
    return min(1.0, rank_score + tb_score)


def continuous_strength(result: HandResult) -> float:
    """Rank plus every tiebreaker, folded into one number in [0, 1]."""
    frac = 0.0
    scale = 1.0
    for tb in result.tiebreakers:
        scale /= 15.0
        frac += tb * scale
    return min(1.0, (int(result.rank) + frac) / int(HandRank.FIVE_OF_A_KIND))


# ---------------------------------------------------------------------------
# Monte Carlo equity estimator (hold'em, no wilds)
# ---------------------------------------------------------------------------

def monte_carlo_equity(
    hole_cards: List[Card],
    community_cards: List[Card],
    num_opponents: int,
    simulations: int = 120,
    rng: Optional[random.Random] = None,
) -> float:
    """
    Share of random run-outs our hole cards win against `num_opponents`
    unknown hands.

    A tie is credited as half a win.
    """
    rng = rng or random.Random()
    known = set(hole_cards) | set(community_cards)
    deck = [c for c in full_deck() if c not in known]

    wins = 0.0
    board_needed = 5 - len(community_cards)

    for _ in range(simulations):
        rng.shuffle(deck)
        board = list(community_cards) + deck[:board_needed]
        ptr = board_needed

        ours = evaluate_best(list(hole_cards) + board)
        outcome = 1.0
        for _ in range(num_opponents):
            theirs = evaluate_best(deck[ptr:ptr + 2] + board)
            ptr += 2
            cmp = compare_hands(ours, theirs)
            if cmp < 0:
                outcome = 0.0
                break
            if cmp == 0:
                outcome = 0.5
        wins += outcome

    return wins / simulations


class HandStrengthEstimator:
    """
    Single place the betting strategy asks "how good is this hand".

    difficulty: "easy" | "medium" | "hard"
    """

    HARD_SIMULATIONS = 120

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()

    def estimate(
        self,
        hand: List[Card],
        community_cards: List[Card],
        wilds: WildSet,
        num_opponents: int,
        difficulty: str = "medium",
        holdem: bool = False,
    ) -> float:
        """
        Return a strength estimate [0, 1].
        """
        if not hand:
            return 0.5

        if holdem and not community_cards:
            equity = preflop_equity_fast(hand)
            return equity * 0.9 if difficulty == "easy" else equity

        cards = list(hand) + list(community_cards)
        if difficulty != "hard":
            return hand_strength(cards, wilds)

        score = continuous_strength(evaluate_any(cards, wilds))
        if holdem:
            equity = monte_carlo_equity(
                hand, community_cards, max(1, num_opponents), self.HARD_SIMULATIONS, self._rng,
            )
            score = 0.5 * score + 0.5 * equity
        return score
