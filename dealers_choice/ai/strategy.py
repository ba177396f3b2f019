"""
Strategy engine for AI bots.

Easy:    passive thresholds on hand rank, never bluffs
Medium:  pot-odds aware, bluffs ~15% of the time
Hard:    strength scaled by field size, value bets sized to the pot,
         bluffs weighted by field size and cost to call

Raise amounts are increments over the amount owed.
"""
from __future__ import annotations
import random
from dataclasses import dataclass
from typing import Optional

from dealers_choice.core.hand_evaluator import HandRank
from dealers_choice.game.actions import ActionType, PlayerAction, ValidActions


@dataclass
class BettingContext:
    """What a bot may see when it is asked to bet."""
    strength: float
    rank: HandRank
    valid: ValidActions
    pot: int
    chips: int
    players_in_hand: int
    min_bet: int
    early_round: bool = False


def round_raise(amount: float, chips: int, min_bet: int) -> int:
    """Round to a multiple of min_bet (at least min_bet), capped at chips."""
    rounded = max(min_bet, int(round(amount / min_bet)) * min_bet)
    return min(rounded, chips)


def legalize(action: PlayerAction, valid: ValidActions) -> PlayerAction:
    """Turn a wish into an action the betting round will accept."""
    if action.type is ActionType.RAISE:
        if not valid.can_raise:
            return PlayerAction.call() if valid.can_call else PlayerAction.check()
        amount = max(valid.min_raise, min(action.amount, valid.max_raise))
        return PlayerAction.raise_by(amount)
    if action.type is ActionType.CHECK and not valid.can_check:
        return PlayerAction.fold()
    if action.type is ActionType.CALL and not valid.can_call:
        return PlayerAction.check() if valid.can_check else PlayerAction.fold()
    if action.type is ActionType.FOLD and valid.can_check:
        # folding for free is never better than checking
        return PlayerAction.check()
    if action.type is ActionType.ALL_IN and not valid.can_all_in:
        return PlayerAction.check() if valid.can_check else PlayerAction.fold()
    return action


class StrategyEngine:
    """Decides the bot action given hand strength and table context."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()

    def decide(self, ctx: BettingContext, difficulty: str = "medium") -> PlayerAction:
        if difficulty == "easy":
            action = self._easy(ctx)
        elif difficulty == "hard":
            action = self._hard(ctx)
        else:
            action = self._medium(ctx)
        return legalize(action, ctx.valid)

    # ------------------------------------------------------------------
    # Easy bot: passive, calls pairs, folds junk
    # ------------------------------------------------------------------

    def _easy(self, ctx: BettingContext) -> PlayerAction:
        rnd = self._rng.random
        if ctx.valid.can_check:
            if ctx.rank >= HandRank.ONE_PAIR and rnd() < 0.3:
                return self._raise(ctx, ctx.valid.min_raise)
            return PlayerAction.check()

        if ctx.rank >= HandRank.TWO_PAIR:
            return PlayerAction.call()
        if ctx.rank >= HandRank.ONE_PAIR:
            return PlayerAction.call() if rnd() < 0.6 else PlayerAction.fold()
        return PlayerAction.fold() if rnd() < 0.7 else PlayerAction.call()

    # ------------------------------------------------------------------
    # Medium bot: pot odds and the occasional bluff
    # ------------------------------------------------------------------

    def _medium(self, ctx: BettingContext) -> PlayerAction:
        rnd = self._rng.random
        to_call = ctx.valid.call_amount
        pot_odds = self._pot_odds(ctx)
        bluff = rnd() < 0.15
        min_raise = ctx.valid.min_raise

        if ctx.valid.can_check:
            if ctx.rank >= HandRank.THREE_OF_A_KIND:
                return self._raise(ctx, max(min_raise, ctx.pot))
            if ctx.rank >= HandRank.ONE_PAIR:
                return self._raise(ctx, min_raise) if rnd() < 0.5 else PlayerAction.check()
            if bluff:
                return self._raise(ctx, min_raise)
            return PlayerAction.check()

        if ctx.rank >= HandRank.THREE_OF_A_KIND:
            if rnd() < 0.4:
                return self._raise(ctx, min_raise * 2)
            return PlayerAction.call()
        if ctx.rank >= HandRank.ONE_PAIR:
            return PlayerAction.call() if ctx.strength > pot_odds else PlayerAction.fold()
        if bluff and to_call <= min_raise * 2:
            return self._raise(ctx, min_raise)
        return PlayerAction.call() if rnd() < 0.2 else PlayerAction.fold()

    # ------------------------------------------------------------------
    # Hard bot
    # ------------------------------------------------------------------

    BLUFF_FREQUENCY = 0.20

    def _hard(self, ctx: BettingContext) -> PlayerAction:
        rnd = self._rng.random
        to_call = ctx.valid.call_amount
        min_raise = ctx.valid.min_raise
        is_bluff = rnd() < self.BLUFF_FREQUENCY
        field_factor = 1.15 if ctx.players_in_hand <= 3 else 1.0
        strength = min(1.0, ctx.strength * field_factor)

        if ctx.valid.can_check:
            if strength >= 0.6:
                return self._raise(ctx, max(min_raise, int(ctx.pot * strength * 0.75)))
            if strength >= 0.35 and rnd() < 0.35:
                return self._raise(ctx, min_raise)
            if is_bluff and strength < 0.25:
                return self._raise(ctx, max(min_raise, int(ctx.pot * 0.6)))
            return PlayerAction.check()

        effective_odds = self._pot_odds(ctx) * (1.3 if ctx.early_round else 1.0)

        if strength >= 0.7:
            if rnd() < 0.5:
                return self._raise(ctx, max(min_raise, to_call * 2))
            return PlayerAction.call()
        if strength >= effective_odds:
            return PlayerAction.call()
        if is_bluff and ctx.players_in_hand <= 3 and to_call <= ctx.chips * 0.15:
            return self._raise(ctx, min_raise * 3)
        # cheap enough to see another card
        if ctx.early_round and to_call <= ctx.chips * 0.05:
            return PlayerAction.call()
        return PlayerAction.fold()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _pot_odds(self, ctx: BettingContext) -> float:
        """Minimum equity needed to make a call breakeven."""
        call = ctx.valid.call_amount
        if call == 0:
            return 0.0
        return call / (ctx.pot + call)

    def _raise(self, ctx: BettingContext, amount: float) -> PlayerAction:
        return PlayerAction.raise_by(round_raise(amount, ctx.valid.max_raise, ctx.min_bet))
