"""BotPlayer — wires HandStrengthEstimator, StrategyEngine and the draw policy together."""
from __future__ import annotations
import random
from typing import List, Optional, Sequence, Tuple

from dealers_choice.ai.draw import easy_draw, enforce_draw_limit, hard_draw, medium_draw
from dealers_choice.ai.hand_strength import HandStrengthEstimator, evaluate_any
from dealers_choice.ai.strategy import BettingContext, StrategyEngine
from dealers_choice.core.card import Card
from dealers_choice.core.wilds import WildSet
from dealers_choice.game.actions import PlayerAction, ValidActions
from dealers_choice.game.game_state import GameState, GameVariant, PlayerState


class BotPlayer:
    """
    Stateless bot decision-maker for one seat.

    Every decision is legal for the seat at the time it is made; the
    engine validates it again on submit.
    """

    def __init__(self, player_id: str, difficulty: str = "medium", rng: Optional[random.Random] = None) -> None:
        self.player_id = player_id
        self.difficulty = difficulty
        self._rng = rng or random.Random()
        self._estimator = HandStrengthEstimator(self._rng)
        self._strategy = StrategyEngine(self._rng)

    # ------------------------------------------------------------------
    # Dealer choices
    # ------------------------------------------------------------------

    def choose_variant(self, allowed: Sequence[GameVariant]) -> GameVariant:
        return self._rng.choice(list(allowed))

    def choose_wilds(self, variant: GameVariant, offered: Sequence[str]) -> Tuple[List[str], bool]:
        """Half the time no wilds, otherwise one or two random options."""
        options = [o for o in offered if o != "follow_the_queen" or variant is GameVariant.SEVEN_CARD_STUD]
        last_card_down = self._rng.random() < 0.7
        if not options or self._rng.random() < 0.5:
            return [], last_card_down
        count = min(len(options), self._rng.randint(1, 2))
        return self._rng.sample(options, count), last_card_down

    # ------------------------------------------------------------------
    # Betting and drawing
    # ------------------------------------------------------------------

    def decide_bet(
        self,
        state: GameState,
        player: PlayerState,
        valid: ValidActions,
        pot: int,
        min_bet: int,
    ) -> PlayerAction:
        if not player.hand:
            return PlayerAction.check() if valid.can_check else PlayerAction.fold()

        opponents = sum(1 for p in state.active_players if p.player_id != self.player_id)
        holdem = state.variant is GameVariant.TEXAS_HOLDEM
        strength = self._estimator.estimate(
            hand=player.hand,
            community_cards=state.community_cards,
            wilds=state.wilds,
            num_opponents=opponents,
            difficulty=self.difficulty,
            holdem=holdem,
        )
        rank = evaluate_any(list(player.hand) + list(state.community_cards), state.wilds).rank
        rounds = state.variant.betting_rounds if state.variant else 1

        ctx = BettingContext(
            strength=strength,
            rank=rank,
            valid=valid,
            pot=pot,
            chips=player.chips,
            players_in_hand=opponents + 1,
            min_bet=min_bet,
            early_round=state.betting_round < rounds,
        )
        return self._strategy.decide(ctx, self.difficulty)

    def choose_discards(self, hand: Sequence[Card], wilds: WildSet) -> List[int]:
        if self.difficulty == "easy":
            discards = easy_draw(hand, wilds)
        elif self.difficulty == "hard":
            discards = hard_draw(hand, wilds, rng=self._rng)
        else:
            discards = medium_draw(hand, wilds)
        return enforce_draw_limit(hand, discards, wilds)

    def decide_draw(self, state: GameState, player: PlayerState) -> PlayerAction:
        discards = self.choose_discards(player.hand, state.wilds)
        if not discards:
            return PlayerAction.stand_pat()
        return PlayerAction.discard(discards)
