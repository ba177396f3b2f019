"""
Betting round logic shared by every variant.

BettingRound manages one round of betting (a draw round, a stud street,
or a hold'em street). Every action is validated before anything is
mutated; an illegal action raises IllegalActionError and leaves the
table exactly as it was.

Raise amounts are increments over the amount the seat owes, so
"raise 10" facing a bet of 5 puts 15 chips in.
"""
from __future__ import annotations
from enum import Enum
from typing import List, Optional, Tuple

from dealers_choice.core.pot import PotManager
from dealers_choice.game.actions import (
    ActionType,
    IllegalActionError,
    PlayerAction,
    ValidActions,
)
from dealers_choice.game.game_state import GameState, PlayerState


class BettingResult(Enum):
    CONTINUE = "continue"
    ROUND_COMPLETE = "round_complete"
    ALL_FOLDED = "all_folded"


class BettingRound:
    """
    Manages action for one betting round.

    Args:
        state: current GameState (mutated in place)
        pot: the hand's PotManager, fed with every chip that moves
        start_player_index: seat that opens the round (skipped if it cannot act)
        min_bet: smallest raise increment for the table
    """

    def __init__(
        self,
        state: GameState,
        pot: PotManager,
        start_player_index: int,
        min_bet: int,
    ) -> None:
        self.state = state
        self.pot = pot
        self.min_bet = min_bet
        state.current_bet = max((p.bet for p in state.players if not p.is_eliminated), default=0)
        state.min_raise = min_bet
        for p in state.players:
            p.has_acted = False
        state.current_player_index = self._first_pending(start_player_index, inclusive=True)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _pending(self) -> List[PlayerState]:
        """Seats that still have to act this round."""
        state = self.state
        can_act = [p for p in state.players if p.can_act]
        if len([p for p in state.players if p.in_hand]) <= 1:
            return []
        if len(can_act) <= 1 and all(p.bet >= state.current_bet for p in can_act):
            return []
        return [p for p in can_act if not p.has_acted or p.bet < state.current_bet]

    @property
    def is_complete(self) -> bool:
        return not self._pending()

    def _first_pending(self, from_index: int, inclusive: bool = False) -> int:
        pending = {p.player_id for p in self._pending()}
        if not pending:
            return -1
        players = self.state.players
        n = len(players)
        start = 0 if inclusive else 1
        for offset in range(start, n + start):
            idx = (from_index + offset) % n
            if players[idx].player_id in pending:
                return idx
        return -1

    def next_to_act(self) -> Optional[str]:
        """Return player_id of the seat to act, or None if the round is over."""
        p = self.state.current_player
        return p.player_id if p is not None else None

    def get_valid_actions(self, player_id: str) -> ValidActions:
        state = self.state
        player = state.get_player(player_id)
        if player is None:
            raise IllegalActionError(f"Player {player_id} not found")
        if state.current_player is not player or not player.can_act:
            return ValidActions(player_stack=player.chips)

        to_call = max(0, state.current_bet - player.bet)
        max_raise = player.chips - to_call
        return ValidActions(
            can_check=to_call == 0,
            can_call=to_call > 0 and player.chips > 0,
            call_amount=min(to_call, player.chips),
            min_raise=state.min_raise,
            max_raise=max(0, max_raise),
            can_raise=max_raise >= state.min_raise,
            can_fold=True,
            can_all_in=player.chips > 0,
            player_stack=player.chips,
        )

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def validate(self, player_id: str, action: PlayerAction) -> PlayerState:
        """Raise IllegalActionError unless `action` is legal right now."""
        state = self.state
        player = state.get_player(player_id)
        if player is None:
            raise IllegalActionError(f"Player {player_id} not found")
        if state.current_player is not player:
            raise IllegalActionError("Not your turn")
        if not player.can_act:
            raise IllegalActionError("You cannot act in this hand")

        to_call = max(0, state.current_bet - player.bet)
        kind = action.type
        if kind is ActionType.CHECK:
            if to_call > 0:
                raise IllegalActionError(f"Cannot check: {to_call} to call")
        elif kind is ActionType.CALL:
            if to_call == 0:
                raise IllegalActionError("Nothing to call")
        elif kind is ActionType.RAISE:
            if action.amount < state.min_raise:
                raise IllegalActionError(f"Minimum raise is {state.min_raise}")
            if to_call + action.amount > player.chips:
                raise IllegalActionError("Not enough chips")
        elif kind is ActionType.ALL_IN:
            if player.chips <= 0:
                raise IllegalActionError("No chips to go all-in with")
        elif kind is not ActionType.FOLD:
            raise IllegalActionError(f"Cannot {kind.value} during a betting round")
        return player

    def apply_action(self, player_id: str, action: PlayerAction) -> Tuple[BettingResult, int]:
        """
        Apply an action from the current seat.

        Returns (result, chips moved into the pot).
        """
        player = self.validate(player_id, action)
        state = self.state
        to_call = max(0, state.current_bet - player.bet)
        moved = 0
        kind = action.type

        if kind is ActionType.FOLD:
            player.is_folded = True
            self.pot.record_fold(player.player_id)

        elif kind is ActionType.CALL:
            moved = self._put_in(player, min(to_call, player.chips))

        elif kind is ActionType.RAISE:
            moved = self._put_in(player, to_call + action.amount)
            state.current_bet = player.bet
            state.min_raise = max(self.min_bet, action.amount)
            self._reopen(player)

        elif kind is ActionType.ALL_IN:
            moved = self._put_in(player, player.chips)
            if player.bet > state.current_bet:
                raise_size = player.bet - state.current_bet
                state.current_bet = player.bet
                state.min_raise = max(state.min_raise, raise_size)
                self._reopen(player)

        player.has_acted = True
        return self._finish(state.current_player_index), moved

    def _put_in(self, player: PlayerState, amount: int) -> int:
        amount = min(amount, player.chips)
        player.chips -= amount
        player.bet += amount
        player.total_bet += amount
        if player.chips == 0:
            player.is_all_in = True
        self.pot.add_contribution(player.player_id, amount, player.is_all_in)
        return amount

    def _reopen(self, raiser: PlayerState) -> None:
        for p in self.state.players:
            if p is not raiser:
                p.has_acted = False

    def _finish(self, actor_index: int) -> BettingResult:
        if len(self.state.active_players) <= 1:
            self.state.current_player_index = -1
            return BettingResult.ALL_FOLDED
        nxt = self._first_pending(actor_index)
        self.state.current_player_index = nxt
        if nxt == -1:
            return BettingResult.ROUND_COMPLETE
        return BettingResult.CONTINUE

    def seat_left(self, player_index: int) -> BettingResult:
        """Re-derive the turn after a seat was folded from outside the round."""
        if self.state.current_player_index == player_index:
            return self._finish(player_index)
        if len(self.state.active_players) <= 1:
            self.state.current_player_index = -1
            return BettingResult.ALL_FOLDED
        if self.is_complete:
            self.state.current_player_index = -1
            return BettingResult.ROUND_COMPLETE
        return BettingResult.CONTINUE
