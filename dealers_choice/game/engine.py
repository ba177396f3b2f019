"""
PokerTable — the synchronous hand engine shared by every variant.

State machine:
  VARIANT_SELECT → WILD_SELECT → ANTE → DEALING → BETTING ⇄ DRAW / street / board
  → SHOWDOWN → SETTLEMENT → (next_hand) VARIANT_SELECT

One transition function, parameterized by the variant, decides what follows
each betting round. Every input arrives through submit(); a rejected input
changes nothing. The table is single-writer: callers serialize access.
"""
from __future__ import annotations
import logging
import random
from typing import Callable, Dict, List, Optional

from dealers_choice.ai.bot import BotPlayer
from dealers_choice.config import TableConfig
from dealers_choice.core.card import Card, Deck, DeckExhaustedError
from dealers_choice.core.hand_evaluator import determine_winners, evaluate_best
from dealers_choice.core.pot import PotInvariantError, PotManager, split_pot
from dealers_choice.core.wilds import NO_WILDS, WildSet, parse_wild_option
from dealers_choice.game.actions import (
    BETTING_ACTIONS,
    ActionResult,
    ActionType,
    HandAbortedError,
    IllegalActionError,
    PlayerAction,
    ValidActions,
)
from dealers_choice.game.betting import BettingResult, BettingRound
from dealers_choice.game.game_state import (
    GamePhase,
    GameState,
    GameVariant,
    PlayerState,
    SeatResult,
)
from dealers_choice.game.player import Player
from dealers_choice.game.rules import (
    advance_dealer,
    first_to_act_postflop,
    first_to_act_preflop,
    next_seat,
    post_antes,
    post_blinds,
    seats_from_dealer,
    stud_opener,
    validate_discards,
)
from dealers_choice.models.snapshot import (
    HIDDEN_CARD,
    PotView,
    SeatView,
    TableSnapshot,
    WildsView,
)

logger = logging.getLogger(__name__)

PRE_HAND_PHASES = (GamePhase.VARIANT_SELECT, GamePhase.WILD_SELECT, GamePhase.ANTE)


class PokerTable:
    """
    One table, one hand at a time.

    Usage:
        table = PokerTable("t1", TableConfig(variant_lock="texas_holdem"))
        table.add_player(Player("p1", "Alice"))
        table.add_player(Player("p2", "Bob"))
        table.submit("p1", PlayerAction.buy_in())
        table.submit(table.current_player_id, PlayerAction.call())
    """

    def __init__(
        self,
        game_id: str,
        config: Optional[TableConfig] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config or TableConfig()
        self.state = GameState(game_id=game_id, config=self.config, last_card_down=self.config.last_card_down)
        self.pot = PotManager()
        self._rng = rng or random.Random()
        self._deck = Deck(rng=self._rng)
        self._muck: List[Card] = []
        self._betting: Optional[BettingRound] = None
        self._start_chips: Dict[str, int] = {}
        self._showdown_reached = False
        self._bots: Dict[str, BotPlayer] = {}
        self.last_result: Optional[dict] = None
        self._handlers: Dict[ActionType, Callable[[PlayerState, PlayerAction], ActionResult]] = {
            ActionType.CHOOSE_VARIANT: self._choose_variant,
            ActionType.CHOOSE_WILDS: self._choose_wilds,
            ActionType.BUY_IN: self._buy_in,
            ActionType.DISCARD: self._draw,
            ActionType.STAND_PAT: self._draw,
            ActionType.NEXT_HAND: self._next_hand,
        }
        for action_type in BETTING_ACTIONS:
            self._handlers[action_type] = self._bet
        self._enter_pre_hand()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def game_id(self) -> str:
        return self.state.game_id

    @property
    def current_player_id(self) -> Optional[str]:
        if self.state.phase not in (GamePhase.BETTING, GamePhase.DRAW):
            return None
        p = self.state.current_player
        return p.player_id if p is not None else None

    @property
    def dealer_player_id(self) -> Optional[str]:
        dealer = self.state.dealer
        return dealer.player_id if dealer is not None else None

    @property
    def awaiting(self) -> Optional[str]:
        """The input the table needs next, None once the game is over."""
        state = self.state
        if state.game_over:
            return None
        if state.phase in PRE_HAND_PHASES and len(state.seated_players) < 2:
            return "players"
        return {
            GamePhase.VARIANT_SELECT: "choose_variant",
            GamePhase.WILD_SELECT: "choose_wilds",
            GamePhase.ANTE: "buy_in",
            GamePhase.BETTING: "bet",
            GamePhase.DRAW: "draw",
            GamePhase.SETTLEMENT: "next_hand",
        }.get(state.phase)

    @property
    def offered_wilds(self) -> List[str]:
        """Wild options the dealer may pick from for the chosen variant."""
        return [
            o for o in self.config.wild_options
            if o != "follow_the_queen" or self.state.variant is GameVariant.SEVEN_CARD_STUD
        ]

    def valid_actions(self, player_id: str) -> ValidActions:
        player = self.state.get_player(player_id)
        if player is None:
            raise IllegalActionError(f"Player {player_id} not found")
        if self.state.phase is GamePhase.BETTING and self._betting is not None:
            return self._betting.get_valid_actions(player_id)
        return ValidActions(player_stack=player.chips)

    # ------------------------------------------------------------------
    # Player management
    # ------------------------------------------------------------------

    def add_player(self, player: Player) -> bool:
        """Seat a player. Returns False if the table is full or the id is taken."""
        state = self.state
        if len(state.seated_players) >= self.config.max_seats:
            return False
        if state.get_player(player.player_id) is not None:
            return False
        ps = PlayerState(
            player_id=player.player_id,
            name=player.name,
            chips=player.chips if player.chips is not None else self.config.starting_stack,
            seat=len(state.players),
            is_bot=player.is_bot,
            bot_difficulty=player.bot_difficulty,
        )
        if state.phase not in PRE_HAND_PHASES:
            # sits out until the next hand
            ps.is_folded = True
        state.players.append(ps)
        if state.game_over and len(state.seated_players) >= 2:
            state.game_over = False
            state.winner_id = None
        logger.info(f"Table {self.game_id}: {ps.name} seated with {ps.chips} chips")
        return True

    def remove_player(self, player_id: str) -> ActionResult:
        """
        Take a seat out of the game.

        Between hands the seat is eliminated at once. During a hand it is
        folded (its chips stay in the pot) and eliminated at settlement.
        """
        state = self.state
        player = state.get_player(player_id)
        if player is None or player.is_eliminated:
            return ActionResult.rejected(None, "Player not found")
        player.has_left = True
        logger.info(f"Table {self.game_id}: {player.name} left")

        if state.phase in PRE_HAND_PHASES or state.phase is GamePhase.SETTLEMENT:
            player.is_eliminated = True
            if state.dealer is player:
                advance_dealer(state)
            self._check_game_over()
            return ActionResult(valid=True, message=f"{player.name} left the table")

        if player.is_folded:
            return ActionResult(valid=True, message=f"{player.name} left the table")

        index = state.player_index(player_id)
        was_current = state.current_player_index == index
        player.is_folded = True
        self.pot.record_fold(player_id)

        def advance() -> ActionResult:
            if len(state.active_players) <= 1:
                return self._award_fold()
            if state.phase is GamePhase.BETTING and self._betting is not None:
                return self._after_betting(self._betting.seat_left(index))
            if state.phase is GamePhase.DRAW and was_current:
                self._advance_draw(index)
            return ActionResult(valid=True)

        result = self._guarded(advance)
        result.message = f"{player.name} left the table"
        return result

    # ------------------------------------------------------------------
    # Action submission
    # ------------------------------------------------------------------

    def submit(self, player_id: str, action: PlayerAction) -> ActionResult:
        """
        Apply one action from one seat.

        Illegal actions come back as ActionResult(valid=False) and leave
        the table untouched. Raises HandAbortedError if the hand could not
        continue (its contributions have been refunded).
        """
        player = self.state.get_player(player_id)
        if player is None:
            return ActionResult.rejected(action.type, f"Player {player_id} not found")
        if player.is_eliminated:
            return ActionResult.rejected(action.type, "You are out of the game")
        handler = self._handlers[action.type]
        try:
            result = self._guarded(lambda: handler(player, action))
        except IllegalActionError as exc:
            logger.debug(f"Table {self.game_id}: rejected {action.type.value} from {player_id}: {exc}")
            return ActionResult.rejected(action.type, str(exc))
        result.action = action.type
        logger.debug(f"Table {self.game_id}: {player.name} {action.type.value} {result.amount or ''}".rstrip())
        return result

    def bot_action(self, player_id: str) -> Optional[PlayerAction]:
        """The action the seat's AI would take now, or None if it has nothing to do."""
        state = self.state
        player = state.get_player(player_id)
        if player is None or player.is_eliminated:
            return None
        bot = self._bots.get(player_id)
        if bot is None:
            bot = BotPlayer(player_id, player.bot_difficulty or "medium", random.Random(self._rng.random()))
            self._bots[player_id] = bot

        awaiting = self.awaiting
        is_dealer = self.dealer_player_id == player_id
        if awaiting == "choose_variant" and is_dealer:
            return PlayerAction.choose_variant(bot.choose_variant(list(GameVariant)).value)
        if awaiting == "choose_wilds" and is_dealer:
            wilds, last_card_down = bot.choose_wilds(state.variant, self.offered_wilds)
            return PlayerAction.choose_wilds(wilds, last_card_down)
        if awaiting == "buy_in":
            return PlayerAction.buy_in()
        if awaiting == "next_hand":
            return PlayerAction.next_hand()
        if self.current_player_id != player_id:
            return None
        if awaiting == "bet":
            valid = self.valid_actions(player_id)
            return bot.decide_bet(state, player, valid, self.pot.total, self.config.min_bet)
        if awaiting == "draw":
            return bot.decide_draw(state, player)
        return None

    # ------------------------------------------------------------------
    # Dealer's choice
    # ------------------------------------------------------------------

    def _require_dealer(self, player: PlayerState, phase: GamePhase) -> None:
        if self.state.phase is not phase:
            raise IllegalActionError(f"Cannot do that during {self.state.phase.value}")
        if len(self.state.seated_players) < 2:
            raise IllegalActionError("Waiting for more players")
        if self.state.dealer is not player:
            raise IllegalActionError("Only the dealer chooses")

    def _choose_variant(self, player: PlayerState, action: PlayerAction) -> ActionResult:
        self._require_dealer(player, GamePhase.VARIANT_SELECT)
        try:
            variant = GameVariant(action.variant)
        except ValueError:
            raise IllegalActionError(f"Unknown variant: {action.variant}") from None
        state = self.state
        state.variant = variant
        state.wilds = NO_WILDS
        state.last_card_down = self.config.last_card_down
        state.phase = GamePhase.WILD_SELECT if variant.allows_wilds else GamePhase.ANTE
        state.last_message = f"{player.name} chose {variant.display_name}"
        return ActionResult(valid=True, message=state.last_message)

    def _choose_wilds(self, player: PlayerState, action: PlayerAction) -> ActionResult:
        self._require_dealer(player, GamePhase.WILD_SELECT)
        offered = self.offered_wilds
        for option in action.wilds:
            try:
                parse_wild_option(option)
            except ValueError as exc:
                raise IllegalActionError(str(exc)) from None
            if option not in offered:
                raise IllegalActionError(f"Wild card option not offered: {option}")
        state = self.state
        state.wilds = WildSet.from_options(action.wilds)
        if action.last_card_down is not None:
            state.last_card_down = action.last_card_down
        state.phase = GamePhase.ANTE
        wild_text = ", ".join(state.wilds.options) or "no wild cards"
        state.last_message = f"{player.name} chose {wild_text}"
        return ActionResult(valid=True, message=state.last_message)

    # ------------------------------------------------------------------
    # Hand lifecycle
    # ------------------------------------------------------------------

    def _enter_pre_hand(self) -> None:
        state = self.state
        state.current_player_index = -1
        state.last_card_down = self.config.last_card_down
        if self.config.variant_lock:
            variant = GameVariant(self.config.variant_lock)
            state.variant = variant
            state.wilds = self._locked_wilds(variant)
            state.phase = GamePhase.ANTE
        else:
            state.variant = None
            state.wilds = NO_WILDS
            state.phase = GamePhase.VARIANT_SELECT

    def _locked_wilds(self, variant: GameVariant) -> WildSet:
        if not variant.allows_wilds:
            return NO_WILDS
        options = [
            o for o in self.config.default_wilds
            if o != "follow_the_queen" or variant is GameVariant.SEVEN_CARD_STUD
        ]
        return WildSet.from_options(options)

    def _buy_in(self, player: PlayerState, action: PlayerAction) -> ActionResult:
        state = self.state
        if state.phase is not GamePhase.ANTE:
            raise IllegalActionError(f"Cannot start a hand during {state.phase.value}")
        if len(state.seated_players) < 2:
            raise IllegalActionError("Waiting for more players")
        posted = self._start_hand()
        return ActionResult(valid=True, amount=posted, message=state.last_message)

    def _start_hand(self) -> int:
        state = self.state
        state.hand_number += 1
        for p in state.players:
            p.reset_for_hand()
        state.community_cards = []
        state.betting_round = 0
        state.street = 0
        state.current_bet = 0
        state.min_raise = self.config.min_bet
        state.small_blind_index = state.big_blind_index = -1
        state.won_by_fold = False
        self._showdown_reached = False
        self.last_result = None
        if state.dealer is None or state.dealer.is_eliminated:
            advance_dealer(state)

        seated = state.seated_players
        self._start_chips = {p.player_id: p.chips for p in seated}
        self.pot.set_players(p.player_id for p in seated)
        self._deck = Deck(include_jokers=state.wilds.uses_jokers, rng=self._rng)
        self._muck = []

        state.phase = GamePhase.DEALING
        if state.variant.uses_blinds:
            sb, bb = post_blinds(state, self.pot, self.config.small_blind, self.config.big_blind)
            posted = sb + bb
        else:
            posted = post_antes(state, self.pot, self.config.ante)

        logger.info(
            f"Table {self.game_id}: hand #{state.hand_number} ({state.variant.value}, "
            f"wilds={state.wilds.options}) dealer={self.dealer_player_id}"
        )
        state.last_message = f"Hand #{state.hand_number}: {state.variant.display_name}"
        self._deal_opening()
        self._begin_betting()
        return posted

    def _deal_opening(self) -> None:
        state = self.state
        order = seats_from_dealer(state)
        variant = state.variant
        if variant is GameVariant.FIVE_CARD_DRAW:
            for _ in range(5):
                for p in order:
                    p.hand.extend(self._deal(1, face_down=True))
        elif variant is GameVariant.TEXAS_HOLDEM:
            for _ in range(2):
                for p in order:
                    p.hand.extend(self._deal(1, face_down=True))
        else:
            for _ in range(2):
                for p in order:
                    p.hand.extend(self._deal(1, face_down=True))
            state.street = 3
            for p in order:
                p.hand.extend(self._deal(1, face_down=False))

    def _deal(self, n: int, face_down: bool) -> List[Card]:
        """Deal n cards, reshuffling the muck in if the deck runs short."""
        if len(self._deck) < n and self._muck:
            self._deck.replenish(self._muck)
            self._muck = []
        cards = [c.turned(face_down) for c in self._deck.deal(n)]
        if not face_down:
            for card in cards:
                self.state.wilds = self.state.wilds.observe_face_up(card)
        return cards

    def _begin_betting(self) -> None:
        state = self.state
        state.betting_round += 1
        preflop = state.variant.uses_blinds and state.betting_round == 1
        if not preflop:
            for p in state.players:
                p.bet = 0

        if state.variant is GameVariant.SEVEN_CARD_STUD:
            start = stud_opener(state)
        elif preflop:
            start = first_to_act_preflop(state)
        else:
            start = first_to_act_postflop(state)

        state.phase = GamePhase.BETTING
        self._betting = BettingRound(state, self.pot, max(start, 0), self.config.min_bet)
        if self._betting.is_complete:
            self._end_betting_round()

    def _after_betting(self, result: BettingResult) -> ActionResult:
        if result is BettingResult.ALL_FOLDED:
            return self._award_fold()
        if result is BettingResult.ROUND_COMPLETE:
            self._end_betting_round()
        return self._hand_result()

    def _end_betting_round(self) -> None:
        """Move on from a finished betting round according to the variant."""
        state = self.state
        self._betting = None
        state.current_player_index = -1
        variant = state.variant

        if variant is GameVariant.FIVE_CARD_DRAW:
            if state.betting_round == 1:
                self._begin_draw()
            else:
                self._showdown()
        elif variant is GameVariant.SEVEN_CARD_STUD:
            if state.street < 7:
                self._deal_street()
                self._begin_betting()
            else:
                self._showdown()
        else:
            if state.betting_round < 4:
                self._deal_board()
                self._begin_betting()
            else:
                self._showdown()

    def _deal_street(self) -> None:
        state = self.state
        state.street += 1
        face_down = state.street == 7 and state.last_card_down
        for p in seats_from_dealer(state):
            p.hand.extend(self._deal(1, face_down=face_down))

    def _deal_board(self) -> None:
        state = self.state
        self._muck.extend(self._deal(1, face_down=True))   # burn
        count = 3 if not state.community_cards else 1
        state.community_cards.extend(self._deal(count, face_down=False))

    # ------------------------------------------------------------------
    # Betting and drawing
    # ------------------------------------------------------------------

    def _bet(self, player: PlayerState, action: PlayerAction) -> ActionResult:
        if self.state.phase is not GamePhase.BETTING or self._betting is None:
            raise IllegalActionError(f"Cannot {action.type.value} during {self.state.phase.value}")
        result, moved = self._betting.apply_action(player.player_id, action)
        verb = {
            ActionType.FOLD: "folds",
            ActionType.CHECK: "checks",
            ActionType.CALL: f"calls {moved}",
            ActionType.RAISE: f"raises {action.amount}",
            ActionType.ALL_IN: f"is all-in for {moved}",
        }[action.type]
        self.state.last_message = f"{player.name} {verb}"
        outcome = self._after_betting(result)
        outcome.amount = moved
        return outcome

    def _begin_draw(self) -> None:
        state = self.state
        state.phase = GamePhase.DRAW
        self._advance_draw(state.dealer_index)

    def _advance_draw(self, from_index: int) -> None:
        state = self.state
        nxt = next_seat(state.players, from_index, lambda p: p.can_act and not p.has_drawn)
        state.current_player_index = nxt
        if nxt == -1:
            self._begin_betting()

    def _draw(self, player: PlayerState, action: PlayerAction) -> ActionResult:
        state = self.state
        if state.phase is not GamePhase.DRAW:
            raise IllegalActionError(f"Cannot draw during {state.phase.value}")
        if state.current_player is not player:
            raise IllegalActionError("Not your turn")
        indices = [] if action.type is ActionType.STAND_PAT else list(action.indices)
        indices = validate_discards(player.hand, indices, state.wilds)

        if indices:
            thrown = [player.hand[i] for i in indices]
            kept = [c for i, c in enumerate(player.hand) if i not in indices]
            player.hand = kept + self._deal(len(indices), face_down=True)
            self._muck.extend(thrown)
        player.has_drawn = True
        player.discards = len(indices)
        state.last_message = (
            f"{player.name} draws {len(indices)}" if indices else f"{player.name} stands pat"
        )
        self._advance_draw(state.player_index(player.player_id))
        result = self._hand_result()
        result.cards_drawn = len(indices)
        return result

    # ------------------------------------------------------------------
    # Showdown & settlement
    # ------------------------------------------------------------------

    def _showdown(self) -> None:
        state = self.state
        state.phase = GamePhase.SHOWDOWN
        self._showdown_reached = True
        contenders = state.active_players
        for p in contenders:
            p.hand_result = evaluate_best(p.hand + state.community_cards, state.wilds)
        best_ids, best = determine_winners(
            {p.player_id: p.hand + state.community_cards for p in contenders}, state.wilds,
        )

        payouts: Dict[str, int] = {}
        won_alone: set = set()
        shared: set = set()
        pots = self.pot.calculate_side_pots()
        if not pots:
            # nothing was bet; the best hand still wins the showdown
            (won_alone if len(best_ids) == 1 else shared).update(best_ids)
        for pot in pots:
            eligible = {
                p.player_id: p.hand + state.community_cards
                for p in contenders if p.player_id in pot.eligible_player_ids
            }
            if not eligible:
                raise PotInvariantError(f"No eligible seat for a pot of {pot.amount}")
            winners, _ = determine_winners(eligible, state.wilds)
            (won_alone if len(winners) == 1 else shared).update(winners)
            for pid, amount in split_pot(pot.amount, winners):
                payouts[pid] = payouts.get(pid, 0) + amount

        for p in contenders:
            if p.player_id in won_alone:
                p.result = SeatResult.WIN
            elif p.player_id in shared:
                p.result = SeatResult.SPLIT
            else:
                p.result = SeatResult.LOSE

        names = [state.get_player(pid).name for pid in best_ids]
        if len(names) == 1:
            state.last_message = f"{names[0]} wins with {best.name}"
        else:
            state.last_message = f"{' & '.join(names)} split with {best.name}"
        self._settle(payouts)

    def _award_fold(self) -> ActionResult:
        state = self.state
        winner = state.active_players[0]
        payouts = {winner.player_id: self.pot.total}
        for p in state.players:
            if p.is_eliminated:
                continue
            p.result = SeatResult.WIN if p is winner else SeatResult.LOSE
        state.won_by_fold = True
        state.last_message = f"{winner.name} wins {self.pot.total} (everyone else folded)"
        self._settle(payouts)
        return self._hand_result()

    def _settle(self, payouts: Dict[str, int]) -> None:
        state = self.state
        self._betting = None
        state.current_player_index = -1
        for pid, amount in payouts.items():
            p = state.get_player(pid)
            p.chips += amount
            p.payout = amount

        before = sum(self._start_chips.values())
        after = sum(state.get_player(pid).chips for pid in self._start_chips)
        if before != after:
            raise PotInvariantError(f"Chips not conserved: {before} before the hand, {after} after")

        state.phase = GamePhase.SETTLEMENT
        self.last_result = {
            "hand_number": state.hand_number,
            "variant": state.variant.value,
            "won_by_fold": state.won_by_fold,
            "payouts": dict(payouts),
            "message": state.last_message,
            "hands": {
                p.player_id: {
                    "name": p.name,
                    "cards": [str(c) for c in p.hand],
                    "hand_name": p.hand_result.name if p.hand_result else None,
                    "result": p.result.value if p.result else None,
                }
                for p in state.active_players
            } if not state.won_by_fold else {},
        }
        self.pot.reset()
        logger.info(f"Table {self.game_id}: hand #{state.hand_number} over: {state.last_message}")
        self._eliminate_departed()

    def _eliminate_departed(self) -> None:
        for p in self.state.players:
            if not p.is_eliminated and (p.chips == 0 or p.has_left):
                p.is_eliminated = True
                logger.info(f"Table {self.game_id}: {p.name} eliminated")
        self._check_game_over()

    def _check_game_over(self) -> None:
        state = self.state
        seated = state.seated_players
        if len(seated) <= 1 and state.hand_number > 0:
            state.game_over = True
            state.winner_id = seated[0].player_id if seated else None
            state.phase = GamePhase.SETTLEMENT
            state.current_player_index = -1
            logger.info(f"Table {self.game_id}: game over, winner={state.winner_id}")

    def _next_hand(self, player: PlayerState, action: PlayerAction) -> ActionResult:
        state = self.state
        if state.phase is not GamePhase.SETTLEMENT:
            raise IllegalActionError(f"Cannot start the next hand during {state.phase.value}")
        if state.game_over:
            raise IllegalActionError("The game is over")
        for p in state.players:
            p.reset_for_hand()
        state.community_cards = []
        state.betting_round = 0
        state.street = 0
        state.current_bet = 0
        state.won_by_fold = False
        state.small_blind_index = state.big_blind_index = -1
        self._showdown_reached = False
        advance_dealer(state)
        self._enter_pre_hand()
        dealer = state.dealer
        state.last_message = f"{dealer.name} deals" if dealer else ""
        return ActionResult(valid=True, message=state.last_message)

    # ------------------------------------------------------------------
    # Failure handling
    # ------------------------------------------------------------------

    def _guarded(self, step: Callable[[], ActionResult]) -> ActionResult:
        try:
            return step()
        except (DeckExhaustedError, PotInvariantError) as exc:
            raise self._abort_hand(exc) from exc

    def _abort_hand(self, cause: Exception) -> HandAbortedError:
        """Refund the hand and park the table in settlement."""
        state = self.state
        logger.exception(f"Table {self.game_id}: hand #{state.hand_number} aborted: {cause}")
        for pid, chips in self._start_chips.items():
            p = state.get_player(pid)
            if p is not None:
                p.chips = chips
        for p in state.players:
            p.bet = 0
            p.total_bet = 0
            p.payout = 0
            p.result = None
            p.hand_result = None
        self._showdown_reached = False
        self.pot.reset()
        self._betting = None
        state.current_player_index = -1
        state.phase = GamePhase.SETTLEMENT
        state.last_message = f"Hand aborted: {cause}"
        self._eliminate_departed()
        return HandAbortedError(state.last_message, cause)

    def _hand_result(self) -> ActionResult:
        state = self.state
        over = state.phase is GamePhase.SETTLEMENT
        return ActionResult(
            valid=True,
            message=state.last_message,
            pot_awarded=dict(self.last_result["payouts"]) if over and self.last_result else {},
            hand_over=over,
        )

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def _revealed(self, p: PlayerState, viewer_id: Optional[str]) -> bool:
        if p.player_id == viewer_id:
            return True
        # hands that reached a real showdown are shown until the next hand
        return (
            self._showdown_reached
            and self.state.phase is GamePhase.SETTLEMENT
            and p.hand_result is not None
        )

    def _seat_view(self, p: PlayerState, viewer_id: Optional[str]) -> SeatView:
        revealed = self._revealed(p, viewer_id)
        cards = [str(c) if revealed or not c.face_down else HIDDEN_CARD for c in p.hand]
        return SeatView(
            player_id=p.player_id,
            name=p.name,
            seat=p.seat,
            chips=p.chips,
            bet=p.bet,
            total_bet=p.total_bet,
            is_folded=p.is_folded,
            is_all_in=p.is_all_in,
            is_eliminated=p.is_eliminated,
            has_left=p.has_left,
            has_drawn=p.has_drawn,
            discards=p.discards,
            is_bot=p.is_bot,
            bot_difficulty=p.bot_difficulty,
            is_dealer=self.state.dealer is p,
            is_current=self.current_player_id == p.player_id,
            result=p.result.value if p.result else None,
            payout=p.payout,
            hand_name=p.hand_result.name if p.hand_result and revealed else None,
            cards=cards,
        )

    def get_state(self, player_id: Optional[str] = None) -> TableSnapshot:
        """Immutable view of the table for one seat (None: a spectator)."""
        state = self.state
        valid = (
            self.valid_actions(player_id)
            if player_id is not None and state.get_player(player_id) is not None
            else ValidActions()
        )
        wilds = state.wilds
        return TableSnapshot(
            game_id=state.game_id,
            viewer_id=player_id,
            phase=state.phase.value,
            awaiting=self.awaiting,
            variant=state.variant.value if state.variant else None,
            variant_name=state.variant.display_name if state.variant else None,
            stage=state.stage_name if state.phase in (GamePhase.BETTING, GamePhase.DRAW) else "",
            wilds=WildsView(
                options=wilds.options,
                wild_ranks=wilds.wild_ranks(),
                follow_the_queen=wilds.follow_the_queen,
                followed_rank=wilds.followed_rank.symbol if wilds.followed_rank else None,
            ),
            last_card_down=state.last_card_down,
            pot=self.pot.total,
            pots=[PotView(**p.to_dict()) for p in self.pot.calculate_side_pots()],
            dealer_index=state.dealer_index,
            dealer_id=self.dealer_player_id,
            current_player_id=self.current_player_id,
            current_bet=state.current_bet,
            call_amount=valid.call_amount,
            min_raise=state.min_raise,
            max_raise=valid.max_raise,
            valid_actions=valid.names(),
            street=state.street,
            betting_round=state.betting_round,
            community_cards=[str(c) for c in state.community_cards],
            small_blind_index=state.small_blind_index,
            big_blind_index=state.big_blind_index,
            hand_number=state.hand_number,
            last_message=state.last_message,
            won_by_fold=state.won_by_fold,
            game_over=state.game_over,
            winner_id=state.winner_id,
            seats=[self._seat_view(p, player_id) for p in state.players],
        )
