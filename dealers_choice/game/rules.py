"""Forced bets, dealer rotation, opener selection and the draw limit."""
from __future__ import annotations
from typing import Callable, List, Sequence, Tuple

from dealers_choice.core.card import Card, Rank
from dealers_choice.core.hand_evaluator import compare_hands, evaluate_partial
from dealers_choice.core.pot import PotManager
from dealers_choice.core.wilds import WildSet
from dealers_choice.game.actions import IllegalActionError
from dealers_choice.game.game_state import GameState, PlayerState

MAX_DISCARDS = 3
MAX_DISCARDS_WITH_ACE = 4


def next_seat(
    players: List[PlayerState],
    from_index: int,
    predicate: Callable[[PlayerState], bool],
) -> int:
    """Index of the first seat after from_index matching predicate, -1 if none."""
    n = len(players)
    for offset in range(1, n + 1):
        idx = (from_index + offset) % n
        if predicate(players[idx]):
            return idx
    return -1


def next_active_seat(players: List[PlayerState], from_index: int) -> int:
    """Next seat still in the game."""
    return next_seat(players, from_index, lambda p: not p.is_eliminated)


def next_in_hand_seat(players: List[PlayerState], from_index: int) -> int:
    """Next seat still contesting the hand (all-in seats included)."""
    return next_seat(players, from_index, lambda p: p.in_hand)


def advance_dealer(state: GameState) -> int:
    """Move the dealer button to the next seat still in the game."""
    new_dealer = next_active_seat(state.players, state.dealer_index)
    if new_dealer != -1:
        state.dealer_index = new_dealer
    return state.dealer_index


def seats_from_dealer(state: GameState) -> List[PlayerState]:
    """Seats in the hand in dealing order, starting left of the dealer."""
    players = state.players
    n = len(players)
    ordered = [players[(state.dealer_index + offset) % n] for offset in range(1, n + 1)]
    return [p for p in ordered if p.in_hand]


def get_blind_indices(state: GameState) -> Tuple[int, int]:
    """
    Return (small_blind_index, big_blind_index) given the current dealer.
    Heads-up rule: dealer posts SB, other player posts BB.
    """
    players = state.players
    if len(state.seated_players) == 2:
        sb_index = state.dealer_index
    else:
        sb_index = next_active_seat(players, state.dealer_index)
    bb_index = next_active_seat(players, sb_index)
    return sb_index, bb_index


def _post(player: PlayerState, amount: int, pot: PotManager, live: bool) -> int:
    amount = min(amount, player.chips)
    player.chips -= amount
    player.total_bet += amount
    if live:
        player.bet += amount
    if player.chips == 0:
        player.is_all_in = True
    pot.add_contribution(player.player_id, amount, player.is_all_in)
    return amount


def post_antes(state: GameState, pot: PotManager, ante: int) -> int:
    """Every seat in the hand posts the ante as dead money. Returns chips posted."""
    total = 0
    for p in state.active_players:
        total += _post(p, ante, pot, live=False)
    return total


def post_blinds(state: GameState, pot: PotManager, small_blind: int, big_blind: int) -> Tuple[int, int]:
    """
    Post blinds for the current hand as live bets.
    Returns (amount_sb_posted, amount_bb_posted).
    """
    sb_idx, bb_idx = get_blind_indices(state)
    state.small_blind_index, state.big_blind_index = sb_idx, bb_idx
    sb_amount = _post(state.players[sb_idx], small_blind, pot, live=True)
    bb_amount = _post(state.players[bb_idx], big_blind, pot, live=True)
    return sb_amount, bb_amount


def first_to_act_preflop(state: GameState) -> int:
    """Seat after the big blind; heads-up that is the dealer (small blind)."""
    return next_active_seat(state.players, state.big_blind_index)


def first_to_act_postflop(state: GameState) -> int:
    """First seat left of the dealer; heads-up that is the big blind."""
    return next_active_seat(state.players, state.dealer_index)


def stud_opener(state: GameState) -> int:
    """
    Seat with the best face-up cards among seats that can still act.

    Fewer than five up-cards are ranked by their groups (see
    evaluate_partial). Ties go to the lowest seat index.
    """
    best_index = -1
    best = None
    for idx, p in enumerate(state.players):
        if not p.can_act:
            continue
        result = evaluate_partial(p.up_cards(), state.wilds)
        if best is None or compare_hands(result, best) > 0:
            best, best_index = result, idx
    return best_index


def max_discards(hand: Sequence[Card], kept_indices: Sequence[int], wilds: WildSet) -> int:
    """Three, or four when the one kept card is an ace or a wild card."""
    if len(kept_indices) == 1:
        kept = hand[kept_indices[0]]
        if kept.rank is Rank.ACE or wilds.is_wild(kept):
            return MAX_DISCARDS_WITH_ACE
    return MAX_DISCARDS


def validate_discards(hand: Sequence[Card], indices: Sequence[int], wilds: WildSet) -> List[int]:
    """Return the sorted discard indices or raise IllegalActionError."""
    if len(set(indices)) != len(indices):
        raise IllegalActionError("Duplicate discard index")
    for i in indices:
        if not 0 <= i < len(hand):
            raise IllegalActionError(f"Invalid card index: {i}")
    kept = [i for i in range(len(hand)) if i not in indices]
    limit = max_discards(hand, kept, wilds)
    if len(indices) > limit:
        if limit == MAX_DISCARDS:
            raise IllegalActionError("You may discard at most 3 cards unless you keep an ace or a wild card")
        raise IllegalActionError(f"You may discard at most {limit} cards")
    return sorted(indices)
