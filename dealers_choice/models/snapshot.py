"""Immutable per-seat views of a table."""
from __future__ import annotations
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

HIDDEN_CARD = "??"


class SeatView(BaseModel):
    model_config = ConfigDict(frozen=True)

    player_id: str
    name: str
    seat: int
    chips: int
    bet: int
    total_bet: int
    is_folded: bool
    is_all_in: bool
    is_eliminated: bool
    has_left: bool
    has_drawn: bool
    discards: int
    is_bot: bool
    bot_difficulty: Optional[str] = None
    is_dealer: bool
    is_current: bool
    result: Optional[str] = None
    payout: int = 0
    hand_name: Optional[str] = None
    cards: List[str]


class PotView(BaseModel):
    model_config = ConfigDict(frozen=True)

    amount: int
    eligible: List[str]


class WildsView(BaseModel):
    model_config = ConfigDict(frozen=True)

    options: List[str]
    wild_ranks: List[str]
    follow_the_queen: bool = False
    followed_rank: Optional[str] = None


class TableSnapshot(BaseModel):
    """A table as one seat is allowed to see it."""
    model_config = ConfigDict(frozen=True)

    game_id: str
    viewer_id: Optional[str] = None
    phase: str
    awaiting: Optional[str] = None
    variant: Optional[str] = None
    variant_name: Optional[str] = None
    stage: str = ""
    wilds: WildsView
    last_card_down: bool
    pot: int
    pots: List[PotView]
    dealer_index: int
    dealer_id: Optional[str] = None
    current_player_id: Optional[str] = None
    current_bet: int
    call_amount: int = 0
    min_raise: int
    max_raise: int = 0
    valid_actions: List[str]
    street: int
    betting_round: int
    community_cards: List[str]
    small_blind_index: int
    big_blind_index: int
    hand_number: int
    last_message: str
    won_by_fold: bool
    game_over: bool
    winner_id: Optional[str] = None
    seats: List[SeatView]

    def seat(self, player_id: str) -> Optional[SeatView]:
        for s in self.seats:
            if s.player_id == player_id:
                return s
        return None
