"""GameState dataclass, GamePhase, and GameVariant enums."""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from dealers_choice.config import TableConfig
from dealers_choice.core.card import Card
from dealers_choice.core.hand_evaluator import HandResult
from dealers_choice.core.wilds import NO_WILDS, WildSet


class GamePhase(Enum):
    VARIANT_SELECT = "variant_select"
    WILD_SELECT = "wild_select"
    ANTE = "ante"
    DEALING = "dealing"
    BETTING = "betting"
    DRAW = "draw"
    SHOWDOWN = "showdown"
    SETTLEMENT = "settlement"


class GameVariant(Enum):
    def __new__(cls, variant_id: str, display_name: str, allows_wilds: bool, betting_rounds: int):
        obj = object.__new__(cls)
        obj._value_ = variant_id
        obj.display_name = display_name
        obj.allows_wilds = allows_wilds
        obj.betting_rounds = betting_rounds
        return obj

    FIVE_CARD_DRAW = ("five_card_draw", "5-Card Draw", True, 2)
    SEVEN_CARD_STUD = ("seven_card_stud", "7-Card Stud", True, 5)
    TEXAS_HOLDEM = ("texas_holdem", "Texas Hold'em", False, 4)

    @property
    def uses_blinds(self) -> bool:
        return self is GameVariant.TEXAS_HOLDEM


class SeatResult(Enum):
    WIN = "win"
    SPLIT = "split"
    LOSE = "lose"


@dataclass
class PlayerState:
    player_id: str
    name: str
    chips: int
    seat: int = 0           # 0-based seat index
    hand: List[Card] = field(default_factory=list)
    bet: int = 0            # chips bet in the current betting round
    total_bet: int = 0      # chips put in the pot this hand
    is_folded: bool = False
    is_all_in: bool = False
    has_acted: bool = False
    has_drawn: bool = False
    discards: int = 0
    is_eliminated: bool = False
    has_left: bool = False
    is_bot: bool = False
    bot_difficulty: Optional[str] = None
    result: Optional[SeatResult] = None
    payout: int = 0
    hand_result: Optional[HandResult] = None

    @property
    def in_hand(self) -> bool:
        """Dealt into the current hand and not folded."""
        return not self.is_folded and not self.is_eliminated

    @property
    def can_act(self) -> bool:
        return self.in_hand and not self.is_all_in

    def up_cards(self) -> List[Card]:
        return [c for c in self.hand if not c.face_down]

    def reset_for_hand(self) -> None:
        self.hand = []
        self.bet = 0
        self.total_bet = 0
        self.is_folded = False
        self.is_all_in = False
        self.has_acted = False
        self.has_drawn = False
        self.discards = 0
        self.result = None
        self.payout = 0
        self.hand_result = None


@dataclass
class GameState:
    game_id: str
    config: TableConfig
    players: List[PlayerState] = field(default_factory=list)
    phase: GamePhase = GamePhase.VARIANT_SELECT
    variant: Optional[GameVariant] = None
    wilds: WildSet = NO_WILDS
    last_card_down: bool = True
    dealer_index: int = 0
    current_player_index: int = -1   # -1 while nobody may act
    current_bet: int = 0
    min_raise: int = 0
    betting_round: int = 0
    street: int = 0                  # stud: cards dealt per seat (3..7)
    community_cards: List[Card] = field(default_factory=list)
    small_blind_index: int = -1
    big_blind_index: int = -1
    hand_number: int = 0
    last_message: str = ""
    won_by_fold: bool = False
    game_over: bool = False
    winner_id: Optional[str] = None

    @property
    def seated_players(self) -> List[PlayerState]:
        """Seats still in the game."""
        return [p for p in self.players if not p.is_eliminated]

    @property
    def active_players(self) -> List[PlayerState]:
        """Seats still contesting the current hand."""
        return [p for p in self.players if p.in_hand]

    @property
    def current_player(self) -> Optional[PlayerState]:
        if 0 <= self.current_player_index < len(self.players):
            return self.players[self.current_player_index]
        return None

    @property
    def dealer(self) -> Optional[PlayerState]:
        if 0 <= self.dealer_index < len(self.players):
            return self.players[self.dealer_index]
        return None

    @property
    def stage_name(self) -> str:
        """Human-readable name of the current betting round."""
        if self.variant is GameVariant.TEXAS_HOLDEM:
            return ("preflop", "flop", "turn", "river")[max(0, min(self.betting_round, 4) - 1)]
        if self.variant is GameVariant.SEVEN_CARD_STUD:
            return f"street_{self.street}"
        if self.variant is GameVariant.FIVE_CARD_DRAW:
            return "after_draw" if self.betting_round >= 2 else "before_draw"
        return ""

    def get_player(self, player_id: str) -> Optional[PlayerState]:
        for p in self.players:
            if p.player_id == player_id:
                return p
        return None

    def player_index(self, player_id: str) -> int:
        for i, p in enumerate(self.players):
            if p.player_id == player_id:
                return i
        return -1
