"""Pydantic request models for REST endpoints."""
from __future__ import annotations
from typing import List, Optional

from pydantic import BaseModel, Field

from dealers_choice.config import TableConfig
from dealers_choice.game.actions import ActionType, PlayerAction

ACTION_PATTERN = "^(" + "|".join(t.value for t in ActionType) + ")$"


class CreateGameRequest(BaseModel):
    starting_stack: int = Field(default=1000, ge=1)
    ante: int = Field(default=1, ge=0)
    small_blind: int = Field(default=1, ge=1)
    big_blind: int = Field(default=2, ge=1)
    min_bet: int = Field(default=5, ge=1)
    max_seats: int = Field(default=6, ge=2, le=6)
    variant_lock: Optional[str] = Field(default=None, pattern="^(five_card_draw|seven_card_stud|texas_holdem)$")
    wild_options: Optional[List[str]] = None
    default_wilds: List[str] = Field(default_factory=list)
    last_card_down: bool = True
    num_bots: int = Field(default=0, ge=0, le=5)
    bot_difficulty: str = Field(default="medium", pattern="^(easy|medium|hard)$")
    bot_delay_min: float = Field(default=0.8, ge=0)
    bot_delay_max: float = Field(default=2.0, ge=0)
    hand_pause: float = Field(default=3.0, ge=0)
    auto_advance: bool = True

    def to_config(self) -> TableConfig:
        """Raises pydantic.ValidationError for inconsistent settings."""
        data = self.model_dump(exclude={"num_bots", "bot_difficulty", "wild_options"})
        if self.wild_options is not None:
            data["wild_options"] = self.wild_options
        return TableConfig(**data)


class JoinGameRequest(BaseModel):
    player_name: str = Field(min_length=1, max_length=30)
    buy_in: Optional[int] = Field(default=None, ge=1)


class ActionRequest(BaseModel):
    player_id: str
    action: str = Field(pattern=ACTION_PATTERN)
    amount: int = Field(default=0, ge=0)
    variant: Optional[str] = None
    wilds: List[str] = Field(default_factory=list)
    last_card_down: Optional[bool] = None
    indices: List[int] = Field(default_factory=list)

    def to_action(self) -> PlayerAction:
        return PlayerAction.from_dict(self.model_dump(exclude={"player_id"}))
