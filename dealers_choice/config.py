"""Table configuration."""
from __future__ import annotations
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from dealers_choice.core.wilds import WILD_OPTION_IDS, parse_wild_option

VARIANT_IDS = ("five_card_draw", "seven_card_stud", "texas_holdem")


class TableConfig(BaseModel):
    """Settings consumed by a table. Validated once, at creation."""

    starting_stack: int = Field(default=1000, ge=1)
    ante: int = Field(default=1, ge=0)
    small_blind: int = Field(default=1, ge=1)
    big_blind: int = Field(default=2, ge=1)
    min_bet: int = Field(default=5, ge=1)
    max_seats: int = Field(default=6, ge=2, le=6)
    variant_lock: Optional[str] = None
    wild_options: List[str] = Field(default_factory=lambda: list(WILD_OPTION_IDS))
    default_wilds: List[str] = Field(default_factory=list)
    last_card_down: bool = True
    bot_delay_min: float = Field(default=0.8, ge=0)
    bot_delay_max: float = Field(default=2.0, ge=0)
    hand_pause: float = Field(default=3.0, ge=0)
    auto_advance: bool = True

    @field_validator("variant_lock")
    @classmethod
    def _known_variant(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in VARIANT_IDS:
            raise ValueError(f"Unknown variant: {v}")
        return v

    @field_validator("wild_options", "default_wilds")
    @classmethod
    def _known_wilds(cls, v: List[str]) -> List[str]:
        for option in v:
            parse_wild_option(option)
        return v

    @model_validator(mode="after")
    def _consistent(self) -> "TableConfig":
        if self.big_blind < self.small_blind:
            raise ValueError("big_blind must be at least small_blind")
        if self.bot_delay_max < self.bot_delay_min:
            raise ValueError("bot_delay_max must be at least bot_delay_min")
        not_offered = [w for w in self.default_wilds if w not in self.wild_options]
        if not_offered:
            raise ValueError(f"default_wilds not in wild_options: {', '.join(not_offered)}")
        return self
