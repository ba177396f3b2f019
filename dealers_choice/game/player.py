"""Player roster entry, persistent across hands."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

BOT_DIFFICULTIES = ("easy", "medium", "hard")


@dataclass
class Player:
    """A seat request: who sits down, with how many chips, human or bot."""
    player_id: str
    name: str
    chips: Optional[int] = None            # None -> table's starting stack
    is_bot: bool = False
    bot_difficulty: Optional[str] = None   # "easy" | "medium" | "hard"
    is_connected: bool = True

    def __post_init__(self) -> None:
        if self.is_bot and self.bot_difficulty is None:
            self.bot_difficulty = "medium"
        if self.bot_difficulty is not None and self.bot_difficulty not in BOT_DIFFICULTIES:
            raise ValueError(f"Unknown bot difficulty: {self.bot_difficulty}")

    def to_dict(self) -> dict:
        return {
            "player_id": self.player_id,
            "name": self.name,
            "chips": self.chips,
            "is_bot": self.is_bot,
            "bot_difficulty": self.bot_difficulty,
            "is_connected": self.is_connected,
        }
