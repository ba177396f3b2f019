"""Pydantic models for WebSocket events."""
from __future__ import annotations
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from dealers_choice.game.actions import PlayerAction


class ClientAction(BaseModel):
    """Client → Server: player action."""
    type: str  # "action" | "chat" | "ping"
    payload: Dict[str, Any] = Field(default_factory=dict)


class ActionPayload(BaseModel):
    action: str  # any ActionType value
    amount: Optional[int] = 0
    variant: Optional[str] = None
    wilds: List[str] = Field(default_factory=list)
    last_card_down: Optional[bool] = None
    indices: List[int] = Field(default_factory=list)

    def to_action(self) -> PlayerAction:
        return PlayerAction.from_dict(self.model_dump())


class ChatPayload(BaseModel):
    message: str = ""


class ServerEvent(BaseModel):
    """Server → Client event envelope."""
    type: str
    payload: Dict[str, Any]
