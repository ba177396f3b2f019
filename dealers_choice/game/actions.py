"""Player actions, action results and the engine's error types."""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class IllegalActionError(ValueError):
    """An action that is not legal for the seat or phase. Nothing was changed."""


class HandAbortedError(RuntimeError):
    """The hand could not continue; contributions were refunded."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause


class ActionType(Enum):
    CHECK = "check"
    CALL = "call"
    RAISE = "raise"
    FOLD = "fold"
    ALL_IN = "all_in"
    CHOOSE_VARIANT = "choose_variant"
    CHOOSE_WILDS = "choose_wilds"
    DISCARD = "discard"
    STAND_PAT = "stand_pat"
    BUY_IN = "buy_in"
    NEXT_HAND = "next_hand"


BETTING_ACTIONS = frozenset({
    ActionType.CHECK, ActionType.CALL, ActionType.RAISE, ActionType.FOLD, ActionType.ALL_IN,
})


@dataclass(frozen=True)
class PlayerAction:
    """
    One request from a seat.

    amount    -- raise increment over the amount owed (RAISE only)
    variant   -- variant id (CHOOSE_VARIANT)
    wilds     -- wild option ids (CHOOSE_WILDS)
    last_card_down -- stud 7th street face down (CHOOSE_WILDS, optional)
    indices   -- card positions to throw away (DISCARD)
    """
    type: ActionType
    amount: int = 0
    variant: Optional[str] = None
    wilds: Tuple[str, ...] = ()
    last_card_down: Optional[bool] = None
    indices: Tuple[int, ...] = ()

    @classmethod
    def check(cls) -> "PlayerAction":
        return cls(ActionType.CHECK)

    @classmethod
    def call(cls) -> "PlayerAction":
        return cls(ActionType.CALL)

    @classmethod
    def raise_by(cls, amount: int) -> "PlayerAction":
        return cls(ActionType.RAISE, amount=amount)

    @classmethod
    def fold(cls) -> "PlayerAction":
        return cls(ActionType.FOLD)

    @classmethod
    def all_in(cls) -> "PlayerAction":
        return cls(ActionType.ALL_IN)

    @classmethod
    def choose_variant(cls, variant: str) -> "PlayerAction":
        return cls(ActionType.CHOOSE_VARIANT, variant=variant)

    @classmethod
    def choose_wilds(cls, wilds, last_card_down: Optional[bool] = None) -> "PlayerAction":
        return cls(ActionType.CHOOSE_WILDS, wilds=tuple(wilds), last_card_down=last_card_down)

    @classmethod
    def discard(cls, indices) -> "PlayerAction":
        return cls(ActionType.DISCARD, indices=tuple(indices))

    @classmethod
    def stand_pat(cls) -> "PlayerAction":
        return cls(ActionType.STAND_PAT)

    @classmethod
    def buy_in(cls) -> "PlayerAction":
        return cls(ActionType.BUY_IN)

    @classmethod
    def next_hand(cls) -> "PlayerAction":
        return cls(ActionType.NEXT_HAND)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlayerAction":
        """Build an action from a transport payload such as {"action": "raise", "amount": 10}."""
        try:
            action_type = ActionType(data.get("action"))
        except ValueError:
            raise IllegalActionError(f"Unknown action: {data.get('action')}") from None
        return cls(
            type=action_type,
            amount=int(data.get("amount") or 0),
            variant=data.get("variant"),
            wilds=tuple(data.get("wilds") or ()),
            last_card_down=data.get("last_card_down"),
            indices=tuple(int(i) for i in (data.get("indices") or ())),
        )

    def to_dict(self) -> dict:
        d: dict = {"action": self.type.value}
        if self.type is ActionType.RAISE:
            d["amount"] = self.amount
        if self.variant is not None:
            d["variant"] = self.variant
        if self.type is ActionType.CHOOSE_WILDS:
            d["wilds"] = list(self.wilds)
            if self.last_card_down is not None:
                d["last_card_down"] = self.last_card_down
        if self.type is ActionType.DISCARD:
            d["indices"] = list(self.indices)
        return d


@dataclass
class ActionResult:
    valid: bool
    action: Optional[ActionType] = None
    message: str = ""
    amount: int = 0                  # chips moved into the pot by this action
    cards_drawn: int = 0
    pot_awarded: Dict[str, int] = field(default_factory=dict)
    hand_over: bool = False

    @classmethod
    def rejected(cls, action: Optional[ActionType], message: str) -> "ActionResult":
        return cls(valid=False, action=action, message=message)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "action": self.action.value if self.action else None,
            "message": self.message,
            "amount": self.amount,
            "cards_drawn": self.cards_drawn,
            "pot_awarded": dict(self.pot_awarded),
            "hand_over": self.hand_over,
        }


@dataclass
class ValidActions:
    can_check: bool = False
    can_call: bool = False
    call_amount: int = 0        # chips needed to call, capped at the stack
    min_raise: int = 0          # smallest legal raise increment
    max_raise: int = 0          # largest legal raise increment (stack minus call)
    can_raise: bool = False
    can_fold: bool = False
    can_all_in: bool = False
    player_stack: int = 0

    def to_dict(self) -> dict:
        return {
            "can_check": self.can_check,
            "can_call": self.can_call,
            "call_amount": self.call_amount,
            "min_raise": self.min_raise,
            "max_raise": self.max_raise,
            "can_raise": self.can_raise,
            "can_fold": self.can_fold,
            "can_all_in": self.can_all_in,
            "player_stack": self.player_stack,
        }

    def names(self) -> List[str]:
        names = []
        if self.can_check:
            names.append("check")
        if self.can_call:
            names.append("call")
        if self.can_raise:
            names.append("raise")
        if self.can_fold:
            names.append("fold")
        if self.can_all_in:
            names.append("all_in")
        return names


NO_ACTIONS = ValidActions()
