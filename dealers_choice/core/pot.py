"""Pot and side pot management."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, List, Set, Tuple


class PotInvariantError(AssertionError):
    """Pot accounting no longer adds up. Never caused by player input."""


@dataclass
class SidePot:
    amount: int
    eligible_player_ids: List[str]

    def to_dict(self) -> dict:
        return {"amount": self.amount, "eligible": list(self.eligible_player_ids)}

    def __repr__(self) -> str:
        return f"SidePot(amount={self.amount}, eligible={self.eligible_player_ids})"


class PotManager:
    """
    Tracks per-seat contributions for one hand and computes side pots.

    Usage:
        pm = PotManager()
        pm.set_players(["p1", "p2", "p3"])           # seat order
        pm.add_contribution("p1", 50, is_all_in=True)
        pm.record_fold("p3")
        pots = pm.calculate_side_pots()               # at showdown
    """

    def __init__(self) -> None:
        # contributions[player_id] = total chips contributed this hand
        self._contributions: Dict[str, int] = {}
        self._all_in: Set[str] = set()
        self._folded: Set[str] = set()
        self._total: int = 0

    def reset(self) -> None:
        self._contributions.clear()
        self._all_in.clear()
        self._folded.clear()
        self._total = 0

    def set_players(self, player_ids: Iterable[str]) -> None:
        """Start a hand for these seats; order is kept for eligibility lists."""
        self.reset()
        for pid in player_ids:
            self._contributions[pid] = 0

    @property
    def total(self) -> int:
        return self._total

    def add_contribution(self, player_id: str, amount: int, is_all_in: bool = False) -> None:
        """Add chips from a player to the pot."""
        if amount < 0:
            raise ValueError(f"Contribution cannot be negative: {amount}")
        self._contributions[player_id] = self._contributions.get(player_id, 0) + amount
        self._total += amount
        if is_all_in:
            self._all_in.add(player_id)

    def record_all_in(self, player_id: str) -> None:
        self._all_in.add(player_id)

    def record_fold(self, player_id: str) -> None:
        self._folded.add(player_id)

    def get_contribution(self, player_id: str) -> int:
        return self._contributions.get(player_id, 0)

    def contributions_snapshot(self) -> Dict[str, int]:
        return dict(self._contributions)

    def all_in_levels(self) -> List[int]:
        """Distinct contribution levels of all-in seats still in the hand."""
        return sorted({
            self._contributions[pid] for pid in self._all_in
            if pid not in self._folded and self._contributions.get(pid, 0) > 0
        })

    def calculate_side_pots(self) -> List[SidePot]:
        """
        Split the contributions into pots, smallest all-in level first.

        Each level pot collects (level - previous level) from every seat that
        put in at least that much (less from seats that put in less), and is
        contested by the non-folded seats that reached the level. Whatever was
        put in above the highest level forms the last pot. Chips nobody can
        contest are merged into the previous pot.
        """
        contributors = [(pid, amt) for pid, amt in self._contributions.items() if amt > 0]
        if not contributors:
            return []

        pots: List[SidePot] = []
        prev_level = 0
        for level in self.all_in_levels():
            amount = 0
            eligible: List[str] = []
            for pid, contributed in contributors:
                amount += max(0, min(contributed, level) - prev_level)
                if contributed >= level and pid not in self._folded:
                    eligible.append(pid)
            if amount > 0:
                pots.append(SidePot(amount=amount, eligible_player_ids=eligible))
            prev_level = level

        remainder = 0
        remainder_eligible: List[str] = []
        for pid, contributed in contributors:
            excess = contributed - prev_level
            if excess > 0:
                remainder += excess
                if pid not in self._folded:
                    remainder_eligible.append(pid)
        if remainder > 0:
            if remainder_eligible or not pots:
                if not remainder_eligible:
                    remainder_eligible = [pid for pid in self._contributions if pid not in self._folded]
                pots.append(SidePot(amount=remainder, eligible_player_ids=remainder_eligible))
            else:
                pots[-1].amount += remainder

        self._check(pots)
        return pots

    def _check(self, pots: List[SidePot]) -> None:
        allocated = sum(p.amount for p in pots)
        if allocated != self._total:
            raise PotInvariantError(
                f"Side pots hold {allocated} chips but {self._total} were contributed"
            )


def split_pot(amount: int, winner_ids: List[str]) -> List[Tuple[str, int]]:
    """
    Divide a pot evenly; the odd chips go to the first listed winner.
    """
    if not winner_ids:
        raise ValueError("split_pot requires at least one winner")
    share, remainder = divmod(amount, len(winner_ids))
    return [(pid, share + (remainder if i == 0 else 0)) for i, pid in enumerate(winner_ids)]
