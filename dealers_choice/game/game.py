"""
PokerGame — async front for one PokerTable.

All mutations go through one asyncio.Lock. Bot turns and the automatic
start of the next hand are scheduled as tasks after a delay; a task
that wakes up after the table moved on does nothing.
"""
from __future__ import annotations
import asyncio
import logging
import random
from typing import Callable, Dict, Optional, Set

from dealers_choice.config import TableConfig
from dealers_choice.game.actions import ActionResult, HandAbortedError, PlayerAction
from dealers_choice.game.engine import PokerTable
from dealers_choice.game.game_state import GameState
from dealers_choice.game.player import Player

logger = logging.getLogger(__name__)


class PokerGame:
    """
    Manages a dealer's choice poker session.

    Broadcast callback receives (game_id, event_type, payload_factory).
    payload_factory is a callable(player_id) → dict | None so each player can
    receive a personalized payload (hiding opponents' concealed cards).
    """

    def __init__(
        self,
        game_id: str,
        config: Optional[TableConfig] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config or TableConfig()
        self.table = PokerTable(game_id, self.config, rng)
        self._rng = rng or random.Random()
        self._players: Dict[str, Player] = {}
        self._lock = asyncio.Lock()
        self._broadcast_cb: Optional[Callable] = None
        self._turn = 0
        self._tasks: Set[asyncio.Task] = set()
        self._started = False

    @property
    def game_id(self) -> str:
        return self.table.game_id

    @property
    def state(self) -> GameState:
        return self.table.state

    @property
    def players(self) -> Dict[str, Player]:
        return dict(self._players)

    # ------------------------------------------------------------------
    # Player management
    # ------------------------------------------------------------------

    def add_player(self, player: Player) -> bool:
        """Add a player to the game. Returns False if seat unavailable."""
        if not self.table.add_player(player):
            return False
        self._players[player.player_id] = player
        if self._started:
            self._schedule_next()
        return True

    async def remove_player(self, player_id: str) -> ActionResult:
        """Remove a player (folded if mid-hand)."""
        async with self._lock:
            try:
                result = self.table.remove_player(player_id)
            except HandAbortedError as exc:
                await self._report_abort(exc)
                return ActionResult(valid=False, message=str(exc), hand_over=True)
            if player_id in self._players:
                self._players[player_id].is_connected = False
            if result.valid:
                await self._publish(player_id, None, result)
            return result

    def set_broadcast(self, cb: Callable) -> None:
        """Set broadcast callback: cb(game_id, event_type, payload_factory)."""
        self._broadcast_cb = cb

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Announce the table and kick off whatever it is waiting for."""
        self._started = True
        await self._broadcast("game_state", self._state_payload_factory)
        self._schedule_next()

    async def stop(self) -> None:
        self._started = False
        self._turn += 1
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()

    # ------------------------------------------------------------------
    # Action submission
    # ------------------------------------------------------------------

    async def submit_action(self, player_id: str, action: PlayerAction) -> ActionResult:
        """
        Called externally (REST or WebSocket handler) to submit a player action.

        Raises HandAbortedError after the table has refunded the hand.
        """
        async with self._lock:
            return await self._apply(player_id, action)

    async def _apply(self, player_id: str, action: PlayerAction) -> ActionResult:
        try:
            result = self.table.submit(player_id, action)
        except HandAbortedError as exc:
            await self._report_abort(exc)
            raise
        if result.valid:
            await self._publish(player_id, action, result)
        else:
            await self._broadcast(
                "action_rejected",
                lambda pid, _p=player_id, _r=result: _r.to_dict() if pid == _p else None,
            )
        return result

    async def _publish(self, player_id: str, action: Optional[PlayerAction], result: ActionResult) -> None:
        ps = self.table.state.get_player(player_id)
        name = ps.name if ps else player_id
        await self._broadcast("action_taken", lambda pid, _a=action, _r=result: {
            "player_id": player_id,
            "name": name,
            "action": _a.to_dict() if _a else None,
            "result": _r.to_dict(),
        })
        await self._broadcast("game_state", self._state_payload_factory)
        if result.hand_over and self.table.last_result is not None:
            summary = dict(self.table.last_result)
            await self._broadcast("hand_result", lambda pid, _s=summary: _s)
        if self.state.game_over:
            await self._announce_game_over()
        self._schedule_next()

    async def _report_abort(self, exc: HandAbortedError) -> None:
        logger.error(f"Game {self.game_id}: {exc}")
        await self._broadcast("hand_result", lambda pid, _m=str(exc): {"aborted": True, "message": _m})
        await self._broadcast("game_state", self._state_payload_factory)
        self._schedule_next()

    async def _announce_game_over(self) -> None:
        winner = self.state.get_player(self.state.winner_id) if self.state.winner_id else None
        payload = {
            "winner_id": winner.player_id if winner else None,
            "winner_name": winner.name if winner else "",
            "winner_chips": winner.chips if winner else 0,
        }
        await self._broadcast("game_over", lambda pid: payload)

    # ------------------------------------------------------------------
    # Bots and auto-advance
    # ------------------------------------------------------------------

    def _schedule_next(self) -> None:
        """Schedule whatever should happen next without a human."""
        self._turn += 1
        if not self._started:
            return
        table = self.table
        awaiting = table.awaiting
        if awaiting in (None, "players"):
            return

        if awaiting in ("buy_in", "next_hand"):
            if not self.config.auto_advance:
                return
            actor = table.dealer_player_id or self.state.seated_players[0].player_id
            self._spawn(self._run_later(self.config.hand_pause, actor, self._turn, auto=True))
            return

        if awaiting in ("choose_variant", "choose_wilds"):
            actor = table.dealer_player_id
        else:
            actor = table.current_player_id
        player = self._players.get(actor) if actor else None
        if player is None or not player.is_bot:
            return
        delay = self._rng.uniform(self.config.bot_delay_min, self.config.bot_delay_max)
        self._spawn(self._run_later(delay, actor, self._turn))

    def _spawn(self, coro) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_later(self, delay: float, player_id: str, turn: int, auto: bool = False) -> None:
        await asyncio.sleep(delay)
        async with self._lock:
            if turn != self._turn:
                return
            if auto:
                awaiting = self.table.awaiting
                if awaiting == "buy_in":
                    action = PlayerAction.buy_in()
                elif awaiting == "next_hand":
                    action = PlayerAction.next_hand()
                else:
                    return
            else:
                action = self.table.bot_action(player_id)
                if action is None:
                    return
            try:
                result = await self._apply(player_id, action)
            except HandAbortedError:
                return
            if not result.valid:
                logger.warning(f"Game {self.game_id}: bot {player_id} action rejected: {result.message}")
                await self._bot_fallback(player_id)

    async def _bot_fallback(self, player_id: str) -> None:
        """Check, stand pat or fold, whichever the table accepts."""
        for action in (PlayerAction.check(), PlayerAction.stand_pat(), PlayerAction.fold()):
            result = await self._apply(player_id, action)
            if result.valid:
                return

    # ------------------------------------------------------------------
    # Broadcast helpers
    # ------------------------------------------------------------------

    async def _broadcast(self, event_type: str, payload_factory: Callable) -> None:
        """Send an event to all players via the broadcast callback."""
        if self._broadcast_cb:
            await self._broadcast_cb(self.game_id, event_type, payload_factory)

    def _state_payload_factory(self, player_id: str) -> dict:
        """Build a game_state payload personalized for player_id."""
        known = self.state.get_player(player_id) is not None
        return self.table.get_state(player_id if known else None).model_dump()

    # ------------------------------------------------------------------
    # Public accessors
    # ------------------------------------------------------------------

    def get_state_for_player(self, player_id: Optional[str]) -> dict:
        return self._state_payload_factory(player_id) if player_id else self.table.get_state(None).model_dump()
