"""
Live socket registry for dealer's choice tables, keyed by game then seat.

Every outgoing message is a ServerEvent envelope; broadcasts are
personalized so a seat only ever receives its own view of the table.
"""
from __future__ import annotations
import asyncio
import logging
from typing import Callable, Dict, List, Optional

from fastapi import WebSocket

from dealers_choice.models.events import ServerEvent

logger = logging.getLogger(__name__)

PayloadFactory = Callable[[str], Optional[dict]]


class ConnectionManager:
    def __init__(self) -> None:
        # game_id → { player_id → WebSocket }
        self._connections: Dict[str, Dict[str, WebSocket]] = {}

    async def connect(self, game_id: str, player_id: str, websocket: WebSocket) -> None:
        await websocket.accept()
        previous = self._connections.setdefault(game_id, {}).get(player_id)
        self._connections[game_id][player_id] = websocket
        if previous is not None and previous is not websocket:
            logger.info(f"Replacing connection for {player_id} in game {game_id}")
        logger.info(f"Connected: {player_id} in game {game_id}")

    def disconnect(self, game_id: str, player_id: str) -> None:
        players = self._connections.get(game_id)
        if players is None:
            return
        players.pop(player_id, None)
        if not players:
            del self._connections[game_id]
        logger.info(f"Disconnected: {player_id} from game {game_id}")

    async def send_personal(self, game_id: str, player_id: str, event_type: str, payload: dict) -> None:
        """Deliver one event to a single seat, if that seat is connected."""
        ws = self._connections.get(game_id, {}).get(player_id)
        if ws is not None:
            await self._safe_send(ws, game_id, player_id, event_type, payload)

    async def broadcast_personalized(self, game_id: str, event_type: str, payload_factory: PayloadFactory) -> None:
        """
        Fan an event out to every socket at the table.

        Each seat gets payload_factory(player_id); seats for which the
        factory yields None receive nothing.
        """
        tasks = []
        for player_id, ws in list(self._connections.get(game_id, {}).items()):
            payload = payload_factory(player_id)
            if payload is None:
                continue
            tasks.append(self._safe_send(ws, game_id, player_id, event_type, payload))
        if tasks:
            await asyncio.gather(*tasks)

    def broadcaster(self) -> Callable:
        """A PokerGame broadcast callback backed by this registry."""
        async def broadcast_cb(game_id: str, event_type: str, payload_factory: PayloadFactory) -> None:
            await self.broadcast_personalized(game_id, event_type, payload_factory)
        return broadcast_cb

    async def close_game(self, game_id: str, reason: str = "Game closed") -> None:
        """Close every socket attached to a game."""
        for player_id, ws in list(self._connections.pop(game_id, {}).items()):
            try:
                await ws.close(code=4000, reason=reason)
            except Exception as e:
                logger.warning(f"Closing socket for {player_id} failed: {e}")

    async def _safe_send(self, ws: WebSocket, game_id: str, player_id: str, event_type: str, payload: dict) -> None:
        message = ServerEvent(type=event_type, payload=payload).model_dump()
        try:
            await ws.send_json(message)
        except Exception as e:
            logger.warning(f"WS send failed {player_id}: {e}")
            self.disconnect(game_id, player_id)

    def is_connected(self, game_id: str, player_id: str) -> bool:
        return player_id in self._connections.get(game_id, {})

    def connected_players(self, game_id: str) -> List[str]:
        return list(self._connections.get(game_id, {}))

    def player_count(self, game_id: str) -> int:
        return len(self._connections.get(game_id, {}))


# Shared by the REST routes and the socket endpoint
connection_manager = ConnectionManager()
