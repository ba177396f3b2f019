"""WebSocket endpoint for real-time game events."""
from __future__ import annotations
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from dealers_choice.game.actions import HandAbortedError, IllegalActionError
from dealers_choice.managers.connection_manager import connection_manager
from dealers_choice.managers.game_manager import game_manager
from dealers_choice.models.events import ActionPayload, ChatPayload, ClientAction

logger = logging.getLogger(__name__)
ws_router = APIRouter()


@ws_router.websocket("/ws/{game_id}/{player_id}")
async def websocket_endpoint(websocket: WebSocket, game_id: str, player_id: str):
    game = game_manager.get_game(game_id)
    if not game:
        await websocket.close(code=4004, reason="Game not found")
        return

    await connection_manager.connect(game_id, player_id, websocket)

    # Send current game state immediately on connect
    state_payload = game.get_state_for_player(player_id)
    await connection_manager.send_personal(game_id, player_id, "game_state", state_payload)

    try:
        while True:
            data = await websocket.receive_json()
            try:
                msg = ClientAction(**data)
            except (ValidationError, TypeError):
                await connection_manager.send_personal(
                    game_id, player_id, "action_rejected", {"valid": False, "message": "Malformed message"},
                )
                continue

            if msg.type == "action":
                try:
                    action = ActionPayload(**msg.payload).to_action()
                    await game.submit_action(player_id, action)
                except (ValidationError, IllegalActionError) as e:
                    await connection_manager.send_personal(
                        game_id, player_id, "action_rejected", {"valid": False, "message": str(e)},
                    )
                except HandAbortedError as e:
                    logger.warning(f"Hand aborted in {game_id} after action from {player_id}: {e}")

            elif msg.type == "chat":
                chat = ChatPayload(**msg.payload)
                message = chat.message[:200]
                await connection_manager.broadcast_personalized(
                    game_id,
                    "chat",
                    lambda pid, _pid=player_id, _msg=message: {
                        "player_id": _pid,
                        "message": _msg,
                    },
                )

            elif msg.type == "ping":
                await connection_manager.send_personal(game_id, player_id, "pong", {})

    except WebSocketDisconnect:
        connection_manager.disconnect(game_id, player_id)
        if game.state.get_player(player_id) is not None:
            await game.remove_player(player_id)
        logger.info(f"Player {player_id} disconnected from game {game_id}")
    except Exception as e:
        logger.error(f"WebSocket error for {player_id} in {game_id}: {e}")
        connection_manager.disconnect(game_id, player_id)
