"""REST API routes: game creation, joining, snapshots and action submission."""
from __future__ import annotations
import asyncio
import uuid
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException
from pydantic import ValidationError

from dealers_choice.game.actions import HandAbortedError, IllegalActionError
from dealers_choice.game.game import PokerGame
from dealers_choice.game.player import Player
from dealers_choice.managers.connection_manager import connection_manager
from dealers_choice.managers.game_manager import game_manager
from dealers_choice.models.requests import ActionRequest, CreateGameRequest, JoinGameRequest

router = APIRouter()


def _get_game(game_id: str) -> PokerGame:
    game = game_manager.get_game(game_id)
    if not game:
        raise HTTPException(status_code=404, detail="Game not found")
    return game


@router.post("/api/games")
async def create_game(req: CreateGameRequest) -> Dict[str, Any]:
    try:
        config = req.to_config()
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e.errors()[0]["msg"]))

    game = game_manager.create_game(config)

    for i in range(req.num_bots):
        bot = Player(
            player_id=str(uuid.uuid4())[:8],
            name=f"Bot {i + 1}",
            is_bot=True,
            bot_difficulty=req.bot_difficulty,
        )
        game.add_player(bot)

    game.set_broadcast(connection_manager.broadcaster())
    asyncio.create_task(game.start())

    return {
        "game_id": game.game_id,
        "variant_lock": config.variant_lock,
        "starting_stack": config.starting_stack,
        "max_seats": config.max_seats,
        "num_bots": req.num_bots,
        "players": [p.to_dict() for p in game.players.values()],
    }


@router.get("/api/games")
async def list_games() -> Dict[str, Any]:
    return {"games": game_manager.list_games()}


@router.post("/api/games/{game_id}/join")
async def join_game(game_id: str, req: JoinGameRequest) -> Dict[str, Any]:
    game = _get_game(game_id)

    if len(game.state.seated_players) >= game.config.max_seats:
        raise HTTPException(status_code=400, detail="Game is full")

    player_id = str(uuid.uuid4())[:8]
    player = Player(player_id=player_id, name=req.player_name, chips=req.buy_in)
    if not game.add_player(player):
        raise HTTPException(status_code=400, detail="Could not join game")

    return {
        "player_id": player_id,
        "game_id": game_id,
        "name": req.player_name,
        "chips": game.state.get_player(player_id).chips,
    }


@router.get("/api/games/{game_id}/state")
async def get_game_state(game_id: str, player_id: Optional[str] = None) -> Dict[str, Any]:
    game = _get_game(game_id)
    return game.get_state_for_player(player_id)


@router.post("/api/games/{game_id}/actions")
async def submit_action(game_id: str, req: ActionRequest) -> Dict[str, Any]:
    game = _get_game(game_id)
    try:
        action = req.to_action()
        result = await game.submit_action(req.player_id, action)
    except IllegalActionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except HandAbortedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if not result.valid:
        raise HTTPException(status_code=400, detail=result.message)
    return result.to_dict()


@router.delete("/api/games/{game_id}")
async def delete_game(game_id: str) -> Dict[str, Any]:
    if not await game_manager.delete_game(game_id):
        raise HTTPException(status_code=404, detail="Game not found")
    await connection_manager.close_game(game_id)
    return {"deleted": game_id}
