"""In-memory PokerGame store."""
from __future__ import annotations
import uuid
from typing import Dict, List, Optional

from dealers_choice.config import TableConfig
from dealers_choice.game.game import PokerGame


class GameManager:
    def __init__(self) -> None:
        self._games: Dict[str, PokerGame] = {}

    def create_game(self, config: Optional[TableConfig] = None) -> PokerGame:
        game_id = str(uuid.uuid4())[:8]
        game = PokerGame(game_id=game_id, config=config)
        self._games[game_id] = game
        return game

    def get_game(self, game_id: str) -> Optional[PokerGame]:
        return self._games.get(game_id)

    def list_games(self) -> List[dict]:
        result = []
        for gid, game in self._games.items():
            state = game.state
            result.append({
                "game_id": gid,
                "phase": state.phase.value,
                "variant": state.variant.value if state.variant else None,
                "variant_lock": game.config.variant_lock,
                "players": len(state.seated_players),
                "max_seats": game.config.max_seats,
                "hand_number": state.hand_number,
                "game_over": state.game_over,
            })
        return result

    async def delete_game(self, game_id: str) -> bool:
        game = self._games.pop(game_id, None)
        if game is None:
            return False
        await game.stop()
        return True


# Global singleton
game_manager = GameManager()
