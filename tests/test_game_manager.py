"""Unit tests for game_manager.py — GameManager CRUD."""
import asyncio

from dealers_choice.config import TableConfig
from dealers_choice.game.player import Player
from dealers_choice.managers.game_manager import GameManager


class TestGameManager:
    def test_create_game_defaults(self):
        gm = GameManager()
        game = gm.create_game()
        assert game.config.starting_stack == 1000
        assert game.config.variant_lock is None
        assert len(game.game_id) == 8

    def test_create_game_custom_config(self):
        gm = GameManager()
        game = gm.create_game(TableConfig(variant_lock="texas_holdem", max_seats=4, ante=0))
        assert game.config.variant_lock == "texas_holdem"
        assert game.config.max_seats == 4

    def test_get_game(self):
        gm = GameManager()
        game = gm.create_game()
        assert gm.get_game(game.game_id) is game

    def test_get_nonexistent(self):
        assert GameManager().get_game("nope") is None

    def test_ids_are_unique(self):
        gm = GameManager()
        ids = {gm.create_game().game_id for _ in range(20)}
        assert len(ids) == 20

    def test_list_games(self):
        gm = GameManager()
        game = gm.create_game(TableConfig(variant_lock="seven_card_stud"))
        game.add_player(Player("p0", "Alice"))
        listing = gm.list_games()
        assert listing == [{
            "game_id": game.game_id,
            "phase": "ante",
            "variant": "seven_card_stud",
            "variant_lock": "seven_card_stud",
            "players": 1,
            "max_seats": 6,
            "hand_number": 0,
            "game_over": False,
        }]

    def test_delete_game(self):
        async def _run():
            gm = GameManager()
            game = gm.create_game()
            assert await gm.delete_game(game.game_id) is True
            assert gm.get_game(game.game_id) is None
            assert await gm.delete_game(game.game_id) is False
        asyncio.run(_run())
