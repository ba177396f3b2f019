"""Card and table factories shared by the test modules."""
from typing import List, Optional

from dealers_choice.config import TableConfig
from dealers_choice.core.card import Card, Deck, parse_cards
from dealers_choice.game import engine
from dealers_choice.game.engine import PokerTable
from dealers_choice.game.game_state import GameState, PlayerState
from dealers_choice.game.player import Player


def cards(text: str, face_down: bool = False) -> List[Card]:
    return [c.turned(face_down) for c in parse_cards(text)]


def make_state(num_players: int = 3, chips: int = 1000, **kwargs) -> GameState:
    state = GameState(game_id="test", config=TableConfig(), **kwargs)
    for i in range(num_players):
        state.players.append(PlayerState(player_id=f"p{i}", name=f"Player {i}", chips=chips, seat=i))
    return state


class StackedDeck(Deck):
    """A deck that deals a fixed sequence of cards, top first."""

    def __init__(self, preset: List[Card], include_jokers: bool = False) -> None:
        self._preset = list(preset)
        super().__init__(include_jokers=include_jokers)

    def reset(self) -> None:
        self._cards = [c.turned(False) for c in self._preset]

    def shuffle(self) -> None:
        pass


def stack_deck(monkeypatch, text: str) -> None:
    """Make every hand the engine starts deal `text` in order."""
    preset = parse_cards(text)
    monkeypatch.setattr(
        engine, "Deck",
        lambda include_jokers=False, rng=None: StackedDeck(preset, include_jokers),
    )


def make_table(
    num_players: int = 2,
    chips: Optional[int] = None,
    **config,
) -> PokerTable:
    table = PokerTable("t1", TableConfig(**config))
    for i in range(num_players):
        table.add_player(Player(player_id=f"p{i}", name=f"Player {i}", chips=chips))
    return table
