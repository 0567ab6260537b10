"""
Shared fixtures for the RichUp test suite.
"""

import json
import sys
from pathlib import Path

import pytest
import websockets

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from server.game_engine import Dice, DiceResult, Game, create_game


class ScriptedDice(Dice):
    """Dice that return a fixed sequence of rolls."""

    def __init__(self, rolls=()):
        super().__init__(seed=0)
        self.rolls = list(rolls)

    def push(self, *rolls) -> None:
        self.rolls.extend(rolls)

    def roll(self) -> DiceResult:
        if not self.rolls:
            raise AssertionError("ScriptedDice ran out of rolls")
        die1, die2 = self.rolls.pop(0)
        return DiceResult(die1, die2)


class MockWebSocket:
    """Mock WebSocket for testing without real connections."""

    def __init__(self, id: str):
        self.id = id
        self.sent_messages = []
        self.closed = False

    async def send(self, data: str) -> None:
        if self.closed:
            raise websockets.ConnectionClosed(None, None)
        self.sent_messages.append(data)

    async def close(self) -> None:
        self.closed = True

    def get_messages(self) -> list[dict]:
        return [json.loads(m) for m in self.sent_messages]

    def kinds(self) -> list[str]:
        return [m["kind"] for m in self.get_messages()]

    def clear_messages(self) -> None:
        self.sent_messages.clear()


def give(game: Game, player_id: str, *tile_ids: str) -> None:
    """Hand tiles straight to a player, bypassing the buy flow."""
    for tile_id in tile_ids:
        game.board.get_tile(tile_id).owner = player_id
        game.players[player_id].add_property(tile_id)


@pytest.fixture
def dice() -> ScriptedDice:
    return ScriptedDice()


@pytest.fixture
def game(dice) -> Game:
    """Two-player game: Alice (p1) to move, Bob (p2)."""
    return create_game(["Alice", "Bob"], dice=dice)


@pytest.fixture
def game3(dice) -> Game:
    """Three-player game: Alice (p1), Bob (p2), Cara (p3)."""
    return create_game(["Alice", "Bob", "Cara"], dice=dice)
