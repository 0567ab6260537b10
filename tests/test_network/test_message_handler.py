"""
Tests for message routing between connections and games.

Run from project root: python -m pytest tests/test_network -v
"""

import asyncio
import json
import re
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from conftest import MockWebSocket, ScriptedDice, give
from server.network.connection_manager import ConnectionManager
from server.network.game_manager import GameManager
from server.network.grace_timers import GraceTimers
from server.network.message_handler import MessageHandler
from shared.enums import GamePhase, MessageType
from shared.protocol import (
    BuyPropertyRequest,
    DeclareBankruptcyRequest,
    EndTurnRequest,
    MortgagePropertyRequest,
    ReconnectRequest,
    RollDiceRequest,
    TradeOfferRequest,
    TradeRespondRequest,
    UnmortgagePropertyRequest,
    UpgradeHouseRequest,
)


class Relay:
    """A message handler wired to fresh managers."""

    def __init__(self, *rolls):
        async def on_expire(game_id: str, player_id: str) -> None:
            pass

        self.games = GameManager(dice_factory=lambda: ScriptedDice(rolls))
        self.connections = ConnectionManager()
        self.timers = GraceTimers(60, on_expire)
        self.handler = MessageHandler(self.games, self.connections, self.timers)

    def connect(self, name: str):
        return self.connections.register(MockWebSocket(name))

    async def send(self, conn, kind: str, **payload):
        raw = json.dumps({"kind": kind, "payload": payload})
        return await self.handler.handle_message(conn.connection_id, raw)

    async def request(self, conn, message):
        return await self.handler.handle_message(conn.connection_id, message.to_json())

    async def start_game(self):
        """Alice creates a game and Bob joins it."""
        alice, bob = self.connect("alice"), self.connect("bob")
        result = await self.send(alice, "CREATE_GAME", playerName="Alice")
        game_id = result.response.payload["gameId"]
        await self.send(bob, "JOIN_GAME", gameId=game_id, playerName="Bob")
        return game_id, self.games.get_game(game_id), alice, bob


# =============================================================================
# Malformed input
# =============================================================================

def test_malformed_frame_gets_error():
    async def run_tests():
        relay = Relay()
        conn = relay.connect("ws1")

        result = await relay.handler.handle_message(conn.connection_id, "{not json")

        assert result.response.kind == MessageType.ERROR
        assert result.broadcast_game_id is None

        result = await relay.send(conn, "CREATE_GAME", playerName=42)
        assert result.response.payload["message"] == "playerName is required"

        result = await relay.send(conn, "CREATE_GAME", playerName="Alice", startingCash="lots")
        assert result.response.payload["message"] == "startingCash must be an integer"

    asyncio.run(run_tests())


def test_unbound_connection_cannot_act():
    async def run_tests():
        relay = Relay()
        conn = relay.connect("ws1")

        result = await relay.request(conn, RollDiceRequest.create())

        assert result.response.payload["message"] == "You are not in a game"

    asyncio.run(run_tests())


def test_unexpected_errors_are_reported_as_internal():
    async def run_tests():
        relay = Relay()
        conn = relay.connect("ws1")

        def explode(*args, **kwargs):
            raise RuntimeError("boom")

        relay.games.create_game = explode
        result = await relay.send(conn, "CREATE_GAME", playerName="Alice")

        assert result.response.payload["message"] == "Internal error"

    asyncio.run(run_tests())


# =============================================================================
# Lobby
# =============================================================================

def test_create_game_binds_creator():
    async def run_tests():
        relay = Relay()
        conn = relay.connect("ws1")

        result = await relay.send(conn, "CREATE_GAME", playerName="Alice", startingCash=2000)

        payload = result.response.payload
        assert result.response.kind == MessageType.GAME_JOINED
        assert re.fullmatch(r"[A-Z0-9]{6}", payload["gameId"])
        assert payload["playerId"] == "p1"
        assert payload["state"]["players"]["p1"]["cash"] == 2000
        assert conn.game_id == payload["gameId"]
        assert conn.player_id == "p1"

        result = await relay.send(conn, "CREATE_GAME", playerName="Alice")
        assert result.response.payload["message"] == "You are already in a game"

    asyncio.run(run_tests())


def test_join_game_by_code():
    async def run_tests():
        relay = Relay()
        alice, bob = relay.connect("alice"), relay.connect("bob")
        result = await relay.send(alice, "CREATE_GAME", playerName="Alice")
        game_id = result.response.payload["gameId"]

        result = await relay.send(bob, "JOIN_GAME", gameId=game_id.lower(), playerName="Bob")

        assert result.response.kind == MessageType.GAME_JOINED
        assert result.response.payload["playerId"] == "p2"
        assert result.broadcast_game_id == game_id
        assert relay.games.get_game(game_id).players["p2"].cash == 1500

    asyncio.run(run_tests())


def test_join_unknown_or_full_game():
    async def run_tests():
        relay = Relay()
        conn = relay.connect("ws1")

        result = await relay.send(conn, "JOIN_GAME", gameId="ZZZZZZ", playerName="Bob")
        assert result.response.payload["message"] == "Game code not found"

        host = relay.connect("host")
        result = await relay.send(host, "CREATE_GAME", playerName="Host")
        game_id = result.response.payload["gameId"]
        for index in range(7):
            await relay.send(relay.connect(f"ws{index}"), "JOIN_GAME", gameId=game_id, playerName=f"P{index}")

        result = await relay.send(conn, "JOIN_GAME", gameId=game_id, playerName="Late")
        assert "full" in result.response.payload["message"]
        assert not conn.is_bound

    asyncio.run(run_tests())


def test_reconnect():
    async def run_tests():
        relay = Relay()
        game_id, game, alice, bob = await relay.start_game()
        relay.timers.start(game_id, "p2")

        fresh = relay.connect("bob-again")
        result = await relay.request(fresh, ReconnectRequest.create(game_id, "p2"))

        assert result.response.kind == MessageType.GAME_JOINED
        assert result.broadcast_game_id == game_id
        assert fresh.player_id == "p2"
        assert not relay.timers.is_pending(game_id, "p2")
        assert game.action_log[-1] == "Bob reconnected"

    asyncio.run(run_tests())


def test_reconnect_failures():
    async def run_tests():
        relay = Relay()
        game_id, game, alice, bob = await relay.start_game()
        conn = relay.connect("stranger")

        result = await relay.request(conn, ReconnectRequest.create("ZZZZZZ", "p1"))
        assert result.response.kind == MessageType.RECONNECT_FAILED

        result = await relay.request(conn, ReconnectRequest.create(game_id, "p7"))
        assert result.response.kind == MessageType.RECONNECT_FAILED

        game.declare_bankruptcy("p2")
        result = await relay.request(conn, ReconnectRequest.create(game_id, "p2"))
        assert result.response.kind == MessageType.RECONNECT_FAILED
        assert not conn.is_bound

    asyncio.run(run_tests())


# =============================================================================
# Game actions
# =============================================================================

def test_roll_out_of_turn_is_rejected_without_broadcast():
    async def run_tests():
        relay = Relay((1, 2))
        game_id, game, alice, bob = await relay.start_game()

        result = await relay.request(bob, RollDiceRequest.create())

        assert result.response.payload["message"] == "It's not your turn"
        assert result.broadcast_game_id is None
        assert game.last_roll is None

    asyncio.run(run_tests())


def test_roll_buy_and_end_turn():
    async def run_tests():
        relay = Relay((1, 2))
        game_id, game, alice, bob = await relay.start_game()

        result = await relay.request(alice, RollDiceRequest.create())
        assert result.response is None
        assert result.broadcast_game_id == game_id
        assert game.phase == GamePhase.ACTING

        result = await relay.request(alice, BuyPropertyRequest.create(True))
        assert result.broadcast_game_id == game_id
        assert game.board.get_tile("t3").owner == "p1"

        # No prompt left: silently ignored
        result = await relay.request(alice, BuyPropertyRequest.create(True))
        assert result.response is None
        assert result.broadcast_game_id is None

        result = await relay.request(alice, EndTurnRequest.create())
        assert result.broadcast_game_id == game_id
        assert game.current_player_id == "p2"

    asyncio.run(run_tests())


def test_buy_declined():
    async def run_tests():
        relay = Relay((1, 2))
        game_id, game, alice, bob = await relay.start_game()
        await relay.request(alice, RollDiceRequest.create())

        result = await relay.request(alice, BuyPropertyRequest.create(False))

        assert result.broadcast_game_id == game_id
        assert game.board.get_tile("t3").owner is None
        assert game.phase == GamePhase.TURN_ENDED

    asyncio.run(run_tests())


def test_property_actions():
    async def run_tests():
        relay = Relay()
        game_id, game, alice, bob = await relay.start_game()
        give(game, "p2", "t1", "t3", "t9")

        result = await relay.request(bob, UpgradeHouseRequest.create("t3"))
        assert result.broadcast_game_id == game_id
        assert game.board.get_tile("t3").house_level == 1

        result = await relay.request(alice, MortgagePropertyRequest.create("t3"))
        assert result.response.payload["message"] == "You don't own this property"

        result = await relay.request(bob, MortgagePropertyRequest.create("t3"))
        assert game.board.get_tile("t3").mortgaged

        result = await relay.request(bob, UnmortgagePropertyRequest.create("t3"))
        assert not game.board.get_tile("t3").mortgaged

        result = await relay.send(bob, "UPGRADE_HOUSE")
        assert result.response.payload["message"] == "tileId is required"

    asyncio.run(run_tests())


def test_trade_through_relay():
    async def run_tests():
        relay = Relay()
        game_id, game, alice, bob = await relay.start_game()
        give(game, "p1", "t1")
        give(game, "p2", "t3")

        result = await relay.request(
            alice, TradeOfferRequest.create("p2", offer_tiles=["t1"], offer_cash=25, request_tiles=["t3"]),
        )
        assert result.broadcast_game_id == game_id
        trade_id = game.trade_offers[0].id

        result = await relay.request(alice, TradeRespondRequest.create(trade_id, True))
        assert result.response.kind == MessageType.ERROR

        result = await relay.request(bob, TradeRespondRequest.create(trade_id, True))
        assert result.broadcast_game_id == game_id
        assert game.board.get_tile("t1").owner == "p2"

        result = await relay.request(bob, TradeRespondRequest.create(trade_id, False))
        assert result.response is None
        assert result.broadcast_game_id is None

        result = await relay.send(bob, "TRADE_RESPOND", tradeId=trade_id)
        assert result.response.payload["message"] == "accept must be true or false"

    asyncio.run(run_tests())


def test_trade_offer_rejects_non_list_tiles():
    async def run_tests():
        relay = Relay()
        game_id, game, alice, bob = await relay.start_game()

        for bad in ("", 0, False, "t1"):
            result = await relay.send(alice, "TRADE_OFFER", to="p2", offerTiles=bad, offerCash=10)

            assert result.response.payload["message"] == "offerTiles must be a list of tile ids"
            assert result.broadcast_game_id is None

        assert game.trade_offers == []

    asyncio.run(run_tests())


def test_declare_bankruptcy_ends_two_player_game():
    async def run_tests():
        relay = Relay()
        game_id, game, alice, bob = await relay.start_game()

        result = await relay.request(bob, DeclareBankruptcyRequest.create())

        assert result.broadcast_game_id == game_id
        assert game.phase == GamePhase.ENDED
        assert game.winner_id == "p1"

        result = await relay.request(alice, RollDiceRequest.create())
        assert result.response.payload["message"] == "The game is over"

        # A finished game no longer holds the creator
        result = await relay.send(alice, "CREATE_GAME", playerName="Alice")
        assert result.response.kind == MessageType.GAME_JOINED

    asyncio.run(run_tests())
