"""
Message handler for routing client messages to game actions.

Parses incoming frames, validates their payloads, executes the matching
state-machine operation and decides what goes back to whom.
"""

import logging
from dataclasses import dataclass
from typing import Any

from server.game_engine import BuyPrompt, Game, ValidationResult
from server.network.connection_manager import ClientConnection, ConnectionManager
from server.network.game_manager import GameManager
from server.network.grace_timers import GraceTimers
from shared.protocol import (
    Message,
    ErrorMessage,
    GameJoinedMessage,
    ProtocolError,
    ReconnectFailedMessage,
    parse_message,
)
from shared.enums import MessageType


logger = logging.getLogger(__name__)


@dataclass
class HandleResult:
    """Result of handling a message."""
    # Response to send back to the requesting connection (None if no response needed)
    response: Message | None = None
    # Game whose full state must be broadcast after this action
    broadcast_game_id: str | None = None


# =============================================================================
# Payload field readers
# =============================================================================

def _require_str(payload: dict, key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ProtocolError(f"{key} is required")
    return value.strip()


def _optional_int(payload: dict, key: str, default: int | None = 0) -> int | None:
    value = payload.get(key, default)
    if value is None:
        return default
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, int):
        raise ProtocolError(f"{key} must be an integer")
    return value


def _optional_bool(payload: dict, key: str, default: bool) -> bool:
    value = payload.get(key, default)
    if not isinstance(value, bool):
        raise ProtocolError(f"{key} must be true or false")
    return value


def _require_bool(payload: dict, key: str) -> bool:
    value = payload.get(key)
    if not isinstance(value, bool):
        raise ProtocolError(f"{key} must be true or false")
    return value


def _tile_list(payload: dict, key: str) -> list[str]:
    if key not in payload:
        return []

    value = payload[key]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ProtocolError(f"{key} must be a list of tile ids")
    return value


class MessageHandler:
    """
    Routes incoming messages to appropriate game actions.

    Each handler method returns a HandleResult containing:
    - A response to send to the requesting connection
    - The game whose state should be broadcast, if any
    """

    def __init__(
        self,
        game_manager: GameManager,
        connection_manager: ConnectionManager,
        grace_timers: GraceTimers
    ):
        self._games = game_manager
        self._connections = connection_manager
        self._timers = grace_timers

    async def handle_message(self, connection_id: str, raw: str | bytes) -> HandleResult:
        """
        Handle an incoming frame from a connection.

        Args:
            connection_id: ID of the sending connection
            raw: The raw frame

        Returns:
            HandleResult with response and broadcast target
        """
        connection = self._connections.get(connection_id)
        if connection is None:
            logger.warning(f"Message from unknown connection {connection_id}")
            return HandleResult()

        try:
            message = parse_message(raw)
        except ProtocolError as e:
            logger.warning(f"Malformed message from {connection_id}: {e}")
            return HandleResult(response=ErrorMessage.create(f"Invalid message: {e}"))

        handler = self._get_handler(message.kind)
        if not handler:
            logger.warning(f"Unsupported message kind from {connection_id}: {message.kind.value}")
            return HandleResult(
                response=ErrorMessage.create(f"Unsupported message kind: {message.kind.value}")
            )

        try:
            return handler(connection, message.payload)
        except ProtocolError as e:
            logger.warning(f"Invalid {message.kind.value} payload from {connection_id}: {e}")
            return HandleResult(response=ErrorMessage.create(str(e)))
        except Exception as e:
            logger.exception(f"Error handling message {message.kind.value}: {e}")
            return HandleResult(response=ErrorMessage.create("Internal error"))

    def _get_handler(self, kind: MessageType):
        """Get the handler method for a message kind."""
        handlers = {
            # Lobby
            MessageType.CREATE_GAME: self._handle_create_game,
            MessageType.JOIN_GAME: self._handle_join_game,
            MessageType.RECONNECT: self._handle_reconnect,

            # Game actions
            MessageType.ROLL_DICE: self._handle_roll_dice,
            MessageType.BUY_PROPERTY: self._handle_buy_property,
            MessageType.UPGRADE_HOUSE: self._handle_upgrade_house,
            MessageType.MORTGAGE_PROPERTY: self._handle_mortgage_property,
            MessageType.UNMORTGAGE_PROPERTY: self._handle_unmortgage_property,
            MessageType.DECLARE_BANKRUPTCY: self._handle_declare_bankruptcy,
            MessageType.TRADE_OFFER: self._handle_trade_offer,
            MessageType.TRADE_RESPOND: self._handle_trade_respond,
            MessageType.END_TURN: self._handle_end_turn,
        }
        return handlers.get(kind)

    # =========================================================================
    # Helper Methods
    # =========================================================================

    def _get_bound_game(self, connection: ClientConnection) -> tuple[Game | None, str | None]:
        """Get the game a connection is playing in, or error message."""
        if not connection.is_bound:
            return None, "You are not in a game"
        game = self._games.get_game(connection.game_id)
        if game is None:
            return None, "You are not in a game"
        return game, None

    def _in_live_game(self, connection: ClientConnection) -> bool:
        """Check if the connection already plays a live seat in an unfinished game."""
        game, _ = self._get_bound_game(connection)
        if game is None or game.is_over:
            return False
        player = game.players.get(connection.player_id)
        return player is not None and not player.is_bankrupt

    @staticmethod
    def _from_validation(validation: ValidationResult, game_id: str) -> HandleResult:
        """Map an engine outcome onto what the relay sends."""
        if validation.valid:
            return HandleResult(broadcast_game_id=game_id)
        if validation.ignored:
            return HandleResult()
        return HandleResult(response=ErrorMessage.create(validation.message))

    def _game_action(self, connection: ClientConnection, action) -> HandleResult:
        """Run an engine operation on behalf of the bound player."""
        game, error = self._get_bound_game(connection)
        if error:
            return HandleResult(response=ErrorMessage.create(error))
        validation = action(game, connection.player_id)
        return self._from_validation(validation, connection.game_id)

    # =========================================================================
    # Lobby Handlers
    # =========================================================================

    def _handle_create_game(self, connection: ClientConnection, payload: dict[str, Any]) -> HandleResult:
        """Handle CREATE_GAME request."""
        player_name = _require_str(payload, "playerName")
        starting_cash = _optional_int(payload, "startingCash", None)
        if starting_cash is not None and starting_cash <= 0:
            raise ProtocolError("startingCash must be positive")

        if self._in_live_game(connection):
            return HandleResult(response=ErrorMessage.create("You are already in a game"))

        game_id, game, player = self._games.create_game(player_name, starting_cash)
        self._connections.bind(connection.connection_id, game_id, player.id)

        return HandleResult(
            response=GameJoinedMessage.create(game_id, player.id, game.to_dict())
        )

    def _handle_join_game(self, connection: ClientConnection, payload: dict[str, Any]) -> HandleResult:
        """Handle JOIN_GAME request."""
        game_id = _require_str(payload, "gameId").upper()
        player_name = _require_str(payload, "playerName")

        if self._in_live_game(connection):
            return HandleResult(response=ErrorMessage.create("You are already in a game"))

        success, msg, game, player = self._games.join_game(game_id, player_name)
        if not success:
            return HandleResult(response=ErrorMessage.create(msg))

        self._connections.bind(connection.connection_id, game_id, player.id)

        return HandleResult(
            response=GameJoinedMessage.create(game_id, player.id, game.to_dict()),
            broadcast_game_id=game_id
        )

    def _handle_reconnect(self, connection: ClientConnection, payload: dict[str, Any]) -> HandleResult:
        """Handle RECONNECT request."""
        game_id = _require_str(payload, "gameId").upper()
        player_id = _require_str(payload, "playerId")

        game = self._games.get_game(game_id)
        player = game.players.get(player_id) if game else None
        if player is None or player.is_bankrupt:
            logger.info(f"Reconnect refused for {player_id} in game {game_id}")
            return HandleResult(
                response=ReconnectFailedMessage.create("Unable to reconnect to that game")
            )

        self._timers.cancel(game_id, player_id)
        self._connections.bind(connection.connection_id, game_id, player_id)
        game.log(f"{player.name} reconnected")
        logger.info(f"{player.name} ({player_id}) reconnected to game {game_id}")

        return HandleResult(
            response=GameJoinedMessage.create(game_id, player_id, game.to_dict()),
            broadcast_game_id=game_id
        )

    # =========================================================================
    # Game Action Handlers
    # =========================================================================

    def _handle_roll_dice(self, connection: ClientConnection, payload: dict[str, Any]) -> HandleResult:
        """Handle ROLL_DICE request."""
        return self._game_action(
            connection,
            lambda game, player_id: game.roll_dice(player_id)[0]
        )

    def _handle_buy_property(self, connection: ClientConnection, payload: dict[str, Any]) -> HandleResult:
        """Handle BUY_PROPERTY request (confirm=false declines)."""
        confirm = _optional_bool(payload, "confirm", True)

        def buy(game: Game, player_id: str) -> ValidationResult:
            if not confirm:
                return game.pass_property(player_id)
            prompt = game.pending_action
            if not isinstance(prompt, BuyPrompt):
                return ValidationResult.ignore()
            return game.buy_property(player_id, prompt.tile_id)

        return self._game_action(connection, buy)

    def _handle_upgrade_house(self, connection: ClientConnection, payload: dict[str, Any]) -> HandleResult:
        """Handle UPGRADE_HOUSE request."""
        tile_id = _require_str(payload, "tileId")
        return self._game_action(
            connection,
            lambda game, player_id: game.upgrade_house(player_id, tile_id)
        )

    def _handle_mortgage_property(self, connection: ClientConnection, payload: dict[str, Any]) -> HandleResult:
        """Handle MORTGAGE_PROPERTY request."""
        tile_id = _require_str(payload, "tileId")
        return self._game_action(
            connection,
            lambda game, player_id: game.mortgage_property(player_id, tile_id)
        )

    def _handle_unmortgage_property(self, connection: ClientConnection, payload: dict[str, Any]) -> HandleResult:
        """Handle UNMORTGAGE_PROPERTY request."""
        tile_id = _require_str(payload, "tileId")
        return self._game_action(
            connection,
            lambda game, player_id: game.unmortgage_property(player_id, tile_id)
        )

    def _handle_declare_bankruptcy(self, connection: ClientConnection, payload: dict[str, Any]) -> HandleResult:
        """Handle DECLARE_BANKRUPTCY request."""
        return self._game_action(
            connection,
            lambda game, player_id: game.declare_bankruptcy(player_id)
        )

    def _handle_trade_offer(self, connection: ClientConnection, payload: dict[str, Any]) -> HandleResult:
        """Handle TRADE_OFFER request."""
        to_id = _require_str(payload, "to")
        offer_tiles = _tile_list(payload, "offerTiles")
        request_tiles = _tile_list(payload, "requestTiles")
        offer_cash = _optional_int(payload, "offerCash")
        request_cash = _optional_int(payload, "requestCash")

        return self._game_action(
            connection,
            lambda game, player_id: game.create_trade_offer(
                player_id, to_id, offer_tiles, offer_cash, request_tiles, request_cash
            )[0]
        )

    def _handle_trade_respond(self, connection: ClientConnection, payload: dict[str, Any]) -> HandleResult:
        """Handle TRADE_RESPOND request."""
        trade_id = _require_str(payload, "tradeId")
        accept = _require_bool(payload, "accept")
        return self._game_action(
            connection,
            lambda game, player_id: game.respond_to_trade(player_id, trade_id, accept)
        )

    def _handle_end_turn(self, connection: ClientConnection, payload: dict[str, Any]) -> HandleResult:
        """Handle END_TURN request."""
        return self._game_action(
            connection,
            lambda game, player_id: game.end_turn(player_id)
        )
