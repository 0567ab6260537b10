"""
Connection manager for WebSocket clients.

Tracks connected clients and the (game, player) pair each one is bound to.
Handles sending messages to individual connections or broadcasting to games.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import websockets
from websockets.asyncio.server import ServerConnection

from shared.protocol import Message


logger = logging.getLogger(__name__)


@dataclass
class ClientConnection:
    """Tracks one live socket and its binding."""
    connection_id: str
    websocket: ServerConnection
    game_id: str | None = None
    player_id: str | None = None
    connected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_bound(self) -> bool:
        return self.game_id is not None and self.player_id is not None


class ConnectionManager:
    """
    Manages WebSocket connections and their game bindings.

    All methods that mutate the registry are synchronous: on a single event
    loop a caller can inspect and update bindings without interleaving.
    """

    def __init__(self):
        # connection_id -> ClientConnection
        self._connections: dict[str, ClientConnection] = {}

    # =========================================================================
    # Connection Lifecycle
    # =========================================================================

    def register(self, websocket: ServerConnection) -> ClientConnection:
        """
        Register a freshly opened socket under a new connection id.

        Returns:
            The ClientConnection object
        """
        connection = ClientConnection(
            connection_id=str(uuid.uuid4()),
            websocket=websocket,
        )
        self._connections[connection.connection_id] = connection
        logger.info(f"Client connected: {connection.connection_id}")
        return connection

    def unregister(self, connection_id: str) -> ClientConnection | None:
        """
        Forget a closed connection.

        Returns:
            The ClientConnection if found, None otherwise
        """
        connection = self._connections.pop(connection_id, None)
        if connection:
            if connection.is_bound:
                logger.info(
                    f"Client {connection_id} disconnected "
                    f"(player {connection.player_id} in game {connection.game_id})"
                )
            else:
                logger.info(f"Client {connection_id} disconnected")
        return connection

    def bind(self, connection_id: str, game_id: str, player_id: str) -> bool:
        """
        Bind a connection to a player of a game, replacing any prior binding.

        Returns:
            True if successful, False if the connection is unknown
        """
        connection = self._connections.get(connection_id)
        if not connection:
            return False

        connection.game_id = game_id
        connection.player_id = player_id
        logger.info(f"Client {connection_id} bound to player {player_id} in game {game_id}")
        return True

    # =========================================================================
    # Queries
    # =========================================================================

    def get(self, connection_id: str) -> ClientConnection | None:
        """Get connection info by id."""
        return self._connections.get(connection_id)

    def connections_for_game(self, game_id: str) -> list[ClientConnection]:
        """All live connections bound to a game."""
        return [
            conn for conn in self._connections.values()
            if conn.game_id == game_id
        ]

    def connections_for_player(self, game_id: str, player_id: str) -> list[ClientConnection]:
        """All live connections bound to one player of a game."""
        return [
            conn for conn in self._connections.values()
            if conn.game_id == game_id and conn.player_id == player_id
        ]

    def __len__(self) -> int:
        return len(self._connections)

    # =========================================================================
    # Messaging
    # =========================================================================

    async def send_to_connection(self, connection_id: str, message: Message | str) -> bool:
        """
        Send a message to a specific connection.

        Returns:
            True if sent successfully, False if unknown or closed
        """
        connection = self._connections.get(connection_id)
        if not connection:
            return False
        return await self.send(connection, message)

    async def broadcast_to_game(self, game_id: str, message: Message | str) -> int:
        """
        Broadcast a message to every connection bound to a game.

        The message is serialized once; closed sockets are skipped.

        Returns:
            Number of connections the message was sent to
        """
        data = message.to_json() if isinstance(message, Message) else message
        sent_count = 0

        for conn in self.connections_for_game(game_id):
            if await self.send(conn, data):
                sent_count += 1

        return sent_count

    async def send(self, connection: ClientConnection, message: Message | str) -> bool:
        """Send to one connection, reporting closed sockets as a failed send."""
        data = message.to_json() if isinstance(message, Message) else message
        try:
            await connection.websocket.send(data)
            return True
        except (websockets.ConnectionClosed, OSError) as e:
            logger.debug(f"Skipping send to closed connection {connection.connection_id}: {e}")
            return False

    # =========================================================================
    # Statistics
    # =========================================================================

    def get_stats(self) -> dict[str, Any]:
        """Get connection statistics."""
        bound = [conn for conn in self._connections.values() if conn.is_bound]
        per_game: dict[str, int] = {}
        for conn in bound:
            per_game[conn.game_id] = per_game.get(conn.game_id, 0) + 1

        return {
            "total_connections": len(self._connections),
            "bound_connections": len(bound),
            "connections_per_game": per_game,
        }
