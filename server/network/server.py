"""
WebSocket relay server for RichUp.

Main entry point that ties together connection management, game management,
disconnect grace timers and message handling.
"""

import asyncio
import logging
import signal
from typing import Any, Callable

import websockets
from websockets.asyncio.server import Server, ServerConnection, serve

from server.config import settings
from server.game_engine import Dice
from server.network.connection_manager import ClientConnection, ConnectionManager
from server.network.game_manager import GameManager
from server.network.grace_timers import GraceTimers
from server.network.message_handler import MessageHandler
from shared.protocol import GameUpdateMessage, WelcomeMessage


logger = logging.getLogger(__name__)


class RelayServer:
    """
    WebSocket server for RichUp games.

    Handles client connections, routes messages, broadcasts snapshots and
    bankrupts players who stay away longer than the grace period.
    """

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        grace_seconds: float | None = None,
        dice_factory: Callable[[], Dice] | None = None
    ):
        self.host = host or settings.HOST
        self.port = settings.PORT if port is None else port

        # Initialize managers
        self._connections = ConnectionManager()
        self._games = GameManager(dice_factory=dice_factory)
        self._timers = GraceTimers(
            settings.DISCONNECT_GRACE_SECONDS if grace_seconds is None else grace_seconds,
            self._on_grace_expired,
        )
        self._handler = MessageHandler(self._games, self._connections, self._timers)

        # Server state
        self._server: Server | None = None
        self._running = False
        self._shutdown_event = asyncio.Event()

    @property
    def connections(self) -> ConnectionManager:
        return self._connections

    @property
    def games(self) -> GameManager:
        return self._games

    @property
    def timers(self) -> GraceTimers:
        return self._timers

    async def start(self) -> None:
        """Start listening. Returns once the socket is bound."""
        self._running = True
        self._shutdown_event.clear()

        self._server = await serve(
            self._handle_client,
            self.host,
            self.port,
            ping_interval=30,
            ping_timeout=10,
        )

        # Port 0 asks the OS for a free port
        if self.port == 0 and self._server.sockets:
            self.port = self._server.sockets[0].getsockname()[1]

        logger.info(f"RichUp relay started on ws://{self.host}:{self.port}")

    async def run(self) -> None:
        """Start the server and wait for a shutdown request."""
        await self.start()
        await self._shutdown_event.wait()

    async def stop(self) -> None:
        """Stop the server gracefully."""
        logger.info("Shutting down server...")
        self._running = False

        if self._server:
            self._server.close()
            await self._server.wait_closed()

        # Handlers have exited, so no disconnect can start another timer
        self._timers.cancel_all()

        self._shutdown_event.set()
        logger.info("Server stopped")

    def request_shutdown(self) -> None:
        """Request server shutdown (can be called from signal handler)."""
        asyncio.create_task(self.stop())

    # =========================================================================
    # Connection handling
    # =========================================================================

    async def _handle_client(self, websocket: ServerConnection) -> None:
        """
        Handle a client connection.

        The client is greeted with its connection id, then every frame is
        routed through the message handler until the socket closes.
        """
        connection = self._connections.register(websocket)

        try:
            await self._connections.send(connection, WelcomeMessage.create(connection.connection_id))

            async for raw_message in websocket:
                if not self._running:
                    break

                await self._handle_message(connection, raw_message)

        except websockets.ConnectionClosed:
            logger.debug(f"Connection closed for {connection.connection_id}")
        except Exception as e:
            logger.exception(f"Error handling client {connection.connection_id}: {e}")
        finally:
            self._handle_disconnect(connection)

    async def _handle_message(self, connection: ClientConnection, raw_message: str | bytes) -> None:
        """Handle an incoming frame from a connected client."""
        result = await self._handler.handle_message(connection.connection_id, raw_message)

        if result.response:
            await self._connections.send(connection, result.response)

        if result.broadcast_game_id:
            await self.broadcast_state(result.broadcast_game_id)

    def _handle_disconnect(self, connection: ClientConnection) -> None:
        """Drop the binding and start the grace timer if the seat is now empty."""
        self._connections.unregister(connection.connection_id)

        if not connection.is_bound:
            return

        game_id, player_id = connection.game_id, connection.player_id
        game = self._games.get_game(game_id)
        if game is None or game.is_over:
            return

        player = game.players.get(player_id)
        if player is None or player.is_bankrupt:
            return

        if self._connections.connections_for_player(game_id, player_id):
            logger.debug(f"{player_id} in game {game_id} still has a live connection")
            return

        self._timers.start(game_id, player_id)

    async def _on_grace_expired(self, game_id: str, player_id: str) -> None:
        """Bankrupt a player who did not come back in time."""
        game = self._games.get_game(game_id)
        if game is None or game.is_over:
            return

        player = game.players.get(player_id)
        if player is None or player.is_bankrupt:
            return

        game.log(f"{player.name} timed out")
        game.declare_bankruptcy(player_id)
        logger.info(f"{player.name} ({player_id}) timed out of game {game_id}")

        await self.broadcast_state(game_id)

    async def broadcast_state(self, game_id: str) -> int:
        """Send the full snapshot of a game to every connection bound to it."""
        game = self._games.get_game(game_id)
        if game is None:
            return 0

        message = GameUpdateMessage.create(game.to_dict())
        return await self._connections.broadcast_to_game(game_id, message)

    def get_stats(self) -> dict[str, Any]:
        """Get server statistics."""
        return {
            "running": self._running,
            "connections": self._connections.get_stats(),
            "games": self._games.get_stats(),
            "pending_grace_timers": len(self._timers),
        }


async def run_server(host: str | None = None, port: int | None = None) -> None:
    """
    Run the RichUp relay server.

    Sets up signal handlers for graceful shutdown.
    """
    server = RelayServer(host, port)

    # Set up signal handlers
    loop = asyncio.get_running_loop()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, server.request_shutdown)

    try:
        await server.run()
    finally:
        # Clean up signal handlers
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.remove_signal_handler(sig)


def main():
    """Entry point for running the server."""
    # Configure logging
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    print(f"Starting RichUp relay on ws://{settings.HOST}:{settings.PORT}")
    print("Press Ctrl+C to stop")

    try:
        asyncio.run(run_server())
    except KeyboardInterrupt:
        print("\nServer stopped")


if __name__ == "__main__":
    main()
