"""
Network layer for the RichUp relay server.

Provides WebSocket server, connection management, grace timers and message handling.
"""

from server.network.connection_manager import ConnectionManager, ClientConnection
from server.network.game_manager import GameManager
from server.network.grace_timers import GraceTimers
from server.network.message_handler import MessageHandler, HandleResult
from server.network.server import RelayServer, run_server


__all__ = [
    "ConnectionManager",
    "ClientConnection",
    "GameManager",
    "GraceTimers",
    "MessageHandler",
    "HandleResult",
    "RelayServer",
    "run_server",
]
