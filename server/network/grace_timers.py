"""
Disconnect grace timers.

A dropped player keeps their seat for a grace period. If nobody reconnects as
that player before it runs out, the expiry callback bankrupts them.
"""

import asyncio
import logging
from typing import Awaitable, Callable


logger = logging.getLogger(__name__)

TimerKey = tuple[str, str]


class GraceTimers:
    """
    Cancellable one-shot timers keyed by (game_id, player_id).
    """

    def __init__(
        self,
        timeout: float,
        on_expire: Callable[[str, str], Awaitable[None]]
    ):
        """
        Args:
            timeout: Grace period in seconds
            on_expire: Coroutine function called with (game_id, player_id)
        """
        self.timeout = timeout
        self._on_expire = on_expire
        self._timers: dict[TimerKey, asyncio.Task] = {}

    def start(self, game_id: str, player_id: str) -> None:
        """Start (or restart) the timer for a player."""
        key = (game_id, player_id)
        self.cancel(game_id, player_id)
        self._timers[key] = asyncio.create_task(self._expire_after(key))
        logger.info(f"Grace timer started for {player_id} in game {game_id} ({self.timeout}s)")

    def cancel(self, game_id: str, player_id: str) -> bool:
        """
        Cancel a player's timer. Safe to call when none is running.

        Returns:
            True if a timer was cancelled
        """
        task = self._timers.pop((game_id, player_id), None)
        if task is None:
            return False

        task.cancel()
        logger.info(f"Grace timer cancelled for {player_id} in game {game_id}")
        return True

    def cancel_all(self) -> None:
        """Cancel every running timer (server shutdown)."""
        for task in self._timers.values():
            task.cancel()
        self._timers.clear()

    def is_pending(self, game_id: str, player_id: str) -> bool:
        return (game_id, player_id) in self._timers

    def __len__(self) -> int:
        return len(self._timers)

    async def _expire_after(self, key: TimerKey) -> None:
        await asyncio.sleep(self.timeout)

        # A fired timer is no longer pending
        self._timers.pop(key, None)
        game_id, player_id = key
        logger.info(f"Grace timer expired for {player_id} in game {game_id}")

        try:
            await self._on_expire(game_id, player_id)
        except Exception as e:
            logger.exception(f"Error expiring grace timer for {player_id}: {e}")
