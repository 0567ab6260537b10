"""
Game manager for handling multiple game instances.

Games live in memory only and are addressed by a short join code.
"""

import logging
import random
import string
from typing import Any, Callable

from server.config import settings
from server.game_engine import Dice, Game, Player, create_game


logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits


class GameManager:
    """
    Manages multiple game instances.

    Provides methods for:
    - Creating new games under a fresh join code
    - Joining players to games
    - Looking games up by code
    """

    def __init__(
        self,
        code_length: int | None = None,
        starting_cash: int | None = None,
        max_players: int | None = None,
        dice_factory: Callable[[], Dice] | None = None
    ):
        self.code_length = code_length or settings.GAME_CODE_LENGTH
        self.starting_cash = starting_cash or settings.STARTING_CASH
        self.max_players = max_players or settings.MAX_PLAYERS
        self._dice_factory = dice_factory or Dice
        self._random = random.Random()

        # game code -> Game
        self._games: dict[str, Game] = {}

    def generate_code(self) -> str:
        """Draw a join code that no live game is using."""
        while True:
            code = "".join(self._random.choices(CODE_ALPHABET, k=self.code_length))
            if code not in self._games:
                return code

    # =========================================================================
    # Game Lifecycle
    # =========================================================================

    def create_game(
        self,
        player_name: str,
        starting_cash: int | None = None
    ) -> tuple[str, Game, Player]:
        """
        Create a new game with its creator as the first player.

        Args:
            player_name: Creator's display name
            starting_cash: Optional override of the default starting cash

        Returns:
            Tuple of (game code, game, creator)
        """
        game_id = self.generate_code()
        game = create_game(
            [player_name],
            starting_cash=starting_cash or self.starting_cash,
            dice=self._dice_factory(),
        )
        game.max_players = self.max_players
        self._games[game_id] = game

        player = game.players[game.turn_order[0]]
        logger.info(f"Game {game_id} created by {player_name} ({player.id})")

        return game_id, game, player

    def join_game(
        self,
        game_id: str,
        player_name: str
    ) -> tuple[bool, str, Game | None, Player | None]:
        """
        Add a player to an existing game.

        Returns:
            Tuple of (success, message, game, player)
        """
        game = self.get_game(game_id)
        if not game:
            return False, "Game code not found", None, None

        success, message, player = game.add_player(player_name)
        if not success:
            return False, message, game, None

        logger.info(f"{player_name} ({player.id}) joined game {game_id.upper()}")
        return True, message, game, player

    # =========================================================================
    # Queries
    # =========================================================================

    def get_game(self, game_id: str) -> Game | None:
        """Look a game up by code, case-insensitively."""
        return self._games.get(game_id.upper())

    def get_stats(self) -> dict[str, Any]:
        """Get game statistics."""
        return {
            "total_games": len(self._games),
            "finished_games": sum(1 for game in self._games.values() if game.is_over),
            "total_players": sum(len(game.players) for game in self._games.values()),
        }
