"""
Player state management.
"""
from dataclasses import dataclass, field
from typing import Set

from shared.constants import BOARD_SIZE, STARTING_CASH, GO_BONUS, JAIL_POSITION


@dataclass
class Player:
    """Represents a player in the game."""

    id: str
    name: str
    color: str
    cash: int = STARTING_CASH
    position: int = 0

    # Set to 1 when sent to jail: the GO bonus was withheld on that move
    jail_turns: int = 0

    is_bankrupt: bool = False

    # Tiles owned (tracked by tile id)
    properties: Set[str] = field(default_factory=set)

    def add_cash(self, amount: int) -> int:
        """
        Add cash to player's balance.

        Returns:
            New balance
        """
        self.cash += amount
        return self.cash

    def pay(self, amount: int) -> int:
        """
        Debit cash unconditionally.

        The balance may go negative; the caller decides what that means.

        Returns:
            New balance
        """
        self.cash -= amount
        return self.cash

    def can_afford(self, amount: int) -> bool:
        """Check if player can afford a given amount."""
        return self.cash >= amount

    def move_forward(self, steps: int) -> bool:
        """
        Move player forward by a number of spaces, collecting the GO bonus on wrap.

        Returns:
            True if player passed GO
        """
        new_position = self.position + steps
        passed_go = new_position >= BOARD_SIZE
        if passed_go:
            self.add_cash(GO_BONUS)

        self.position = new_position % BOARD_SIZE
        return passed_go

    def send_to_jail(self) -> None:
        """Teleport to jail without collecting the GO bonus."""
        self.position = JAIL_POSITION
        self.jail_turns = 1

    def add_property(self, tile_id: str) -> None:
        """Add a tile to player's holdings."""
        self.properties.add(tile_id)

    def remove_property(self, tile_id: str) -> None:
        """Remove a tile from player's holdings."""
        self.properties.discard(tile_id)

    def declare_bankruptcy(self) -> None:
        """Mark player as bankrupt and drop all holdings."""
        self.is_bankrupt = True
        self.cash = 0
        self.properties.clear()

    def to_dict(self) -> dict:
        """Convert player to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "cash": self.cash,
            "position": self.position,
            "jailTurns": self.jail_turns,
            "isBankrupt": self.is_bankrupt,
            "properties": sorted(self.properties, key=lambda tid: int(tid[1:])),
        }
