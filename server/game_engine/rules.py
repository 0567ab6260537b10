"""
Rule enforcement and validation for RichUp.
"""
from dataclasses import dataclass
from enum import Enum, auto
from typing import List

from shared.constants import MAX_HOUSE_LEVEL
from shared.enums import GamePhase, TileKind

from .player import Player
from .board import Board
from .trade import TradeOffer


class ActionResult(Enum):
    """Result of attempting an action."""
    SUCCESS = auto()
    # Precondition lost to a normal input race; nothing happens, nothing is reported
    IGNORED = auto()
    INSUFFICIENT_FUNDS = auto()
    NOT_YOUR_TURN = auto()
    INVALID_TILE = auto()
    NOT_OWNER = auto()
    NOT_A_STREET = auto()
    NO_MONOPOLY = auto()
    MAX_DEVELOPMENT = auto()
    PROPERTY_MORTGAGED = auto()
    NOT_MORTGAGED = auto()
    MUST_ROLL = auto()
    MUST_DECIDE = auto()
    ALREADY_ROLLED = auto()
    INVALID_TRADE = auto()
    TRADE_NOT_FOUND = auto()
    GAME_OVER = auto()
    GAME_FULL = auto()
    PLAYER_BANKRUPT = auto()
    PLAYER_NOT_FOUND = auto()


@dataclass
class ValidationResult:
    """Result of validating an action."""
    valid: bool
    result: ActionResult
    message: str = ""

    @property
    def ignored(self) -> bool:
        return self.result == ActionResult.IGNORED

    @classmethod
    def success(cls, message: str = "") -> "ValidationResult":
        return cls(valid=True, result=ActionResult.SUCCESS, message=message)

    @classmethod
    def failure(cls, result: ActionResult, message: str = "") -> "ValidationResult":
        return cls(valid=False, result=result, message=message)

    @classmethod
    def ignore(cls, message: str = "") -> "ValidationResult":
        return cls(valid=False, result=ActionResult.IGNORED, message=message)


class RuleEngine:
    """
    Enforces all RichUp rules and validates actions.
    """

    def __init__(self, board: Board):
        """
        Initialize rule engine.

        Args:
            board: The game board
        """
        self.board = board

    # =========== Participation and turn order ===========

    def validate_participant(self, player: Player, phase: GamePhase) -> ValidationResult:
        """Validate that a player may act in the game at all."""
        if phase == GamePhase.ENDED:
            return ValidationResult.failure(
                ActionResult.GAME_OVER,
                "The game is over"
            )

        if player.is_bankrupt:
            return ValidationResult.failure(
                ActionResult.PLAYER_BANKRUPT,
                "You are bankrupt"
            )

        return ValidationResult.success()

    def validate_turn_action(
        self,
        player: Player,
        current_player_id: str | None,
        phase: GamePhase
    ) -> ValidationResult:
        """Validate an action reserved to the active player."""
        validation = self.validate_participant(player, phase)
        if not validation.valid:
            return validation

        if player.id != current_player_id:
            return ValidationResult.failure(
                ActionResult.NOT_YOUR_TURN,
                "It's not your turn"
            )

        return ValidationResult.success()

    def validate_roll_dice(
        self,
        player: Player,
        current_player_id: str | None,
        phase: GamePhase
    ) -> ValidationResult:
        """Validate if player can roll dice."""
        validation = self.validate_turn_action(player, current_player_id, phase)
        if not validation.valid:
            return validation

        if phase == GamePhase.ACTING:
            return ValidationResult.failure(
                ActionResult.MUST_DECIDE,
                "You must decide on the property first"
            )

        if phase != GamePhase.WAITING:
            return ValidationResult.failure(
                ActionResult.ALREADY_ROLLED,
                "You have already rolled this turn"
            )

        return ValidationResult.success()

    def validate_end_turn(
        self,
        player: Player,
        current_player_id: str | None,
        phase: GamePhase
    ) -> ValidationResult:
        """Validate if player can end their turn."""
        validation = self.validate_turn_action(player, current_player_id, phase)
        if not validation.valid:
            return validation

        if phase == GamePhase.WAITING:
            return ValidationResult.failure(
                ActionResult.MUST_ROLL,
                "You must roll the dice first"
            )

        if phase == GamePhase.ACTING:
            return ValidationResult.failure(
                ActionResult.MUST_DECIDE,
                "You must decide on the property first"
            )

        return ValidationResult.success()

    # =========== Property actions ===========

    def validate_buy_property(self, player: Player, tile_id: str) -> ValidationResult:
        """
        Validate a purchase.

        Every failure here is a silent no-op: the tile was sold in the meantime
        or the buyer's cash moved since the prompt was raised.
        """
        tile = self.board.get_tile(tile_id)
        if tile is None or not tile.is_ownable:
            return ValidationResult.ignore("This tile cannot be bought")

        if tile.is_owned:
            return ValidationResult.ignore(f"{tile.name} is already owned")

        if not player.can_afford(tile.price):
            return ValidationResult.ignore(f"You need ${tile.price} to buy {tile.name}")

        return ValidationResult.success()

    def validate_upgrade(self, player: Player, tile_id: str) -> ValidationResult:
        """Validate if player can build the next level on a street."""
        tile = self.board.get_tile(tile_id)
        if tile is None:
            return ValidationResult.failure(
                ActionResult.INVALID_TILE,
                "Tile not found"
            )

        if tile.kind != TileKind.STREET:
            return ValidationResult.failure(
                ActionResult.NOT_A_STREET,
                "Can only upgrade streets"
            )

        if tile.owner != player.id:
            return ValidationResult.failure(
                ActionResult.NOT_OWNER,
                "You don't own this property"
            )

        if tile.mortgaged:
            return ValidationResult.failure(
                ActionResult.PROPERTY_MORTGAGED,
                "Property is mortgaged"
            )

        if tile.house_level >= MAX_HOUSE_LEVEL:
            return ValidationResult.failure(
                ActionResult.MAX_DEVELOPMENT,
                "Max level reached"
            )

        if not self.board.owns_full_country(player.id, tile.country):
            return ValidationResult.failure(
                ActionResult.NO_MONOPOLY,
                f"You must own all cities in {tile.country} to build"
            )

        cost = tile.next_upgrade_cost
        if not player.can_afford(cost):
            return ValidationResult.failure(
                ActionResult.INSUFFICIENT_FUNDS,
                f"Not enough cash (${cost} needed)"
            )

        return ValidationResult.success()

    def validate_mortgage(self, player: Player, tile_id: str) -> ValidationResult:
        """Validate if player can mortgage a tile."""
        tile = self.board.get_tile(tile_id)
        if tile is None:
            return ValidationResult.failure(
                ActionResult.INVALID_TILE,
                "Tile not found"
            )

        if tile.owner != player.id:
            return ValidationResult.failure(
                ActionResult.NOT_OWNER,
                "You don't own this property"
            )

        if tile.mortgaged:
            return ValidationResult.failure(
                ActionResult.PROPERTY_MORTGAGED,
                "Already mortgaged"
            )

        return ValidationResult.success()

    def validate_unmortgage(self, player: Player, tile_id: str) -> ValidationResult:
        """Validate if player can lift the mortgage on a tile."""
        tile = self.board.get_tile(tile_id)
        if tile is None:
            return ValidationResult.failure(
                ActionResult.INVALID_TILE,
                "Tile not found"
            )

        if tile.owner != player.id:
            return ValidationResult.failure(
                ActionResult.NOT_OWNER,
                "You don't own this property"
            )

        if not tile.mortgaged:
            return ValidationResult.failure(
                ActionResult.NOT_MORTGAGED,
                "Not mortgaged"
            )

        if not player.can_afford(tile.unmortgage_cost):
            return ValidationResult.failure(
                ActionResult.INSUFFICIENT_FUNDS,
                f"Need ${tile.unmortgage_cost} to unmortgage"
            )

        return ValidationResult.success()

    # =========== Trading ===========

    def _validate_holdings(
        self,
        owner: Player,
        tile_ids: List[str],
        message_prefix: str
    ) -> ValidationResult:
        for tile_id in tile_ids:
            tile = self.board.get_tile(tile_id)
            if tile is None or tile.owner != owner.id:
                return ValidationResult.failure(
                    ActionResult.NOT_OWNER,
                    f"{message_prefix} {tile_id}"
                )
        return ValidationResult.success()

    def validate_trade_offer(
        self,
        from_player: Player,
        to_player: Player | None,
        offer_tiles: List[str],
        offer_cash: int,
        request_tiles: List[str],
        request_cash: int
    ) -> ValidationResult:
        """Validate a trade proposal at creation time."""
        if to_player is None:
            return ValidationResult.failure(
                ActionResult.INVALID_TRADE,
                "Trade partner not found"
            )

        if to_player.id == from_player.id:
            return ValidationResult.failure(
                ActionResult.INVALID_TRADE,
                "You cannot trade with yourself"
            )

        if to_player.is_bankrupt:
            return ValidationResult.failure(
                ActionResult.PLAYER_BANKRUPT,
                f"{to_player.name} is bankrupt"
            )

        if offer_cash < 0 or request_cash < 0:
            return ValidationResult.failure(
                ActionResult.INVALID_TRADE,
                "Cash amounts cannot be negative"
            )

        validation = self._validate_holdings(from_player, offer_tiles, "You don't own")
        if not validation.valid:
            return validation

        validation = self._validate_holdings(to_player, request_tiles, "They don't own")
        if not validation.valid:
            return validation

        if not from_player.can_afford(offer_cash):
            return ValidationResult.failure(
                ActionResult.INSUFFICIENT_FUNDS,
                "Not enough cash"
            )

        return ValidationResult.success()

    def validate_trade_acceptance(
        self,
        trade: TradeOffer,
        from_player: Player,
        to_player: Player
    ) -> ValidationResult:
        """Re-validate a pending trade at the moment it is accepted."""
        if from_player.is_bankrupt or to_player.is_bankrupt:
            return ValidationResult.failure(
                ActionResult.PLAYER_BANKRUPT,
                "A party to this trade is bankrupt"
            )

        if not to_player.can_afford(trade.request_cash):
            return ValidationResult.failure(
                ActionResult.INSUFFICIENT_FUNDS,
                "Not enough cash to accept"
            )

        if not from_player.can_afford(trade.offer_cash):
            return ValidationResult.failure(
                ActionResult.INSUFFICIENT_FUNDS,
                f"{from_player.name} can no longer cover the offered cash"
            )

        validation = self._validate_holdings(
            from_player, trade.offer_tiles, f"{from_player.name} no longer owns"
        )
        if not validation.valid:
            return validation

        return self._validate_holdings(
            to_player, trade.request_tiles, "You no longer own"
        )
