"""
Main game orchestration - the authoritative state machine for one game.

Every operation runs to completion synchronously. Operations that can refuse
return a ValidationResult; IGNORED results mean nothing changed and nothing
should be reported.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from shared.constants import STARTING_CASH, MAX_PLAYERS, PLAYER_COLORS, GO_BONUS
from shared.enums import GamePhase, TileKind, TradeStatus

from .actions import BuyPrompt, PendingAction, RentPaid
from .board import Board, Tile
from .dice import Dice, DiceResult
from .player import Player
from .rules import RuleEngine, ValidationResult, ActionResult
from .trade import TradeOffer


@dataclass
class Game:
    """
    Main game class that orchestrates all gameplay.
    """

    # Configuration
    starting_cash: int = STARTING_CASH
    max_players: int = MAX_PLAYERS

    # Game components
    board: Board = field(default_factory=Board)
    dice: Dice = field(default_factory=Dice)
    rules: RuleEngine = field(init=False)

    # Players
    players: Dict[str, Player] = field(default_factory=dict)
    turn_order: List[str] = field(default_factory=list)
    current_player_index: int = 0

    # Turn state
    last_roll: Optional[DiceResult] = None
    doubles_streak: int = 0
    phase: GamePhase = GamePhase.WAITING
    pending_action: Optional[PendingAction] = None

    # History
    action_log: List[str] = field(default_factory=lambda: ["Game created"])
    trade_offers: List[TradeOffer] = field(default_factory=list)
    winner_id: Optional[str] = None

    def __post_init__(self):
        """Initialize rule engine after board is created."""
        self.rules = RuleEngine(self.board)

    @property
    def current_player(self) -> Optional[Player]:
        """Get the current player."""
        if not self.turn_order:
            return None
        index = self.current_player_index % len(self.turn_order)
        return self.players.get(self.turn_order[index])

    @property
    def current_player_id(self) -> Optional[str]:
        player = self.current_player
        return player.id if player else None

    @property
    def active_trade_offers(self) -> List[TradeOffer]:
        """Offers still awaiting a response."""
        return [trade for trade in self.trade_offers if trade.is_pending]

    @property
    def is_over(self) -> bool:
        return self.phase == GamePhase.ENDED

    def log(self, message: str) -> None:
        """Append a human-readable line to the action log."""
        self.action_log.append(message)

    def _lookup(self, player_id: str) -> Tuple[Optional[Player], ValidationResult]:
        player = self.players.get(player_id)
        if player is None:
            return None, ValidationResult.failure(
                ActionResult.PLAYER_NOT_FOUND,
                "Player not found"
            )
        return player, ValidationResult.success()

    def _participant(self, player_id: str) -> Tuple[Optional[Player], ValidationResult]:
        player, validation = self._lookup(player_id)
        if player is None:
            return None, validation
        return player, self.rules.validate_participant(player, self.phase)

    # =========== Player management ===========

    def add_player(self, name: str) -> Tuple[bool, str, Optional[Player]]:
        """
        Add a player to the game.

        Args:
            name: Display name

        Returns:
            Tuple of (success, message, player)
        """
        if self.is_over:
            return False, "The game is over", None

        if len(self.players) >= self.max_players:
            return False, f"Game is full (max {self.max_players} players)", None

        index = len(self.players)
        player = Player(
            id=f"p{index + 1}",
            name=name,
            color=PLAYER_COLORS[index % len(PLAYER_COLORS)],
            cash=self.starting_cash,
        )
        self.players[player.id] = player
        self.turn_order.append(player.id)

        if index > 0:
            self.log(f"{name} joined the game")

        return True, f"{name} joined", player

    # =========== Turn flow ===========

    def roll_dice(self, player_id: Optional[str] = None) -> Tuple[ValidationResult, Optional[DiceResult]]:
        """
        Roll for the active player and resolve the move.

        Args:
            player_id: Acting player; when given, turn rules are enforced first

        Returns:
            Tuple of (validation, dice result)
        """
        player = self.current_player
        if player_id is not None:
            actor, validation = self._lookup(player_id)
            if actor is None:
                return validation, None
            validation = self.rules.validate_roll_dice(actor, self.current_player_id, self.phase)
            if not validation.valid:
                return validation, None

        if player is None:
            return ValidationResult.failure(ActionResult.NOT_YOUR_TURN, "No active player"), None

        result = self.dice.roll()
        self.last_roll = result
        self.doubles_streak = self.doubles_streak + 1 if result.is_double else 0
        self.log(f"{player.name} rolled {result.die1} + {result.die2} = {result.total}")

        if self.doubles_streak >= 3:
            player.send_to_jail()
            self.log(f"{player.name} rolled 3 doubles and was sent to jail for speeding!")
            self.end_turn()
            return ValidationResult.success("Sent to jail"), result

        self.move_player(result.total)

        # A buy prompt holds the turn; a bankruptcy has already moved it on
        if player.is_bankrupt or self.phase == GamePhase.ACTING:
            return ValidationResult.success(), result

        self._finish_move()
        return ValidationResult.success(), result

    def move_player(self, steps: int) -> None:
        """Advance the active player and resolve the tile they land on."""
        player = self.current_player
        if player is None:
            return

        if player.move_forward(steps):
            self.log(f"{player.name} passed GO! Collected ${GO_BONUS}")

        tile = self.board.tile_at(player.position)
        self.log(f"{player.name} landed on {tile.name}")
        self._resolve_landing(player, tile)

    def _resolve_landing(self, player: Player, tile: Tile) -> None:
        self.pending_action = None

        if tile.kind == TileKind.POLICE:
            player.send_to_jail()
            self.log(f"{player.name} was caught by the police and sent to jail!")
            return

        if tile.kind == TileKind.TAX:
            self._charge(player, tile.price, None)
            return

        if not tile.is_ownable:
            return

        if not tile.is_owned:
            if player.can_afford(tile.price):
                self.pending_action = BuyPrompt(
                    tile_id=tile.id,
                    tile_name=tile.name,
                    price=tile.price,
                    country=tile.country,
                )
                self.phase = GamePhase.ACTING
            return

        if tile.owner == player.id:
            return

        rent = self.board.calculate_rent(tile)
        if tile.kind == TileKind.UTILITY and self.last_roll:
            rent *= self.last_roll.total

        if rent > 0:
            self._charge(player, rent, self.players.get(tile.owner))

    def _charge(self, player: Player, amount: int, payee: Optional[Player]) -> None:
        """Debit rent or tax, then run the auto-bankruptcy check."""
        player.pay(amount)

        if payee is None:
            self.log(f"{player.name} paid ${amount} in tax")
            self.pending_action = RentPaid(amount=amount, payee_label="Tax")
        else:
            payee.add_cash(amount)
            self.log(f"{player.name} paid ${amount} rent to {payee.name}")
            self.pending_action = RentPaid(amount=amount, payee_label=payee.name)

        self._check_auto_bankruptcy(player)

    def _check_auto_bankruptcy(self, player: Player) -> None:
        if player.cash >= 0:
            return

        # Unmortgaged tiles can still raise cash
        if any(not tile.mortgaged for tile in self.board.tiles_owned_by(player.id)):
            return

        self.log(f"{player.name} cannot pay the debt")
        self.declare_bankruptcy(player.id)

    def _finish_move(self) -> None:
        """Doubles hand the dice back; otherwise the turn can be ended."""
        if self.last_roll and self.last_roll.is_double:
            self.phase = GamePhase.WAITING
            self.log("Doubles! Roll again.")
        else:
            self.phase = GamePhase.TURN_ENDED

    def end_turn(self, player_id: Optional[str] = None) -> ValidationResult:
        """
        Pass the turn to the next player still in the game.

        Args:
            player_id: Acting player; when given, turn rules are enforced first
        """
        if player_id is not None:
            player, validation = self._lookup(player_id)
            if player is None:
                return validation
            validation = self.rules.validate_end_turn(player, self.current_player_id, self.phase)
            if not validation.valid:
                return validation

        if not self.turn_order or self.is_over:
            return ValidationResult.ignore()

        count = len(self.turn_order)
        next_index = (self.current_player_index + 1) % count
        steps = 0
        while self.players[self.turn_order[next_index]].is_bankrupt and steps < count:
            next_index = (next_index + 1) % count
            steps += 1

        self.current_player_index = next_index
        self.pending_action = None
        self.doubles_streak = 0
        self.phase = GamePhase.WAITING
        self.log(f"--- Next turn: {self.current_player.name} ---")

        return ValidationResult.success()

    # =========== Property actions ===========

    def buy_property(self, player_id: str, tile_id: str) -> ValidationResult:
        """
        Buy an unowned tile at list price.

        Returns:
            IGNORED when the tile is gone or no longer affordable
        """
        player, validation = self._lookup(player_id)
        if player is None:
            return validation

        validation = self.rules.validate_turn_action(player, self.current_player_id, self.phase)
        if not validation.valid:
            return validation

        validation = self.rules.validate_buy_property(player, tile_id)
        if not validation.valid:
            return validation

        tile = self.board.get_tile(tile_id)
        player.pay(tile.price)
        tile.owner = player.id
        player.add_property(tile.id)
        self.log(f"{player.name} bought {tile.name} for ${tile.price}")

        self.pending_action = None
        self._finish_move()
        return ValidationResult.success(f"Bought {tile.name}")

    def pass_property(self, player_id: str) -> ValidationResult:
        """Decline the pending purchase."""
        player, validation = self._lookup(player_id)
        if player is None:
            return validation

        validation = self.rules.validate_turn_action(player, self.current_player_id, self.phase)
        if not validation.valid:
            return validation

        prompt = self.pending_action
        if not isinstance(prompt, BuyPrompt):
            return ValidationResult.ignore()

        self.pending_action = None
        self.log(f"{player.name} declined to buy {prompt.tile_name}")
        self._finish_move()
        return ValidationResult.success()

    def upgrade_house(self, player_id: str, tile_id: str) -> ValidationResult:
        """Build the next level on a street."""
        player, validation = self._participant(player_id)
        if not validation.valid:
            return validation

        validation = self.rules.validate_upgrade(player, tile_id)
        if not validation.valid:
            return validation

        tile = self.board.get_tile(tile_id)
        cost = tile.next_upgrade_cost
        player.pay(cost)
        tile.house_level += 1
        self.log(f"{player.name} upgraded {tile.name} to Lv.{tile.house_level} (${cost})")

        return ValidationResult.success(f"{tile.name} upgraded to level {tile.house_level}")

    def mortgage_property(self, player_id: str, tile_id: str) -> ValidationResult:
        """Mortgage a tile, selling its houses back first."""
        player, validation = self._participant(player_id)
        if not validation.valid:
            return validation

        validation = self.rules.validate_mortgage(player, tile_id)
        if not validation.valid:
            return validation

        tile = self.board.get_tile(tile_id)
        if tile.house_level > 0:
            refund = tile.house_cost * tile.house_level // 2
            player.add_cash(refund)
            self.log(f"{player.name} sold {tile.house_level} houses on {tile.name} for ${refund}")
            tile.house_level = 0

        tile.mortgaged = True
        player.add_cash(tile.mortgage_value)
        self.log(f"{player.name} mortgaged {tile.name} for ${tile.mortgage_value}")

        return ValidationResult.success(f"Mortgaged {tile.name}")

    def unmortgage_property(self, player_id: str, tile_id: str) -> ValidationResult:
        """Lift a mortgage by repaying it with interest."""
        player, validation = self._participant(player_id)
        if not validation.valid:
            return validation

        validation = self.rules.validate_unmortgage(player, tile_id)
        if not validation.valid:
            return validation

        tile = self.board.get_tile(tile_id)
        cost = tile.unmortgage_cost
        player.pay(cost)
        tile.mortgaged = False
        self.log(f"{player.name} unmortgaged {tile.name} for ${cost}")

        return ValidationResult.success(f"Unmortgaged {tile.name}")

    # =========== Bankruptcy ===========

    def declare_bankruptcy(self, player_id: str) -> ValidationResult:
        """
        Remove a player from play and return their tiles to the bank.

        Returns:
            IGNORED if the player is already bankrupt or the game has ended
        """
        player, validation = self._lookup(player_id)
        if player is None:
            return validation

        if player.is_bankrupt or self.is_over:
            return ValidationResult.ignore()

        was_current = self.current_player_id == player_id

        for tile in self.board.tiles_owned_by(player_id):
            tile.release()
        player.declare_bankruptcy()

        if player_id in self.turn_order:
            removed = self.turn_order.index(player_id)
            self.turn_order.pop(removed)
            if removed < self.current_player_index:
                self.current_player_index -= 1
            elif removed == self.current_player_index and self.current_player_index >= len(self.turn_order):
                self.current_player_index = 0

        self.log(f"{player.name} declared bankruptcy!")

        remaining = [pid for pid in self.turn_order if not self.players[pid].is_bankrupt]
        self.pending_action = None

        if len(remaining) <= 1:
            self.phase = GamePhase.ENDED
            if remaining:
                self.winner_id = remaining[0]
                self.log(f"{self.players[self.winner_id].name} WINS THE GAME!")
        else:
            self.phase = GamePhase.WAITING
            if was_current:
                self.doubles_streak = 0

        return ValidationResult.success(f"{player.name} is bankrupt")

    # =========== Trading ===========

    def create_trade_offer(
        self,
        from_id: str,
        to_id: str,
        offer_tiles: List[str],
        offer_cash: int,
        request_tiles: List[str],
        request_cash: int
    ) -> Tuple[ValidationResult, Optional[TradeOffer]]:
        """
        Propose a trade. Nothing is held in escrow.

        Returns:
            Tuple of (validation, created offer)
        """
        from_player, validation = self._participant(from_id)
        if not validation.valid:
            return validation, None

        offer_tiles = list(dict.fromkeys(offer_tiles))
        request_tiles = list(dict.fromkeys(request_tiles))

        validation = self.rules.validate_trade_offer(
            from_player, self.players.get(to_id),
            offer_tiles, offer_cash, request_tiles, request_cash
        )
        if not validation.valid:
            return validation, None

        trade = TradeOffer(
            from_id=from_id,
            to_id=to_id,
            offer_tiles=offer_tiles,
            offer_cash=offer_cash,
            request_tiles=request_tiles,
            request_cash=request_cash,
        )
        self.trade_offers.append(trade)
        self.log(f"{from_player.name} sent a trade offer to {self.players[to_id].name}")

        return ValidationResult.success("Trade offer sent"), trade

    def respond_to_trade(self, player_id: str, trade_id: str, accept: bool) -> ValidationResult:
        """Accept or reject a pending offer addressed to this player."""
        player, validation = self._participant(player_id)
        if not validation.valid:
            return validation

        trade = next((t for t in self.trade_offers if t.id == trade_id), None)
        if trade is None:
            return ValidationResult.failure(ActionResult.TRADE_NOT_FOUND, "Trade not found")

        if trade.to_id != player_id:
            return ValidationResult.failure(
                ActionResult.INVALID_TRADE,
                "This trade was not offered to you"
            )

        if not trade.is_pending:
            return ValidationResult.ignore()

        from_player = self.players[trade.from_id]

        if not accept:
            trade.status = TradeStatus.REJECTED
            self.log(f"{player.name} rejected the trade from {from_player.name}")
            return ValidationResult.success("Trade rejected")

        validation = self.rules.validate_trade_acceptance(trade, from_player, player)
        if not validation.valid:
            return validation

        self._transfer_tiles(trade.offer_tiles, from_player, player)
        self._transfer_tiles(trade.request_tiles, player, from_player)

        from_player.pay(trade.offer_cash)
        player.add_cash(trade.offer_cash)
        player.pay(trade.request_cash)
        from_player.add_cash(trade.request_cash)

        trade.status = TradeStatus.ACCEPTED
        self.log(f"Trade accepted! {from_player.name} <-> {player.name}")

        return ValidationResult.success("Trade completed")

    def _transfer_tiles(self, tile_ids: List[str], giver: Player, receiver: Player) -> None:
        # Houses do not survive a change of owner; the mortgage does
        for tile_id in tile_ids:
            tile = self.board.get_tile(tile_id)
            tile.owner = receiver.id
            tile.house_level = 0
            giver.remove_property(tile_id)
            receiver.add_property(tile_id)

    # =========== Serialization ===========

    def to_dict(self) -> dict:
        """Serialize the full game snapshot."""
        players = {}
        for player_id, player in self.players.items():
            data = player.to_dict()
            data["countryStatus"] = self.board.country_status(player_id)
            players[player_id] = data

        return {
            "players": players,
            "turnOrder": list(self.turn_order),
            "currentPlayerIndex": self.current_player_index,
            "currentPlayerId": self.current_player_id,
            "dice": self.last_roll.to_list() if self.last_roll else [0, 0],
            "doublesStreak": self.doubles_streak,
            "board": self.board.to_list(),
            "phase": self.phase.value,
            "pendingAction": self.pending_action.to_dict() if self.pending_action else None,
            "actionLog": list(self.action_log),
            "tradeOffers": [trade.to_dict() for trade in self.trade_offers],
            "activeTradeOffers": [trade.id for trade in self.active_trade_offers],
            "winnerId": self.winner_id,
            "startingCash": self.starting_cash,
            "maxPlayers": self.max_players,
        }


def create_game(
    player_names: List[str],
    starting_cash: int = STARTING_CASH,
    dice: Optional[Dice] = None
) -> Game:
    """
    Create a fresh game with one player per name, in order.

    Raises:
        ValueError: If no names are given or there are too many of them
    """
    if not player_names:
        raise ValueError("At least one player name is required")

    if len(player_names) > MAX_PLAYERS:
        raise ValueError(f"At most {MAX_PLAYERS} players can join a game")

    game = Game(starting_cash=starting_cash, dice=dice or Dice())
    for name in player_names:
        game.add_player(name)

    return game
