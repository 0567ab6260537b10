"""
Game engine package.
"""
from .dice import Dice, DiceResult
from .player import Player
from .board import Board, Tile, TileTemplate, CATALOG
from .actions import BuyPrompt, RentPaid, PendingAction
from .trade import TradeOffer
from .rules import RuleEngine, ValidationResult, ActionResult
from .game import Game, create_game

__all__ = [
    "Dice",
    "DiceResult",
    "Player",
    "Board",
    "Tile",
    "TileTemplate",
    "CATALOG",
    "BuyPrompt",
    "RentPaid",
    "PendingAction",
    "TradeOffer",
    "RuleEngine",
    "ValidationResult",
    "ActionResult",
    "Game",
    "create_game",
]
