"""
Enumerations used throughout the game.
"""
from enum import Enum


class TileKind(str, Enum):
    """Kinds of tiles on the board."""
    START = "start"
    STREET = "street"
    CHEST = "chest"
    TAX = "tax"
    STATION = "station"
    CHANCE = "chance"
    JAIL = "jail"
    UTILITY = "utility"
    PARKING = "parking"
    POLICE = "police"

    @property
    def is_ownable(self) -> bool:
        return self in (TileKind.STREET, TileKind.STATION, TileKind.UTILITY)


class GamePhase(str, Enum):
    """Current phase of the active player's turn."""
    WAITING = "waiting"
    ACTING = "acting"
    TURN_ENDED = "turn_ended"
    ENDED = "ended"
    # Declared for client compatibility; auctions are never entered.
    AUCTION = "auction"


class PendingActionType(str, Enum):
    """Tags of the turn-blocking prompt shown to the active player."""
    BUY_PROMPT = "BUY_PROMPT"
    RENT_PAID = "RENT_PAID"
    # Declared for client compatibility; no transition produces these.
    CHANCE_CARD = "CHANCE_CARD"
    JAILED = "JAILED"
    TRADE_OFFER = "TRADE_OFFER"
    BANKRUPTCY_CONFIRM = "BANKRUPTCY_CONFIRM"


class TradeStatus(str, Enum):
    """Status of a trade offer."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class MessageType(str, Enum):
    """Kinds of messages between client and server."""
    # Client -> server
    CREATE_GAME = "CREATE_GAME"
    JOIN_GAME = "JOIN_GAME"
    RECONNECT = "RECONNECT"
    ROLL_DICE = "ROLL_DICE"
    BUY_PROPERTY = "BUY_PROPERTY"
    UPGRADE_HOUSE = "UPGRADE_HOUSE"
    MORTGAGE_PROPERTY = "MORTGAGE_PROPERTY"
    UNMORTGAGE_PROPERTY = "UNMORTGAGE_PROPERTY"
    DECLARE_BANKRUPTCY = "DECLARE_BANKRUPTCY"
    TRADE_OFFER = "TRADE_OFFER"
    TRADE_RESPOND = "TRADE_RESPOND"
    END_TURN = "END_TURN"

    # Server -> client
    WELCOME = "WELCOME"
    GAME_JOINED = "GAME_JOINED"
    GAME_UPDATE = "GAME_UPDATE"
    ERROR = "ERROR"
    RECONNECT_FAILED = "RECONNECT_FAILED"
