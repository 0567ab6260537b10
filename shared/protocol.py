"""
Message protocol for client-server communication.

All messages are JSON objects with a "kind" field and a "payload" object.
"""

from dataclasses import dataclass, field
from typing import Any
import json

from shared.enums import MessageType


class ProtocolError(ValueError):
    """Raised when an inbound frame is not a valid message envelope."""


@dataclass
class Message:
    """Base message structure for all client-server communication."""
    kind: MessageType
    payload: dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> str:
        """Serialize message to JSON string."""
        return json.dumps(self.to_dict())

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "kind": self.kind.value,
            "payload": self.payload,
        }

    @classmethod
    def from_json(cls, json_str: str | bytes) -> "Message":
        """Deserialize message from JSON string."""
        try:
            raw = json.loads(json_str)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ProtocolError(f"Invalid JSON: {e}") from e
        return cls.from_dict(raw)

    @classmethod
    def from_dict(cls, raw: Any) -> "Message":
        """Create message from dictionary."""
        if not isinstance(raw, dict):
            raise ProtocolError("Message must be a JSON object")

        try:
            kind = MessageType(raw.get("kind"))
        except ValueError:
            raise ProtocolError(f"Unknown message kind: {raw.get('kind')!r}") from None

        payload = raw.get("payload")
        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            raise ProtocolError("payload must be a JSON object")

        return cls(kind=kind, payload=payload)


def parse_message(raw: str | bytes) -> Message:
    """Parse a raw frame received from a client."""
    return Message.from_json(raw)


# =============================================================================
# Server -> Client Messages
# =============================================================================

@dataclass
class WelcomeMessage(Message):
    """First frame on every new connection."""
    kind: MessageType = MessageType.WELCOME

    @classmethod
    def create(cls, connection_id: str) -> "WelcomeMessage":
        return cls(payload={"connectionId": connection_id})


@dataclass
class GameJoinedMessage(Message):
    """Sent to a connection once it is bound to a (game, player) pair."""
    kind: MessageType = MessageType.GAME_JOINED

    @classmethod
    def create(cls, game_id: str, player_id: str, state: dict) -> "GameJoinedMessage":
        return cls(payload={
            "gameId": game_id,
            "playerId": player_id,
            "state": state,
        })


@dataclass
class GameUpdateMessage(Message):
    """Full game snapshot broadcast after every transition."""
    kind: MessageType = MessageType.GAME_UPDATE

    @classmethod
    def create(cls, state: dict) -> "GameUpdateMessage":
        return cls(payload={"state": state})


@dataclass
class ErrorMessage(Message):
    """Error response message."""
    kind: MessageType = MessageType.ERROR

    @classmethod
    def create(cls, message: str) -> "ErrorMessage":
        """Create an error message."""
        return cls(payload={"message": message})


@dataclass
class ReconnectFailedMessage(Message):
    """Reply to a RECONNECT that could not be honoured."""
    kind: MessageType = MessageType.RECONNECT_FAILED

    @classmethod
    def create(cls, message: str) -> "ReconnectFailedMessage":
        return cls(payload={"message": message})


# =============================================================================
# Lobby Messages (Client -> Server)
# =============================================================================

@dataclass
class CreateGameRequest(Message):
    """Request to create a new game."""
    kind: MessageType = MessageType.CREATE_GAME

    @classmethod
    def create(cls, player_name: str, starting_cash: int | None = None) -> "CreateGameRequest":
        payload = {"playerName": player_name}
        if starting_cash is not None:
            payload["startingCash"] = starting_cash
        return cls(payload=payload)


@dataclass
class JoinGameRequest(Message):
    """Request to join an existing game by code."""
    kind: MessageType = MessageType.JOIN_GAME

    @classmethod
    def create(cls, game_id: str, player_name: str) -> "JoinGameRequest":
        return cls(payload={"gameId": game_id, "playerName": player_name})


@dataclass
class ReconnectRequest(Message):
    """Request to re-bind a new connection to an existing player."""
    kind: MessageType = MessageType.RECONNECT

    @classmethod
    def create(cls, game_id: str, player_id: str) -> "ReconnectRequest":
        return cls(payload={"gameId": game_id, "playerId": player_id})


# =============================================================================
# Game Action Messages (Client -> Server)
# =============================================================================

@dataclass
class RollDiceRequest(Message):
    """Request to roll dice."""
    kind: MessageType = MessageType.ROLL_DICE

    @classmethod
    def create(cls) -> "RollDiceRequest":
        return cls()


@dataclass
class BuyPropertyRequest(Message):
    """Answer to a buy prompt (confirm=False passes)."""
    kind: MessageType = MessageType.BUY_PROPERTY

    @classmethod
    def create(cls, confirm: bool = True) -> "BuyPropertyRequest":
        return cls(payload={"confirm": confirm})


@dataclass
class UpgradeHouseRequest(Message):
    """Request to build one house level on a street."""
    kind: MessageType = MessageType.UPGRADE_HOUSE

    @classmethod
    def create(cls, tile_id: str) -> "UpgradeHouseRequest":
        return cls(payload={"tileId": tile_id})


@dataclass
class MortgagePropertyRequest(Message):
    """Request to mortgage a property."""
    kind: MessageType = MessageType.MORTGAGE_PROPERTY

    @classmethod
    def create(cls, tile_id: str) -> "MortgagePropertyRequest":
        return cls(payload={"tileId": tile_id})


@dataclass
class UnmortgagePropertyRequest(Message):
    """Request to unmortgage a property."""
    kind: MessageType = MessageType.UNMORTGAGE_PROPERTY

    @classmethod
    def create(cls, tile_id: str) -> "UnmortgagePropertyRequest":
        return cls(payload={"tileId": tile_id})


@dataclass
class DeclareBankruptcyRequest(Message):
    """Request to leave the game as bankrupt."""
    kind: MessageType = MessageType.DECLARE_BANKRUPTCY

    @classmethod
    def create(cls) -> "DeclareBankruptcyRequest":
        return cls()


@dataclass
class TradeOfferRequest(Message):
    """Propose a trade to another player."""
    kind: MessageType = MessageType.TRADE_OFFER

    @classmethod
    def create(
        cls,
        to: str,
        offer_tiles: list[str] | None = None,
        offer_cash: int = 0,
        request_tiles: list[str] | None = None,
        request_cash: int = 0,
    ) -> "TradeOfferRequest":
        return cls(payload={
            "to": to,
            "offerTiles": offer_tiles or [],
            "offerCash": offer_cash,
            "requestTiles": request_tiles or [],
            "requestCash": request_cash,
        })


@dataclass
class TradeRespondRequest(Message):
    """Accept or reject a trade addressed to the sender."""
    kind: MessageType = MessageType.TRADE_RESPOND

    @classmethod
    def create(cls, trade_id: str, accept: bool) -> "TradeRespondRequest":
        return cls(payload={"tradeId": trade_id, "accept": accept})


@dataclass
class EndTurnRequest(Message):
    """Request to end the current turn."""
    kind: MessageType = MessageType.END_TURN

    @classmethod
    def create(cls) -> "EndTurnRequest":
        return cls()
