"""
Tests for the JSON message envelope.

Run from project root: python -m pytest tests/test_network -v
"""

import json
import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from shared.enums import MessageType
from shared.protocol import (
    ErrorMessage,
    GameJoinedMessage,
    Message,
    ProtocolError,
    TradeOfferRequest,
    WelcomeMessage,
    parse_message,
)


def test_parse_client_message():
    message = parse_message('{"kind": "UPGRADE_HOUSE", "payload": {"tileId": "t3"}}')

    assert message.kind == MessageType.UPGRADE_HOUSE
    assert message.payload == {"tileId": "t3"}


def test_missing_payload_defaults_to_empty():
    assert parse_message('{"kind": "ROLL_DICE"}').payload == {}


@pytest.mark.parametrize("raw", [
    "not json",
    "[1, 2, 3]",
    '{"payload": {}}',
    '{"kind": "FLY_TO_MOON", "payload": {}}',
    '{"kind": "ROLL_DICE", "payload": [1]}',
])
def test_malformed_frames_raise_protocol_error(raw):
    with pytest.raises(ProtocolError):
        parse_message(raw)


def test_server_messages_use_kind_and_payload():
    data = json.loads(WelcomeMessage.create("abc").to_json())
    assert data == {"kind": "WELCOME", "payload": {"connectionId": "abc"}}

    data = GameJoinedMessage.create("ABC123", "p2", {"phase": "waiting"}).to_dict()
    assert data["kind"] == "GAME_JOINED"
    assert data["payload"] == {"gameId": "ABC123", "playerId": "p2", "state": {"phase": "waiting"}}

    assert ErrorMessage.create("nope").to_dict() == {"kind": "ERROR", "payload": {"message": "nope"}}


def test_client_builders_round_trip_through_parser():
    request = TradeOfferRequest.create("p2", offer_tiles=["t1"], offer_cash=50)
    message = parse_message(request.to_json())

    assert message.kind == MessageType.TRADE_OFFER
    assert message.payload == {
        "to": "p2",
        "offerTiles": ["t1"],
        "offerCash": 50,
        "requestTiles": [],
        "requestCash": 0,
    }


def test_from_dict_rejects_non_objects():
    with pytest.raises(ProtocolError):
        Message.from_dict("ROLL_DICE")
