"""
Tests for the board catalog, pricing formulas and rent calculation.

Run from project root: python -m pytest tests/test_game_engine -v
"""

import dataclasses
import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from server.game_engine import Board, CATALOG
from server.game_engine.board import (
    base_rent_for, fallback_rent, mortgage_value_for, rent_table_for, upgrade_costs_for,
)
from shared.enums import TileKind


# =============================================================================
# Catalog
# =============================================================================

def test_catalog_has_forty_tiles_in_position_order():
    assert len(CATALOG) == 40
    for index, template in enumerate(CATALOG):
        assert template.position == index
        assert template.id == f"t{index}"


def test_special_squares():
    assert CATALOG[0].kind == TileKind.START
    assert CATALOG[10].kind == TileKind.JAIL
    assert CATALOG[20].kind == TileKind.PARKING
    assert CATALOG[30].kind == TileKind.POLICE
    assert CATALOG[4].kind == TileKind.TAX and CATALOG[4].price == 200
    assert CATALOG[37].kind == TileKind.TAX and CATALOG[37].price == 100


def test_stations_and_utilities():
    stations = [t for t in CATALOG if t.kind == TileKind.STATION]
    utilities = [t for t in CATALOG if t.kind == TileKind.UTILITY]

    assert [t.position for t in stations] == [5, 15, 24, 35]
    assert all(t.price == 200 for t in stations)
    assert [t.position for t in utilities] == [12, 29]
    assert all(t.price == 150 for t in utilities)
    assert all(t.mortgage_value == t.price // 2 for t in stations + utilities)
    assert all(t.rent_table == () for t in stations + utilities)


def test_street_pricing_follows_formulas():
    for template in CATALOG:
        if template.kind != TileKind.STREET:
            continue
        price = template.price
        assert template.base_rent == price * 10 // 100
        assert template.rent_table[0] == template.base_rent
        assert template.rent_table[5] == int(template.base_rent * 7.5)
        assert template.house_cost == price // 2
        assert template.mortgage_value == price // 2
        assert template.upgrade_costs == (price // 2, price // 2, price * 3 // 4, price * 3 // 4, price)


def test_delhi_rent_table():
    delhi = CATALOG[3]
    assert delhi.name == "Delhi"
    assert delhi.rent_table == (16, 28, 40, 56, 80, 120)


def test_pricing_helpers_round_down():
    assert base_rent_for(145) == 14
    assert rent_table_for(140) == (14, 24, 35, 49, 70, 105)
    assert upgrade_costs_for(250) == (125, 125, 187, 187, 250)
    assert mortgage_value_for(145) == 72
    assert fallback_rent(16, 0) == 16
    assert fallback_rent(16, 4) == 64


def test_catalog_is_immutable():
    with pytest.raises(dataclasses.FrozenInstanceError):
        CATALOG[1].price = 1


def test_boards_do_not_share_tile_state():
    first, second = Board(), Board()
    first.get_tile("t3").owner = "p1"

    assert second.get_tile("t3").owner is None
    assert first.tile_at(43).id == "t3"


# =============================================================================
# Rent
# =============================================================================

def test_street_rent_by_level():
    board = Board()
    delhi = board.get_tile("t3")
    assert board.calculate_rent(delhi) == 0

    delhi.owner = "p1"
    assert board.calculate_rent(delhi) == 16

    delhi.house_level = 5
    assert board.calculate_rent(delhi) == 120


def test_mortgaged_tile_charges_nothing():
    board = Board()
    delhi = board.get_tile("t3")
    delhi.owner = "p1"
    delhi.mortgaged = True

    assert board.calculate_rent(delhi) == 0


def test_station_rent_scales_with_stations_held():
    board = Board()
    for count, tile_id in enumerate(["t5", "t15", "t24", "t35"], start=1):
        board.get_tile(tile_id).owner = "p1"
        assert board.calculate_rent(board.get_tile("t5")) == 25 * count


def test_utility_multiplier():
    board = Board()
    board.get_tile("t12").owner = "p1"
    assert board.calculate_rent(board.get_tile("t12")) == 4

    board.get_tile("t29").owner = "p1"
    assert board.calculate_rent(board.get_tile("t12")) == 10


def test_country_status():
    board = Board()
    board.get_tile("t1").owner = "p1"
    board.get_tile("t3").owner = "p1"

    status = board.country_status("p1")
    assert status["India"] == {"owned": 2, "total": 3, "complete": False}
    assert status["USA"] == {"owned": 0, "total": 3, "complete": False}
    assert not board.owns_full_country("p1", "India")

    board.get_tile("t9").owner = "p1"
    assert board.country_status("p1")["India"]["complete"]
    assert board.owns_full_country("p1", "India")


def test_tile_serialization_uses_wire_names():
    board = Board()
    data = board.get_tile("t3").to_dict()

    assert data["id"] == "t3"
    assert data["type"] == "street"
    assert data["rent"] == [16, 28, 40, 56, 80, 120]
    assert data["owner"] is None
    assert data["houseCount"] == 0
    assert data["mortgaged"] is False
    assert data["maxHouses"] == 5
