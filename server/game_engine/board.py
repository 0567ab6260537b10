"""
Board catalog, per-game tile state and rent calculation.

The catalog is computed once from the raw tile records in shared.constants and
never mutated. Each game gets its own Board of mutable Tile clones.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from shared.constants import (
    BOARD_SIZE, TILES, MAX_HOUSE_LEVEL, RENT_MULTIPLIERS_PERCENT,
    STATION_RENT_STEP, UNMORTGAGE_INTEREST_PERCENT, UTILITY_MULTIPLIERS,
)
from shared.enums import TileKind


# =============================================================================
# Pricing formulas
# =============================================================================

def base_rent_for(price: int) -> int:
    """Level-0 rent: 10% of the price, rounded down."""
    return price * 10 // 100


def rent_table_for(price: int) -> tuple[int, ...]:
    """Rent for house levels 0-5 (level 5 is a hotel)."""
    base = base_rent_for(price)
    return tuple(base * pct // 100 for pct in RENT_MULTIPLIERS_PERCENT)


def fallback_rent(base_rent: int, house_level: int) -> int:
    """Rent used when a street carries no rent table."""
    return base_rent * (100 + 75 * house_level) // 100


def upgrade_costs_for(price: int) -> tuple[int, ...]:
    """
    Cost of building each level, indexed by the current level.

    Levels 1-2 cost 50% of the price, levels 3-4 cost 75%, level 5 costs 100%.
    """
    half = price * 50 // 100
    three_quarters = price * 75 // 100
    return (half, half, three_quarters, three_quarters, price)


def mortgage_value_for(price: int) -> int:
    """Cash paid by the bank for a mortgage: half the price."""
    return price * 50 // 100


@dataclass(frozen=True)
class TileTemplate:
    """Static definition of one board square."""
    position: int
    id: str
    name: str
    kind: TileKind
    price: int | None = None
    base_rent: int = 0
    rent_table: tuple[int, ...] = ()
    upgrade_costs: tuple[int, ...] = ()
    house_cost: int = 0
    mortgage_value: int = 0
    country: str | None = None
    flag: str | None = None
    color: str | None = None


def build_catalog() -> tuple[TileTemplate, ...]:
    """Create the 40 tile templates from the raw constants."""
    templates = []
    for position, name, kind, price, country, flag, color in sorted(TILES):
        kind = TileKind(kind)
        pricing = {}

        if kind == TileKind.STREET:
            pricing = {
                "base_rent": base_rent_for(price),
                "rent_table": rent_table_for(price),
                "upgrade_costs": upgrade_costs_for(price),
                "house_cost": price * 50 // 100,
                "mortgage_value": mortgage_value_for(price),
            }
        elif kind in (TileKind.STATION, TileKind.UTILITY):
            pricing = {"mortgage_value": mortgage_value_for(price)}

        templates.append(TileTemplate(
            position=position,
            id=f"t{position}",
            name=name,
            kind=kind,
            price=price,
            country=country,
            flag=flag,
            color=color,
            **pricing,
        ))

    if len(templates) != BOARD_SIZE:
        raise ValueError(f"Board must have {BOARD_SIZE} tiles, got {len(templates)}")

    return tuple(templates)


CATALOG: tuple[TileTemplate, ...] = build_catalog()


# =============================================================================
# Per-game state
# =============================================================================

@dataclass
class Tile:
    """A board square with its per-game ownership and development."""

    template: TileTemplate

    # Ownership and development (owner None means the bank holds it)
    owner: Optional[str] = None
    house_level: int = 0
    mortgaged: bool = False

    @property
    def id(self) -> str:
        return self.template.id

    @property
    def position(self) -> int:
        return self.template.position

    @property
    def name(self) -> str:
        return self.template.name

    @property
    def kind(self) -> TileKind:
        return self.template.kind

    @property
    def price(self) -> int:
        return self.template.price or 0

    @property
    def country(self) -> str | None:
        return self.template.country

    @property
    def mortgage_value(self) -> int:
        return self.template.mortgage_value or mortgage_value_for(self.price)

    @property
    def unmortgage_cost(self) -> int:
        """Mortgage value plus 10% interest."""
        return self.mortgage_value * (100 + UNMORTGAGE_INTEREST_PERCENT) // 100

    @property
    def house_cost(self) -> int:
        return self.template.house_cost

    @property
    def is_ownable(self) -> bool:
        return self.kind.is_ownable

    @property
    def is_owned(self) -> bool:
        return self.owner is not None

    @property
    def next_upgrade_cost(self) -> int:
        """Cost of building the next level from the current one."""
        costs = self.template.upgrade_costs
        if self.house_level < len(costs):
            return costs[self.house_level]
        return self.house_cost

    def release(self) -> None:
        """Return the tile to the bank in its pristine state."""
        self.owner = None
        self.house_level = 0
        self.mortgaged = False

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        t = self.template
        return {
            "id": t.id,
            "position": t.position,
            "name": t.name,
            "type": t.kind.value,
            "price": t.price,
            "baseRent": t.base_rent,
            "rent": list(t.rent_table),
            "houseCost": t.house_cost,
            "upgradeCosts": list(t.upgrade_costs),
            "mortgageValue": t.mortgage_value,
            "maxHouses": MAX_HOUSE_LEVEL if t.kind == TileKind.STREET else 0,
            "country": t.country,
            "flag": t.flag,
            "color": t.color,
            "owner": self.owner,
            "houseCount": self.house_level,
            "mortgaged": self.mortgaged,
        }


@dataclass
class Board:
    """
    The 40-square ring for one game.
    Manages tile ownership and rent.
    """

    tiles: List[Tile] = field(default_factory=lambda: [Tile(template=t) for t in CATALOG])

    def __post_init__(self):
        self._by_id: Dict[str, Tile] = {tile.id: tile for tile in self.tiles}

    def tile_at(self, position: int) -> Tile:
        """Get the tile at a board position (0-39)."""
        return self.tiles[position % BOARD_SIZE]

    def get_tile(self, tile_id: str) -> Tile | None:
        """Get a tile by its id, if it exists."""
        return self._by_id.get(tile_id)

    def tiles_owned_by(self, player_id: str) -> List[Tile]:
        """Get all tiles owned by a player."""
        return [tile for tile in self.tiles if tile.owner == player_id]

    def count_owned(self, player_id: str, kind: TileKind) -> int:
        """Count how many tiles of a kind a player owns."""
        return sum(
            1 for tile in self.tiles
            if tile.kind == kind and tile.owner == player_id
        )

    def get_country_tiles(self, country: str) -> List[Tile]:
        """Get all streets in a country group."""
        return [tile for tile in self.tiles if tile.country == country]

    def owns_full_country(self, player_id: str, country: str | None) -> bool:
        """Check if player owns every street in a country group."""
        if not country:
            return False
        country_tiles = self.get_country_tiles(country)
        return bool(country_tiles) and all(t.owner == player_id for t in country_tiles)

    def country_status(self, player_id: str) -> dict[str, dict]:
        """Owned / total / complete counts for every country group."""
        status: dict[str, dict] = {}
        for tile in self.tiles:
            if not tile.country:
                continue
            entry = status.setdefault(tile.country, {"owned": 0, "total": 0, "complete": False})
            entry["total"] += 1
            if tile.owner == player_id:
                entry["owned"] += 1
        for entry in status.values():
            entry["complete"] = entry["owned"] == entry["total"]
        return status

    def calculate_rent(self, tile: Tile) -> int:
        """
        Calculate the static rent for a tile.

        For utilities this is only the dice multiplier (4 or 10); the caller
        multiplies it by the roll that triggered the landing.
        """
        if tile.mortgaged or not tile.is_owned:
            return 0

        if tile.kind == TileKind.STREET:
            rents = tile.template.rent_table
            if len(rents) > tile.house_level:
                return rents[tile.house_level]
            return fallback_rent(tile.template.base_rent, tile.house_level)

        if tile.kind == TileKind.STATION:
            return STATION_RENT_STEP * self.count_owned(tile.owner, TileKind.STATION)

        if tile.kind == TileKind.UTILITY:
            owned = self.count_owned(tile.owner, TileKind.UTILITY)
            return UTILITY_MULTIPLIERS.get(owned, UTILITY_MULTIPLIERS[2])

        return 0

    def to_list(self) -> list[dict]:
        """Convert board state to a list ordered by position."""
        return [tile.to_dict() for tile in self.tiles]
