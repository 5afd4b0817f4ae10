import copy
from typing import Dict, List, Optional, Sequence

from src.core.game.config import PROPERTY_PRICE_MULTIPLIER, PROPERTY_RENT_MULTIPLIER
from src.core.game.spaces import (
    EventTile,
    FreeTile,
    GoToJailTile,
    JailTile,
    PropertyTile,
    StartTile,
    TaxTile,
    Tile,
    TileType,
)

AURORA_BOARD: Sequence[Tile] = (
    StartTile("start", "Start", 0),
    PropertyTile("p1", "Blue Lake", 1, price=100, base_rent=25, color="#5FB3B3"),
    PropertyTile("p2", "Solar Square", 2, price=120, base_rent=30, color="#5FB3B3"),
    TaxTile("tax1", "Income Tax", 3, amount=150),
    EventTile("event1", "Fortune", 4),
    PropertyTile("p3", "Shadow Village", 5, price=140, base_rent=35, color="#E27D60"),
    PropertyTile("p4", "Amber Garden", 6, price=160, base_rent=40, color="#E27D60"),
    JailTile("jail", "Jail / Visiting", 7),
    PropertyTile("p5", "Turquoise Sea", 8, price=180, base_rent=45, color="#4D9DE0"),
    PropertyTile("p6", "Sapphire Shore", 9, price=200, base_rent=50, color="#4D9DE0"),
    TaxTile("tax2", "Luxury Tax", 10, amount=100),
    EventTile("event2", "Fortune", 11),
    PropertyTile("p7", "Ruby Valley", 12, price=220, base_rent=55, color="#C06C84"),
    PropertyTile("p8", "Crimson Fort", 13, price=240, base_rent=60, color="#C06C84"),
    FreeTile("free", "Zen Break", 14),
    PropertyTile("p9", "Amber District", 15, price=260, base_rent=65, color="#F67280"),
    PropertyTile("p10", "Coral Hill", 16, price=280, base_rent=70, color="#F67280"),
    EventTile("event3", "Fortune", 17),
    PropertyTile("p11", "Aurora Prime", 18, price=300, base_rent=75, color="#355C7D"),
    GoToJailTile("go-to-jail", "Go to Jail", 19),
)

BOARDS: Dict[str, Sequence[Tile]] = {
    "Aurora": AURORA_BOARD,
}

DEFAULT_BOARD_NAME = "Aurora"


class Board:
    """
    A game's own copy of a board template.

    Template tiles are never mutated; property prices and base rents are
    scaled by the configured multipliers when the copy is made.
    """

    def __init__(self, name: str = DEFAULT_BOARD_NAME):
        template = BOARDS.get(name, BOARDS[DEFAULT_BOARD_NAME])
        self.name = name if name in BOARDS else DEFAULT_BOARD_NAME
        self.tiles: List[Tile] = [self._clone(tile) for tile in template]
        self._by_id: Dict[str, Tile] = {tile.id: tile for tile in self.tiles}

        for position, tile in enumerate(self.tiles):
            if tile.index != position:
                raise ValueError(f"Tile {tile.id} has index {tile.index}, expected {position}")

    @staticmethod
    def _clone(tile: Tile) -> Tile:
        clone = copy.copy(tile)
        if isinstance(clone, PropertyTile):
            clone.price = round(clone.price * PROPERTY_PRICE_MULTIPLIER)
            clone.base_rent = round(clone.base_rent * PROPERTY_RENT_MULTIPLIER)
            clone.owner_id = None
            clone.level = 0
        return clone

    def __len__(self) -> int:
        return len(self.tiles)

    def get_tile(self, position: int) -> Tile:
        """Get the tile at the given position."""
        return self.tiles[position % len(self.tiles)]

    def get_by_id(self, tile_id: str) -> Optional[Tile]:
        return self._by_id.get(tile_id)

    def get_property(self, tile_id: str) -> Optional[PropertyTile]:
        """Get a property tile by id, or None if it is not a property."""
        tile = self.get_by_id(tile_id)
        return tile if isinstance(tile, PropertyTile) else None

    def properties(self) -> List[PropertyTile]:
        return [t for t in self.tiles if isinstance(t, PropertyTile)]

    def properties_owned_by(self, player_id: str) -> List[PropertyTile]:
        return [t for t in self.properties() if t.owner_id == player_id]

    def jail_index(self) -> Optional[int]:
        for tile in self.tiles:
            if tile.tile_type == TileType.JAIL:
                return tile.index
        return None
