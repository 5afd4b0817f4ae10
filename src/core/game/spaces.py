"""
Board tile definitions and types.

Tiles form a closed family: every tile carries a ``tile_type`` tag and the
engine dispatches on that tag alone.
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional

from src.core.game.config import property_asset_value, property_rent, property_upgrade_cost


class TileType(Enum):
    """Types of tiles on the board."""

    START = "start"
    PROPERTY = "property"
    TAX = "tax"
    EVENT = "event"
    JAIL = "jail"
    GO_TO_JAIL = "go-to-jail"
    FREE = "free"


@dataclass
class Tile:
    """Base class for a board tile."""

    tile_type: ClassVar[TileType]

    id: str
    name: str
    index: int

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "index": self.index,
            "type": self.tile_type.value,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id='{self.id}', index={self.index})"


@dataclass
class StartTile(Tile):
    """The start tile; passing it pays the pass-start bonus."""

    tile_type: ClassVar[TileType] = TileType.START


@dataclass
class PropertyTile(Tile):
    """A property that can be bought and upgraded."""

    tile_type: ClassVar[TileType] = TileType.PROPERTY

    price: int = 0
    base_rent: int = 0
    color: str = ""
    owner_id: Optional[str] = None
    level: int = 0

    def is_owned(self) -> bool:
        return self.owner_id is not None

    @property
    def rent(self) -> int:
        return property_rent(self.base_rent, self.level)

    @property
    def upgrade_cost(self) -> Optional[int]:
        return property_upgrade_cost(self.price, self.level)

    @property
    def asset_value(self) -> int:
        return property_asset_value(self.price, self.level)

    def release(self) -> None:
        """Return the property to the bank."""
        self.owner_id = None
        self.level = 0

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update(
            price=self.price,
            base_rent=self.base_rent,
            color=self.color,
            owner_id=self.owner_id,
            level=self.level,
            rent=self.rent,
            upgrade_cost=self.upgrade_cost if self.is_owned() else None,
        )
        return data


@dataclass
class TaxTile(Tile):
    """A tax tile charging a fixed amount."""

    tile_type: ClassVar[TileType] = TileType.TAX

    amount: int = 0

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["amount"] = self.amount
        return data


@dataclass
class EventTile(Tile):
    """Draws an event card."""

    tile_type: ClassVar[TileType] = TileType.EVENT


@dataclass
class JailTile(Tile):
    """The jail; landing here normally is just visiting."""

    tile_type: ClassVar[TileType] = TileType.JAIL


@dataclass
class GoToJailTile(Tile):
    """Sends the player straight to jail."""

    tile_type: ClassVar[TileType] = TileType.GO_TO_JAIL


@dataclass
class FreeTile(Tile):
    """A rest stop with no effect."""

    tile_type: ClassVar[TileType] = TileType.FREE

