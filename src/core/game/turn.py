"""
Turn state: dice, the pending-decision sub-state and turn bookkeeping.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class DiceRoll:
    """Two dice and their total."""

    values: Tuple[int, int]
    total: int
    timestamp: int = field(default_factory=now_ms)

    @classmethod
    def of(cls, die1: int, die2: int) -> "DiceRoll":
        return cls(values=(die1, die2), total=die1 + die2)

    @property
    def is_double(self) -> bool:
        return self.values[0] == self.values[1]

    def to_dict(self) -> dict:
        return {"values": list(self.values), "total": self.total, "timestamp": self.timestamp}


class DecisionKind(Enum):
    NONE = "none"
    AWAITING_PURCHASE = "awaiting_purchase"
    AWAITING_UPGRADE = "awaiting_upgrade"


@dataclass(frozen=True)
class PendingDecision:
    """
    At most one decision is outstanding per turn.

    Holding it in a single slot makes "awaiting purchase" and "awaiting
    upgrade" mutually exclusive by construction.
    """

    kind: DecisionKind = DecisionKind.NONE
    tile_id: Optional[str] = None

    @classmethod
    def none(cls) -> "PendingDecision":
        return cls()

    @classmethod
    def purchase(cls, tile_id: str) -> "PendingDecision":
        return cls(DecisionKind.AWAITING_PURCHASE, tile_id)

    @classmethod
    def upgrade(cls, tile_id: str) -> "PendingDecision":
        return cls(DecisionKind.AWAITING_UPGRADE, tile_id)

    @property
    def awaiting_purchase(self) -> Optional[str]:
        return self.tile_id if self.kind == DecisionKind.AWAITING_PURCHASE else None

    @property
    def awaiting_upgrade(self) -> Optional[str]:
        return self.tile_id if self.kind == DecisionKind.AWAITING_UPGRADE else None


@dataclass
class TurnState:
    """Per-turn fields; replaced wholesale when the turn advances."""

    current_player_id: str
    rolled: bool = False
    dice: Optional[DiceRoll] = None
    pending: PendingDecision = field(default_factory=PendingDecision.none)
    started_at: int = field(default_factory=now_ms)

    @property
    def awaiting_purchase(self) -> Optional[str]:
        return self.pending.awaiting_purchase

    @property
    def awaiting_upgrade(self) -> Optional[str]:
        return self.pending.awaiting_upgrade

    def to_dict(self) -> dict:
        return {
            "current_player_id": self.current_player_id,
            "rolled": self.rolled,
            "dice": self.dice.to_dict() if self.dice else None,
            "awaiting_purchase": self.awaiting_purchase,
            "awaiting_upgrade": self.awaiting_upgrade,
            "started_at": self.started_at,
        }
