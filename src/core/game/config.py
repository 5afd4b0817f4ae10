"""
Game configuration settings and economic policy constants.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

BAIL_COST = 50
MAX_JAIL_TURNS = 3
MAX_PROPERTY_LEVEL = 4
LOG_LIMIT = 200

# Applied to the board template when a game clones it.
PROPERTY_PRICE_MULTIPLIER = 2
PROPERTY_RENT_MULTIPLIER = 2

MIN_STARTING_CASH = 500
MAX_STARTING_CASH = 4000
MIN_PASS_START_BONUS = 100
MAX_PASS_START_BONUS = 500
MIN_PLAYERS = 2
MAX_PLAYERS = 12


class WinCondition(str, Enum):
    """How a game is meant to be decided."""

    LAST_STANDING = "last-standing"
    HIGHEST_NET_WORTH = "highest-net-worth"


@dataclass
class GameSettings:
    """Per-room settings, fixed once the room is created."""

    starting_cash: int = 1500
    pass_start_bonus: int = 200
    max_players: int = MAX_PLAYERS
    board_name: str = "Aurora"
    win_condition: WinCondition = WinCondition.LAST_STANDING
    max_turns: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "starting_cash": self.starting_cash,
            "pass_start_bonus": self.pass_start_bonus,
            "max_players": self.max_players,
            "board_name": self.board_name,
            "win_condition": self.win_condition.value,
            "max_turns": self.max_turns,
        }


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def _as_int(value: Any, default: Optional[int]) -> Optional[int]:
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def sanitize_settings(overrides: Optional[Mapping[str, Any]] = None) -> GameSettings:
    """
    Merge client-supplied overrides onto the defaults.

    Missing or unparseable values fall back to the default first, then
    numeric values are clamped to their allowed range. Unknown board names
    and win conditions also fall back to the defaults.
    """
    # Imported here to avoid a cycle (board -> config).
    from src.core.game.board import BOARDS

    defaults = GameSettings()
    overrides = overrides or {}

    starting_cash = _as_int(overrides.get("starting_cash"), defaults.starting_cash)
    pass_start_bonus = _as_int(overrides.get("pass_start_bonus"), defaults.pass_start_bonus)
    max_players = _as_int(overrides.get("max_players"), defaults.max_players)

    board_name = overrides.get("board_name")
    if not isinstance(board_name, str) or board_name not in BOARDS:
        board_name = defaults.board_name

    try:
        win_condition = WinCondition(overrides.get("win_condition"))
    except ValueError:
        win_condition = defaults.win_condition

    max_turns = _as_int(overrides.get("max_turns"), None)
    if max_turns is not None and max_turns < 1:
        max_turns = None

    return GameSettings(
        starting_cash=clamp(starting_cash, MIN_STARTING_CASH, MAX_STARTING_CASH),
        pass_start_bonus=clamp(pass_start_bonus, MIN_PASS_START_BONUS, MAX_PASS_START_BONUS),
        max_players=clamp(max_players, MIN_PLAYERS, MAX_PLAYERS),
        board_name=board_name,
        win_condition=win_condition,
        max_turns=max_turns,
    )


def property_rent(base_rent: int, level: int) -> int:
    """Rent owed on a property: base rent doubling with every level above 1."""
    level = clamp(level, 1, MAX_PROPERTY_LEVEL)
    return base_rent * 2 ** (level - 1)


def property_upgrade_cost(price: int, level: int) -> Optional[int]:
    """Cost of raising a property from ``level`` to the next one, None at max level."""
    level = max(1, level)
    if level >= MAX_PROPERTY_LEVEL:
        return None
    return price * level


def property_asset_value(price: int, level: int) -> int:
    """Purchase price plus every upgrade cost sunk into the property."""
    level = clamp(level, 1, MAX_PROPERTY_LEVEL)
    return price * (1 + level * (level - 1) // 2)
