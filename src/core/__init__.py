"""
Core domain layer for Banco.

Exposes the game engine primitives.
"""

from src.core.game import (
    Board,
    GameSettings,
    GameState,
    GameStatus,
    PlayerState,
    WinCondition,
    create_game,
    sanitize_settings,
)

__all__ = [
    "Board",
    "GameSettings",
    "GameState",
    "GameStatus",
    "PlayerState",
    "WinCondition",
    "create_game",
    "sanitize_settings",
]
