from src.core.game.game import GameState, GameStatus, create_game
from src.core.game.player import PlayerState
from src.core.game.board import Board
from src.core.game.config import GameSettings, WinCondition, sanitize_settings

__all__ = [
    "GameState",
    "GameStatus",
    "create_game",
    "PlayerState",
    "Board",
    "GameSettings",
    "WinCondition",
    "sanitize_settings",
]
