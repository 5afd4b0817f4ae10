"""
Player state and management.
"""

from src.core.game.config import MAX_JAIL_TURNS


class PlayerState:
    """Represents the complete economic and positional state of a player."""

    def __init__(self, player_id: str, name: str, starting_cash: int):
        self.player_id = player_id
        self.name = name
        self.money = starting_cash
        self.position = 0
        # 0 = free, otherwise escape attempts left (capped at MAX_JAIL_TURNS)
        self.in_jail_turns = 0
        self.is_bankrupt = False
        self.disconnected = False

    @property
    def in_jail(self) -> bool:
        return self.in_jail_turns > 0

    def send_to_jail(self, jail_index: int) -> None:
        self.position = jail_index
        self.in_jail_turns = MAX_JAIL_TURNS

    def release_from_jail(self) -> None:
        self.in_jail_turns = 0

    def to_dict(self) -> dict:
        return {
            "id": self.player_id,
            "name": self.name,
            "money": self.money,
            "position": self.position,
            "in_jail_turns": self.in_jail_turns,
            "bankrupt": self.is_bankrupt,
            "disconnected": self.disconnected,
        }

    def __repr__(self) -> str:
        return (
            f"PlayerState(id='{self.player_id}', name='{self.name}', "
            f"money={self.money}, position={self.position}, bankrupt={self.is_bankrupt})"
        )
