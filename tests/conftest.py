"""Shared test fixtures for Banco engine tests."""

import random
from typing import List

import pytest

from src.core import create_game


class ScriptedRandom(random.Random):
    """Random source whose dice can be queued ahead of time.

    ``randint`` pops queued values first and falls back to the seeded
    generator. Shuffles never consume queued values.
    """

    def __init__(self, seed: int = 0):
        super().__init__(seed)
        self.queued: List[int] = []

    def queue_dice(self, *values: int) -> None:
        self.queued.extend(values)

    def randint(self, a: int, b: int) -> int:
        if self.queued:
            return self.queued.pop(0)
        return super().randint(a, b)


@pytest.fixture
def rng():
    """Scripted random source with a fixed seed."""
    return ScriptedRandom(42)


@pytest.fixture
def lobby_game(rng):
    """Room in the lobby with Alice (host) and Bob."""
    game = create_game("room1", "Alice", rng=rng)
    game.add_player("Bob")
    return game


@pytest.fixture
def game(lobby_game):
    """Started two-player game; Alice moves first."""
    lobby_game.start_game(lobby_game.host_id)
    return lobby_game


@pytest.fixture
def alice(game):
    return game.players[0]


@pytest.fixture
def bob(game):
    return game.players[1]


@pytest.fixture
def roll(game):
    """Queue a specific roll for a player and perform it."""

    def _roll(player, d1: int, d2: int):
        game.rng.queue_dice(d1, d2)
        return game.roll_dice(player.player_id)

    return _roll
