"""
Tests for net worth, finishing a game and the turn limit.
"""

import pytest

from src.core import GameStatus, create_game
from src.core.exceptions import NotActiveError, UnauthorizedError
from src.core.game.money import EventType


def _give(game, player, property_id, level=1):
    tile = game.board.get_property(property_id)
    tile.owner_id = player.player_id
    tile.level = level


def test_net_worth_counts_cash_and_properties(game, alice, bob):
    _give(game, alice, "p2", level=2)
    _give(game, alice, "p1")

    assert game.net_worth(alice.player_id) == 1500 + 480 + 200
    assert game.net_worth(bob.player_id) == 1500
    assert game.net_worth("nobody") == 0


def test_host_finishes_by_net_worth(game, alice, bob):
    _give(game, bob, "p11")

    winner = game.finish_by_net_worth(alice.player_id)

    assert winner == bob.player_id
    assert game.status == GameStatus.FINISHED
    assert game.winner_id == bob.player_id
    assert "Bob won with the highest net worth." in game.event_log.messages()


def test_tie_goes_to_first_player(game, alice):
    assert game.finish_by_net_worth(alice.player_id) == alice.player_id


def test_bankrupt_players_cannot_win_by_net_worth(rng):
    game = create_game("r1", "Alice", rng=rng)
    bob = game.add_player("Bob")
    carol = game.add_player("Carol")
    game.start_game(game.host_id)
    bob.money = 99999
    bob.is_bankrupt = True
    carol.money = 1600

    assert game.finish_by_net_worth() == carol.player_id


def test_only_host_can_finish(game, bob):
    with pytest.raises(UnauthorizedError):
        game.finish_by_net_worth(bob.player_id)
    assert game.status == GameStatus.ACTIVE


def test_finish_in_lobby_rejected(lobby_game):
    with pytest.raises(NotActiveError):
        lobby_game.finish_by_net_worth(lobby_game.host_id)


def test_finish_twice_returns_winner(game, alice):
    winner = game.finish_by_net_worth(alice.player_id)
    assert game.finish_by_net_worth(alice.player_id) == winner


def test_actions_rejected_after_finish(game, alice, bob):
    game.finish_by_net_worth(alice.player_id)

    with pytest.raises(NotActiveError):
        game.roll_dice(alice.player_id)
    with pytest.raises(NotActiveError):
        game.end_turn(bob.player_id)


def test_last_player_standing_wins(rng):
    game = create_game("r1", "Alice", rng=rng)
    game.add_player("Bob")
    game.add_player("Carol")
    game.start_game(game.host_id)
    alice, bob, carol = game.players

    bob.money = -1
    game.check_bankruptcy(bob)
    assert game.status == GameStatus.ACTIVE

    carol.money = -1
    game.check_bankruptcy(carol)
    assert game.status == GameStatus.FINISHED
    assert game.winner_id == alice.player_id


def test_turn_limit_finishes_game(rng):
    game = create_game(
        "r1",
        "Alice",
        {"win_condition": "highest-net-worth", "max_turns": 2},
        rng=rng,
    )
    bob = game.add_player("Bob")
    game.start_game(game.host_id)
    alice = game.players[0]
    bob.money += 100

    rng.queue_dice(3, 4)
    game.roll_dice(alice.player_id)
    game.end_turn(alice.player_id)
    assert game.status == GameStatus.ACTIVE

    rng.queue_dice(3, 4)
    game.roll_dice(bob.player_id)
    game.end_turn(bob.player_id)

    assert game.status == GameStatus.FINISHED
    assert game.winner_id == bob.player_id


def test_turn_limit_ignored_for_last_standing(rng):
    game = create_game("r1", "Alice", {"max_turns": 1}, rng=rng)
    bob = game.add_player("Bob")
    game.start_game(game.host_id)

    rng.queue_dice(3, 4)
    game.roll_dice(game.host_id)
    game.end_turn(game.host_id)

    assert game.status == GameStatus.ACTIVE
    assert game.turn.current_player_id == bob.player_id



def test_bankruptcy_happens_once(rng):
    game = create_game("r1", "Alice", rng=rng)
    game.add_player("Bob")
    game.add_player("Carol")
    game.start_game(game.host_id)
    bob = game.players[1]

    bob.money = -10
    game.check_bankruptcy(bob)
    bob.money -= 100
    game.check_bankruptcy(bob)

    bankruptcies = [e for e in game.event_log.get_events() if e.event_type == EventType.BANKRUPTCY]
    assert len(bankruptcies) == 1
    assert bob.is_bankrupt
    assert game.status == GameStatus.ACTIVE
