"""
Tests for event cards, the event deck, tax and passing Start.
"""

import random

from src.core import GameStatus, create_game
from src.core.game.cards import EVENT_CARDS, EventCard, EventDeck, MoneyEffect, MoveEffect


def _card(card_id):
    return next(c for c in EVENT_CARDS if c.id == card_id)


def _draw_on_event(game, player, roll, card_id):
    """Stack a card and land the player on the first event tile."""
    game.deck.stack([_card(card_id)])
    roll(player, 2, 2)
    assert "Alice drew an event card: " + _card(card_id).title in game.event_log.messages()


def test_tax_tile(game, alice, roll):
    roll(alice, 1, 2)

    assert alice.money == 1500 - 150
    assert "Alice paid 150 in tax" in game.event_log.messages()


def test_tax_can_bankrupt(game, alice, bob, roll):
    alice.money = 100
    roll(alice, 1, 2)

    assert alice.is_bankrupt
    assert game.status == GameStatus.FINISHED
    assert game.winner_id == bob.player_id


def test_free_tile_logs_rest(game, alice, roll):
    alice.position = 7
    roll(alice, 3, 4)

    assert alice.position == 14
    assert "Alice took a break at Zen Break" in game.event_log.messages()


def test_passing_start_pays_bonus(game, alice, roll):
    alice.position = 18
    roll(alice, 1, 2)

    assert alice.position == 1
    assert alice.money == 1500 + 200
    assert game.turn.awaiting_purchase == "p1"
    assert "Alice passed Start and received 200" in game.event_log.messages()


def test_pass_start_bonus_setting(rng):
    game = create_game("r1", "Alice", {"pass_start_bonus": 300}, rng=rng)
    game.add_player("Bob")
    game.start_game(game.host_id)
    alice = game.players[0]
    alice.position = 18

    rng.queue_dice(1, 2)
    game.roll_dice(alice.player_id)

    assert alice.money == 1500 + 300


def test_bonus_card(game, alice, roll):
    _draw_on_event(game, alice, roll, "bonus-100")
    assert alice.money == 1600
    assert "Alice received 100" in game.event_log.messages()


def test_tax_card(game, alice, roll):
    _draw_on_event(game, alice, roll, "tax-100")
    assert alice.money == 1400


def test_advance_card_resolves_new_tile(game, alice, roll):
    _draw_on_event(game, alice, roll, "advance-3")
    assert alice.position == 7
    assert alice.money == 1500
    assert not alice.in_jail


def test_back_card_resolves_new_tile(game, alice, roll):
    _draw_on_event(game, alice, roll, "back-2")
    assert alice.position == 2
    assert game.turn.awaiting_purchase == "p2"


def test_moving_back_past_start_pays_nothing(game, alice):
    alice.position = 1
    game.apply_card(alice, _card("back-2"))

    # Lands on Go to Jail.
    assert alice.position == 7
    assert alice.in_jail
    assert alice.money == 1500


def test_go_to_jail_card(game, alice, roll):
    _draw_on_event(game, alice, roll, "go-to-jail")
    assert alice.position == 7
    assert alice.in_jail


def test_advance_to_start_card_pays_bonus(game, alice, roll):
    _draw_on_event(game, alice, roll, "advance-to-start")
    assert alice.position == 0
    assert alice.money == 1500 + 200


def test_card_effects_stop_after_bankruptcy(game, alice):
    alice.position = 4
    card = EventCard("ruin", "Ruin", effects=(MoneyEffect(-5000), MoveEffect(3)))

    game.apply_card(alice, card)

    assert alice.is_bankrupt
    assert alice.position == 4


def test_card_effects_apply_in_order(game, alice):
    alice.position = 4
    card = EventCard("combo", "Combo", effects=(MoneyEffect(50), MoveEffect(-2)))

    game.apply_card(alice, card)

    assert alice.money == 1550
    assert alice.position == 2
    assert game.turn.awaiting_purchase == "p2"


def test_deck_draws_every_card_then_reshuffles():
    deck = EventDeck(random.Random(3))
    assert len(deck) == len(EVENT_CARDS)

    drawn = [deck.draw() for _ in range(len(EVENT_CARDS))]
    assert sorted(c.id for c in drawn) == sorted(c.id for c in EVENT_CARDS)
    assert len(deck) == 0

    deck.draw()
    assert len(deck) == len(EVENT_CARDS) - 1


def test_deck_order_is_seeded():
    first_deck = EventDeck(random.Random(11))
    second_deck = EventDeck(random.Random(11))
    first = [first_deck.draw().id for _ in range(len(EVENT_CARDS))]
    second = [second_deck.draw().id for _ in range(len(EVENT_CARDS))]
    assert first == second


def test_stacked_cards_are_drawn_first():
    deck = EventDeck(random.Random(0))
    deck.stack([_card("tax-100"), _card("bonus-100")])

    assert deck.draw().id == "tax-100"
    assert deck.draw().id == "bonus-100"


def test_landing_exactly_on_start(game, alice, roll):
    alice.position = 18
    roll(alice, 1, 1)

    assert alice.position == 0
    assert alice.money == 1500 + 200
    assert game.turn.awaiting_purchase is None


def test_multi_lap_move_pays_each_lap(game, alice):
    card = EventCard("long-trip", "Long trip", effects=(MoveEffect(45),))

    game.apply_card(alice, card)

    assert alice.position == 5
    assert alice.money == 1500 + 400
    assert "Alice passed Start and received 400" in game.event_log.messages()
    assert game.turn.awaiting_purchase == "p3"
