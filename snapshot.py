"""
Public snapshot serialization of GameState.

Produces a sanitized, UI-friendly view of the current game without
exposing hidden information (e.g., deck order).
"""

from __future__ import annotations

from typing import Any, Dict, List

from src.core.game.game import GameState


def serialize_snapshot(game: GameState) -> Dict[str, Any]:
    """Serialize a GameState into a public, stable JSON dict.

    The snapshot includes:
    - room, host, status, turn number and winner
    - settings
    - players in turn order with public info plus net worth
    - every tile with its ownership and level
    - the current turn (dice, pending decision)
    - the retained log entries
    - deck size only
    """
    players: List[Dict[str, Any]] = []
    for player in game.players:
        entry = player.to_dict()
        entry["net_worth"] = game.net_worth(player.player_id)
        entry["properties"] = [t.id for t in game.board.properties_owned_by(player.player_id)]
        players.append(entry)

    snapshot: Dict[str, Any] = {
        "room_id": game.room_id,
        "host_id": game.host_id,
        "status": game.status.value,
        "turn_number": game.turn_number,
        "winner_id": game.winner_id,
        "settings": game.settings.to_dict(),
        "board_name": game.board.name,
        "players": players,
        "tiles": [tile.to_dict() for tile in game.tiles],
        "turn": game.turn.to_dict(),
        "log": [entry.to_dict() for entry in game.event_log.get_events()],
        "deck": {"cards_remaining": len(game.deck)},
    }

    return snapshot
