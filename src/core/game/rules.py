"""
High-level rules API for controlling game flow.
This module provides the public interface for game actions and legal move detection.
"""

from enum import Enum
from typing import Any, List, Optional

from src.core.exceptions import InvalidTargetError, ValidationError
from src.core.game.config import BAIL_COST
from src.core.game.game import GameState, GameStatus


class ActionType(Enum):
    """Types of actions a player can take."""

    START_GAME = "start_game"
    FINISH_GAME = "finish_game"
    ROLL_DICE = "roll_dice"
    BUY_PROPERTY = "buy_property"
    PASS_PURCHASE = "pass_purchase"
    UPGRADE_PROPERTY = "upgrade_property"
    PAY_BAIL = "pay_bail"
    END_TURN = "end_turn"


class Action:
    """Represents a game action that can be taken."""

    def __init__(self, action_type: ActionType, **params: Any):
        self.action_type = action_type
        self.params = params

    def to_dict(self) -> dict:
        return {"action_type": self.action_type.value, "params": dict(self.params)}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Action):
            return NotImplemented
        return self.action_type == other.action_type and self.params == other.params

    def __repr__(self) -> str:
        return f"Action({self.action_type.value}, {self.params})"


def get_legal_actions(game: GameState, player_id: str) -> List[Action]:
    """
    Get all legal actions available to a player.

    Args:
        game: Current game state
        player_id: Player to get actions for

    Returns:
        List of legal Action objects
    """
    player = game.get_player(player_id)
    if player is None or game.is_finished:
        return []

    actions: List[Action] = []
    is_host = player_id == game.host_id

    if game.status == GameStatus.LOBBY:
        if is_host and len(game.players) >= 2:
            actions.append(Action(ActionType.START_GAME))
        return actions

    if is_host:
        actions.append(Action(ActionType.FINISH_GAME))

    if game.turn.current_player_id != player_id:
        return actions

    turn = game.turn
    if turn.awaiting_purchase:
        tile = game.board.get_property(turn.awaiting_purchase)
        if tile is not None and player.money >= tile.price:
            actions.append(Action(ActionType.BUY_PROPERTY, property_id=tile.id))
        actions.append(Action(ActionType.PASS_PURCHASE))
        return actions

    if not turn.rolled:
        if not player.is_bankrupt:
            actions.append(Action(ActionType.ROLL_DICE))
        if player.in_jail and player.money >= BAIL_COST:
            actions.append(Action(ActionType.PAY_BAIL))
        return actions

    if turn.awaiting_upgrade:
        tile = game.board.get_property(turn.awaiting_upgrade)
        cost = tile.upgrade_cost if tile is not None else None
        if cost is not None and player.money >= cost and player.position == tile.index:
            actions.append(Action(ActionType.UPGRADE_PROPERTY, property_id=tile.id))

    actions.append(Action(ActionType.END_TURN))
    return actions


def _require_param(action: Action, name: str) -> Any:
    value = action.params.get(name)
    if not isinstance(value, str) or not value:
        raise ValidationError(f"Missing '{name}' for {action.action_type.value}.")
    return value


def apply_action(game: GameState, action: Action, player_id: Optional[str]) -> Any:
    """
    Apply an action to the game on behalf of a player.

    Raises the engine's ``GameError`` subclasses when the action is illegal.
    Returns the engine's result (the ``DiceRoll`` for a roll).
    """
    if player_id is None or game.get_player(player_id) is None:
        raise InvalidTargetError("Unknown player.")

    action_type = action.action_type
    if action_type == ActionType.START_GAME:
        return game.start_game(player_id)
    if action_type == ActionType.FINISH_GAME:
        return game.finish_by_net_worth(player_id)
    if action_type == ActionType.ROLL_DICE:
        return game.roll_dice(player_id)
    if action_type == ActionType.BUY_PROPERTY:
        return game.buy_property(player_id, _require_param(action, "property_id"))
    if action_type == ActionType.PASS_PURCHASE:
        return game.pass_purchase(player_id)
    if action_type == ActionType.UPGRADE_PROPERTY:
        return game.upgrade_property(player_id, _require_param(action, "property_id"))
    if action_type == ActionType.PAY_BAIL:
        return game.pay_bail(player_id)
    if action_type == ActionType.END_TURN:
        return game.end_turn(player_id)
    raise ValidationError(f"Unsupported action: {action_type}")
