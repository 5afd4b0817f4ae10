"""
Main game engine and state management.

``GameState`` owns the authoritative state of one room. Every public action
validates first and mutates second, so a raised ``GameError`` always means
nothing changed. The only intentional partial effect is a charge that
pushes a player's money negative, which bankrupts them within the same call.

The engine does no locking; callers apply actions for a room one at a time.
"""

import random
import uuid
from enum import Enum
from typing import Any, List, Mapping, Optional

from src.core.exceptions import (
    AlreadyOwnedError,
    AlreadyRolledError,
    AlreadyStartedError,
    InsufficientFundsError,
    InvalidTargetError,
    MaxLevelReachedError,
    MustRollFirstError,
    NoActivePlayersError,
    NoPendingPurchaseError,
    NoPendingUpgradeError,
    NotActiveError,
    NotEnoughPlayersError,
    NotInJailError,
    NothingToPassError,
    NotOwnerError,
    NotYourTurnError,
    PendingPurchaseError,
    RoomFullError,
    UnauthorizedError,
)
from src.core.game.board import Board
from src.core.game.cards import EffectKind, EventCard, EventDeck
from src.core.game.config import (
    BAIL_COST,
    MAX_JAIL_TURNS,
    MAX_PROPERTY_LEVEL,
    GameSettings,
    WinCondition,
    sanitize_settings,
)
from src.core.game.money import EventLog, EventType
from src.core.game.player import PlayerState
from src.core.game.spaces import PropertyTile, Tile, TileType
from src.core.game.turn import DiceRoll, PendingDecision, TurnState


class GameStatus(str, Enum):
    LOBBY = "lobby"
    ACTIVE = "active"
    FINISHED = "finished"


def _new_id() -> str:
    return uuid.uuid4().hex[:8]


class GameState:
    """
    Represents the complete state of a game room.
    This is the main interface for the game engine.
    """

    def __init__(
        self,
        room_id: str,
        host_name: str,
        settings: Optional[GameSettings] = None,
        rng: Optional[random.Random] = None,
    ):
        self.room_id = room_id
        self.settings = settings or GameSettings()
        self.rng = rng or random.Random()
        self.board = Board(self.settings.board_name)
        self.deck = EventDeck(self.rng)
        self.event_log = EventLog()

        host = PlayerState(_new_id(), host_name, self.settings.starting_cash)
        self.host_id = host.player_id
        self.players: List[PlayerState] = [host]

        self.status = GameStatus.LOBBY
        self.turn = TurnState(current_player_id=self.host_id)
        self.turn_number = 1
        self.winner_id: Optional[str] = None

        self.log(f"Room {room_id} created by {host_name}", EventType.ROOM_CREATED, host.player_id)

    # ---- Queries ----

    @property
    def tiles(self) -> List[Tile]:
        return self.board.tiles

    @property
    def is_finished(self) -> bool:
        return self.status == GameStatus.FINISHED

    def get_player(self, player_id: str) -> Optional[PlayerState]:
        for player in self.players:
            if player.player_id == player_id:
                return player
        return None

    def get_current_player(self) -> PlayerState:
        """Get the player whose turn it is."""
        player = self.get_player(self.turn.current_player_id)
        assert player is not None
        return player

    def get_active_players(self) -> List[PlayerState]:
        """Get all non-bankrupt players."""
        return [p for p in self.players if not p.is_bankrupt]

    def net_worth(self, player_id: str) -> int:
        """Cash plus the asset value of every owned property."""
        player = self.get_player(player_id)
        if player is None:
            return 0
        return player.money + sum(t.asset_value for t in self.board.properties_owned_by(player_id))

    # ---- Lobby ----

    def add_player(self, name: str) -> PlayerState:
        """Add a player to the lobby with the starting cash."""
        if self.status != GameStatus.LOBBY:
            raise AlreadyStartedError()
        if len(self.players) >= self.settings.max_players:
            raise RoomFullError()

        player = PlayerState(_new_id(), name, self.settings.starting_cash)
        self.players.append(player)
        self.log(f"{name} joined the room", EventType.PLAYER_JOINED, player.player_id)
        return player

    def start_game(self, player_id: Optional[str] = None) -> None:
        """Start the game. Only the host may start it, with at least two players."""
        if self.status != GameStatus.LOBBY:
            raise AlreadyStartedError()
        if player_id is not None and player_id != self.host_id:
            raise UnauthorizedError("Only the host can start the game.")
        if len(self.players) < 2:
            raise NotEnoughPlayersError()

        self.status = GameStatus.ACTIVE
        host = self.get_player(self.host_id)
        starting = self.host_id if host and not host.is_bankrupt else self._next_alive_player(self.host_id)
        self.turn = TurnState(current_player_id=starting)
        self.log("Game started", EventType.GAME_START, players=[p.name for p in self.players])

    def reconnect(self, player_id: str) -> PlayerState:
        """Clear the disconnected flag of a known player."""
        player = self.get_player(player_id)
        if player is None:
            raise InvalidTargetError("Unknown player.")
        player.disconnected = False
        return player

    def disconnect(self, player_id: str) -> None:
        player = self.get_player(player_id)
        if player is not None:
            player.disconnected = True

    # ---- Turn actions ----

    def roll_dice(self, player_id: str) -> DiceRoll:
        """Roll two dice for the current player.

        A jailed player escapes on a double; on the last attempt a non-double
        forces bail first. A free player moves and the landing tile resolves.
        """
        player = self._ensure_turn(player_id)
        if player.is_bankrupt:
            raise InvalidTargetError("Bankrupt players cannot roll.")
        if self.turn.rolled:
            raise AlreadyRolledError()
        if self.turn.awaiting_purchase:
            raise PendingPurchaseError()

        roll = DiceRoll.of(self.rng.randint(1, 6), self.rng.randint(1, 6))
        self.turn.dice = roll
        self.turn.rolled = True
        rolled_msg = f"{player.name} rolled {roll.values[0]} + {roll.values[1]} = {roll.total}"

        if player.in_jail:
            if roll.is_double:
                player.release_from_jail()
                self.log(f"{player.name} rolled a double and left jail.", EventType.JAIL_RELEASE, player_id, method="double")
                self._advance_and_resolve(player, roll, rolled_msg)
                return roll

            if player.in_jail_turns == 1:
                self._charge(
                    player,
                    BAIL_COST,
                    f"{player.name} paid bail ({BAIL_COST}) after {MAX_JAIL_TURNS} turns in jail.",
                    EventType.JAIL_RELEASE,
                )
                if player.is_bankrupt:
                    return roll
                player.release_from_jail()
                self._advance_and_resolve(player, roll, rolled_msg)
                return roll

            player.in_jail_turns -= 1
            self.log(
                f"{rolled_msg}, no double, still in jail ({player.in_jail_turns} attempts left).",
                EventType.JAIL_ATTEMPT,
                player_id,
                attempts_left=player.in_jail_turns,
            )
            return roll

        self._advance_and_resolve(player, roll, rolled_msg)
        return roll

    def buy_property(self, player_id: str, property_id: str) -> PropertyTile:
        """Buy the property on offer at its list price."""
        player = self._ensure_turn(player_id)
        if self.turn.awaiting_purchase != property_id:
            raise NoPendingPurchaseError()
        tile = self.board.get_property(property_id)
        if tile is None:
            raise InvalidTargetError("Unknown property.")
        if tile.is_owned():
            raise AlreadyOwnedError()
        if player.money < tile.price:
            raise InsufficientFundsError()

        player.money -= tile.price
        tile.owner_id = player.player_id
        tile.level = 1
        self.turn.pending = PendingDecision.none()
        self.log(
            f"{player.name} bought {tile.name} for {tile.price}",
            EventType.PURCHASE,
            player_id,
            property_id=tile.id,
            price=tile.price,
        )
        self.check_victory()
        return tile

    def pass_purchase(self, player_id: str) -> None:
        """Decline the property on offer."""
        player = self._ensure_turn(player_id)
        property_id = self.turn.awaiting_purchase
        if not property_id:
            raise NothingToPassError()

        self.turn.pending = PendingDecision.none()
        self.log(f"{player.name} declined the purchase", EventType.PURCHASE_PASSED, player_id, property_id=property_id)

    def upgrade_property(self, player_id: str, property_id: str) -> PropertyTile:
        """Raise an owned property one level while standing on it."""
        player = self._ensure_turn(player_id)
        tile = self.board.get_property(property_id)
        if tile is None:
            raise InvalidTargetError("Unknown property.")
        if tile.owner_id != player_id:
            raise NotOwnerError()
        if self.turn.awaiting_upgrade != property_id:
            raise NoPendingUpgradeError()
        if player.position != tile.index:
            raise NoPendingUpgradeError("You must be on the property to upgrade it.")
        level = max(1, tile.level)
        cost = tile.upgrade_cost
        if level >= MAX_PROPERTY_LEVEL or cost is None:
            raise MaxLevelReachedError()
        if player.money < cost:
            raise InsufficientFundsError("Not enough money to upgrade the property.")

        player.money -= cost
        tile.level = level + 1
        self.turn.pending = PendingDecision.none()
        self.log(
            f"{player.name} upgraded {tile.name} to level {tile.level} for {cost}.",
            EventType.UPGRADE,
            player_id,
            property_id=tile.id,
            level=tile.level,
            cost=cost,
        )
        self.check_bankruptcy(player)
        return tile

    def pay_bail(self, player_id: str) -> None:
        """Pay bail before rolling to leave jail."""
        player = self._ensure_turn(player_id)
        if player.in_jail_turns <= 0:
            raise NotInJailError()
        if self.turn.rolled:
            raise AlreadyRolledError("Bail can only be paid before rolling.")
        if player.money < BAIL_COST:
            raise InsufficientFundsError("Not enough money to pay bail.")

        player.money -= BAIL_COST
        player.release_from_jail()
        self.log(
            f"{player.name} paid bail ({BAIL_COST}) and is free.",
            EventType.JAIL_RELEASE,
            player_id,
            method="bail",
            amount=BAIL_COST,
        )
        self.check_bankruptcy(player)

    def end_turn(self, player_id: str) -> None:
        """Pass the turn to the next non-bankrupt player."""
        player = self._ensure_turn(player_id)
        if self.turn.awaiting_purchase:
            raise PendingPurchaseError("Resolve the purchase before ending the turn.")
        if not self.turn.rolled:
            if player.in_jail:
                raise MustRollFirstError("Try to leave jail (roll the dice or pay bail) before ending the turn.")
            raise MustRollFirstError()

        self._advance_turn()

    def finish_by_net_worth(self, player_id: Optional[str] = None) -> Optional[str]:
        """End the game now; the richest non-bankrupt player wins."""
        if self.status == GameStatus.FINISHED:
            return self.winner_id
        if player_id is not None and player_id != self.host_id:
            raise UnauthorizedError("Only the host can finish the game.")
        if self.status != GameStatus.ACTIVE:
            raise NotActiveError()
        alive = self.get_active_players()
        if not alive:
            raise NoActivePlayersError()

        # max() keeps the first of equal values, so ties go to turn order.
        richest = max(alive, key=lambda p: self.net_worth(p.player_id))
        self._finish(
            richest,
            f"{richest.name} won with the highest net worth.",
            reason="net_worth",
            net_worth=self.net_worth(richest.player_id),
        )
        return richest.player_id

    # ---- Tile resolution ----

    def resolve_tile(self, player: PlayerState, tile: Tile, from_event: bool = False) -> None:
        """Apply the effect of the tile the player landed on."""
        if player.is_bankrupt:
            return

        tile_type = tile.tile_type
        if tile_type == TileType.START:
            return
        elif tile_type == TileType.PROPERTY:
            self._handle_property(player, tile)
        elif tile_type == TileType.TAX:
            self._charge(player, tile.amount, f"{player.name} paid {tile.amount} in tax", EventType.TAX_PAYMENT)
        elif tile_type == TileType.EVENT:
            self._handle_event(player)
        elif tile_type == TileType.JAIL:
            return
        elif tile_type == TileType.GO_TO_JAIL:
            self._send_to_jail(player)
        elif tile_type == TileType.FREE:
            if not from_event:
                self.log(f"{player.name} took a break at {tile.name}", EventType.REST, player.player_id)
        else:
            raise ValueError(f"Unhandled tile type: {tile_type}")

    def _handle_property(self, player: PlayerState, tile: PropertyTile) -> None:
        self.turn.pending = PendingDecision.none()

        if not tile.is_owned():
            self.turn.pending = PendingDecision.purchase(tile.id)
            self.log(
                f"{player.name} landed on {tile.name}. Can buy it for {tile.price}.",
                EventType.PURCHASE_OFFER,
                player.player_id,
                property_id=tile.id,
                price=tile.price,
            )
            return

        if tile.owner_id == player.player_id:
            tile.level = max(1, tile.level)
            if tile.level < MAX_PROPERTY_LEVEL:
                self.turn.pending = PendingDecision.upgrade(tile.id)
                self.log(
                    f"{player.name} visited {tile.name} (level {tile.level}). "
                    f"Can upgrade to the next level for {tile.upgrade_cost}.",
                    EventType.UPGRADE_OFFER,
                    player.player_id,
                    property_id=tile.id,
                    cost=tile.upgrade_cost,
                )
            else:
                self.log(
                    f"{player.name} visited their own property {tile.name} at max level ({tile.level}).",
                    EventType.VISIT,
                    player.player_id,
                    property_id=tile.id,
                )
            return

        owner = self.get_player(tile.owner_id)
        if owner is None or owner.is_bankrupt:
            return
        tile.level = max(1, tile.level)
        rent = tile.rent
        player.money -= rent
        owner.money += rent
        self.log(
            f"{player.name} paid {rent} rent to {owner.name} ({tile.name}).",
            EventType.RENT_PAYMENT,
            player.player_id,
            owner_id=owner.player_id,
            property_id=tile.id,
            amount=rent,
        )
        self.check_bankruptcy(player)

    def _handle_event(self, player: PlayerState) -> None:
        card = self.deck.draw()
        self.log(
            f"{player.name} drew an event card: {card.title}",
            EventType.CARD_DRAW,
            player.player_id,
            card=card.to_dict(),
        )
        self.apply_card(player, card)

    def apply_card(self, player: PlayerState, card: EventCard) -> None:
        """Apply a card's effects in order."""
        for effect in card.effects:
            if player.is_bankrupt:
                return
            kind = effect.kind
            if kind == EffectKind.MONEY:
                player.money += effect.amount
                if effect.amount > 0:
                    self.log(f"{player.name} received {effect.amount}", EventType.CARD_EFFECT, player.player_id, amount=effect.amount)
                else:
                    self.log(f"{player.name} paid {abs(effect.amount)}", EventType.CARD_EFFECT, player.player_id, amount=effect.amount)
                self.check_bankruptcy(player)
            elif kind == EffectKind.GO_TO_JAIL:
                self._send_to_jail(player)
                return
            elif kind == EffectKind.MOVE:
                self._move_player(player, effect.steps)
                self.resolve_tile(player, self.board.get_tile(player.position), from_event=True)
            elif kind == EffectKind.TELEPORT:
                self._teleport_player(player, effect.position, effect.collect_start)
                self.resolve_tile(player, self.board.get_tile(player.position), from_event=True)
            else:
                raise ValueError(f"Unhandled card effect: {kind}")

    # ---- Bankruptcy / victory ----

    def check_bankruptcy(self, player: PlayerState) -> None:
        """Bankrupt a player with negative money and return their properties."""
        if player.money >= 0 or player.is_bankrupt:
            return

        player.is_bankrupt = True
        player.in_jail_turns = 0
        released = []
        for tile in self.board.properties_owned_by(player.player_id):
            tile.release()
            released.append(tile.id)
        self.log(
            f"{player.name} went bankrupt and returned their properties to the bank.",
            EventType.BANKRUPTCY,
            player.player_id,
            properties=released,
        )
        self.check_victory()

    def check_victory(self) -> None:
        """Finish the game when a single player is left standing."""
        if self.status == GameStatus.FINISHED:
            return
        alive = self.get_active_players()
        if len(alive) == 1:
            self._finish(alive[0], f"{alive[0].name} won the game!", reason="last_standing")

    def _finish(self, winner: PlayerState, message: str, **details) -> None:
        self.status = GameStatus.FINISHED
        self.winner_id = winner.player_id
        self.log(message, EventType.GAME_END, winner.player_id, **details)

    # ---- Internals ----

    def _ensure_turn(self, player_id: str) -> PlayerState:
        if self.status != GameStatus.ACTIVE:
            raise NotActiveError()
        player = self.get_player(player_id)
        if player is None:
            raise InvalidTargetError("Unknown player.")
        if self.turn.current_player_id != player_id:
            raise NotYourTurnError()
        return player

    def _advance_and_resolve(self, player: PlayerState, roll: DiceRoll, rolled_msg: str) -> None:
        self._move_player(player, roll.total)
        self.log(rolled_msg, EventType.DICE_ROLL, player.player_id, dice=roll.to_dict(), position=player.position)
        self.resolve_tile(player, self.board.get_tile(player.position))
        self.check_victory()

    def _move_player(self, player: PlayerState, steps: int) -> int:
        """
        Move relative to the current position.

        Forward moves pay the pass-start bonus once per full lap; moving
        backwards never pays. Returns the number of laps completed.
        """
        size = len(self.board)
        target = player.position + steps
        laps = target // size if steps > 0 else 0
        player.position = target % size
        if laps:
            self._pay_pass_start(player, laps)
        return laps

    def _teleport_player(self, player: PlayerState, position: int, collect_start: bool) -> None:
        size = len(self.board)
        position %= size
        wrapped = position < player.position
        player.position = position
        if collect_start and wrapped:
            self._pay_pass_start(player, 1)

    def _pay_pass_start(self, player: PlayerState, laps: int) -> None:
        bonus = self.settings.pass_start_bonus * laps
        player.money += bonus
        self.log(f"{player.name} passed Start and received {bonus}", EventType.PASS_START, player.player_id, amount=bonus, laps=laps)

    def _send_to_jail(self, player: PlayerState) -> None:
        jail_index = self.board.jail_index()
        player.send_to_jail(jail_index if jail_index is not None else player.position)
        self.turn.pending = PendingDecision.none()
        self.log(f"{player.name} went to jail.", EventType.GO_TO_JAIL, player.player_id)

    def _charge(self, player: PlayerState, amount: int, message: str, event_type: EventType) -> None:
        """Charge the player to the bank; may bankrupt them."""
        player.money -= amount
        self.log(message, event_type, player.player_id, amount=amount)
        self.check_bankruptcy(player)

    def _advance_turn(self) -> None:
        next_id = self._next_alive_player(self.turn.current_player_id)
        self.turn = TurnState(current_player_id=next_id)
        self.turn_number += 1
        self.check_victory()
        if self.is_finished:
            return

        max_turns = self.settings.max_turns
        if (
            self.settings.win_condition == WinCondition.HIGHEST_NET_WORTH
            and max_turns is not None
            and self.turn_number > max_turns
        ):
            self.finish_by_net_worth()
            return

        next_player = self.get_current_player()
        self.log(f"Turn {self.turn_number}: {next_player.name} to play", EventType.TURN_START, next_id, turn=self.turn_number)

    def _next_alive_player(self, current_id: str) -> str:
        order = self.players
        idx = next((i for i, p in enumerate(order) if p.player_id == current_id), 0)
        for offset in range(1, len(order) + 1):
            candidate = order[(idx + offset) % len(order)]
            if not candidate.is_bankrupt:
                return candidate.player_id
        return current_id

    def log(self, message: str, event_type: EventType, player_id: Optional[str] = None, **details):
        return self.event_log.log(message, event_type, player_id, **details)


def create_game(
    room_id: str,
    host_name: str,
    settings: Optional[Mapping[str, Any]] = None,
    *,
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> GameState:
    """Create a new game in the lobby with sanitized settings."""
    if rng is None:
        rng = random.Random(seed)
    return GameState(room_id, host_name, sanitize_settings(settings), rng)
