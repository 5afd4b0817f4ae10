from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

from game_logger import GameLogger
from snapshot import serialize_snapshot
from src.core.exceptions import AlreadyStartedError, InvalidTargetError
from src.core.game.game import GameState, GameStatus
from src.core.game.player import PlayerState
from src.core.game.rules import Action, ActionType, apply_action
from src.core.game.turn import DiceRoll

from server.schemas import JoinedPayload, RoomPlayer, RoomSummary

logger = logging.getLogger(__name__)


class RoomSession:
    """Owns a single GameState and the connections attached to it.

    Responsibilities:
    - Apply actions one at a time (the engine itself does no locking)
    - Flush new engine log entries to JSONL via GameLogger
    - Broadcast dice, log entries and state snapshots to every connection
    """

    def __init__(self, game: GameState, game_logger: Optional[GameLogger] = None):
        self.game = game
        self.room_id = game.room_id
        self.logger = game_logger
        self._connections: Dict[str, asyncio.Queue] = {}  # player_id -> outbound queue
        self._apply_lock = asyncio.Lock()
        self._last_log_sequence = game.event_log.last_sequence

    # ---- Connections ----

    def is_connected(self, player_id: str) -> bool:
        player = self.game.get_player(player_id)
        return player_id in self._connections and player is not None and not player.disconnected

    @property
    def connected_player_ids(self) -> List[str]:
        return [p.player_id for p in self.game.players if self.is_connected(p.player_id)]

    def attach(self, player_id: str, queue: asyncio.Queue) -> None:
        self._connections[player_id] = queue
        queue.put_nowait(JoinedPayload(room_id=self.room_id, player_id=player_id).model_dump())

    async def detach(self, player_id: str, queue: asyncio.Queue) -> None:
        """Drop a closed connection and mark its player disconnected."""
        async with self._apply_lock:
            if self._connections.get(player_id) is not queue:
                # A newer connection has taken over this player.
                return
            del self._connections[player_id]
            self.game.disconnect(player_id)
            logger.info("Player %s disconnected from room %s", player_id, self.room_id)
            await self.flush_and_broadcast()

    # ---- Lobby ----

    async def join(self, player_name: str, queue: asyncio.Queue) -> PlayerState:
        async with self._apply_lock:
            if self.game.status != GameStatus.LOBBY:
                raise AlreadyStartedError()
            existing = next(
                (p for p in self.game.players if p.name.lower() == player_name.lower()),
                None,
            )
            if existing is not None:
                if self.is_connected(existing.player_id):
                    raise InvalidTargetError("A player with this name is already in the room.")
                player = self.game.reconnect(existing.player_id)
            else:
                player = self.game.add_player(player_name)
            self.attach(player.player_id, queue)
            await self.flush_and_broadcast()
            return player

    async def reconnect(self, player_id: str, queue: asyncio.Queue) -> PlayerState:
        async with self._apply_lock:
            player = self.game.reconnect(player_id)
            self.attach(player_id, queue)
            logger.info("Player %s attached to room %s", player_id, self.room_id)
            await self.flush_and_broadcast()
            return player

    # ---- Actions ----

    async def apply_action_request(
        self, player_id: str, action_type: str, params: Optional[Dict[str, Any]] = None
    ) -> Any:
        """Apply an action for a player and broadcast the outcome.

        Engine errors propagate to the caller untouched; nothing is broadcast
        for a rejected action.
        """
        async with self._apply_lock:
            action = Action(ActionType(action_type), **(params or {}))
            result = apply_action(self.game, action, player_id)
            dice = result if isinstance(result, DiceRoll) else None
            await self.flush_and_broadcast(dice=dice)
            return result

    # ---- Broadcast ----

    async def flush_and_broadcast(self, dice: Optional[DiceRoll] = None) -> None:
        if dice is not None:
            await self._broadcast({"type": "dice", "roll": dice.to_dict()})

        new_entries = self.game.event_log.entries_since(self._last_log_sequence)
        for entry in new_entries:
            await self._broadcast({"type": "log", "entry": entry.to_dict()})
        if new_entries:
            self._last_log_sequence = new_entries[-1].sequence

        if self.logger is not None:
            try:
                self.logger.flush_engine_events(self.game)
            except OSError as e:
                logger.warning(f"Failed to write room log for {self.room_id}: {e}")

        await self._broadcast({"type": "state", "state": serialize_snapshot(self.game)})

    async def _broadcast(self, payload: Dict[str, Any]) -> None:
        if not self._connections:
            return
        for player_id, q in list(self._connections.items()):
            # Best-effort; don't block if client is slow
            try:
                q.put_nowait(payload)
            except asyncio.QueueFull:
                logger.warning("Dropping slow connection for player %s in room %s", player_id, self.room_id)
                self._connections.pop(player_id, None)
                self.game.disconnect(player_id)

    # ---- Status helpers ----

    def summary(self) -> RoomSummary:
        host = self.game.get_player(self.game.host_id)
        connected = [
            RoomPlayer(id=p.player_id, name=p.name)
            for p in self.game.players
            if self.is_connected(p.player_id)
        ]
        return RoomSummary(
            id=self.room_id,
            status=self.game.status.value,
            host_name=host.name if host else None,
            player_count=len(self.game.players),
            connected_count=len(connected),
            players=connected,
        )
