from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Dict, List, Mapping, Optional, Tuple

from game_logger import GameLogger
from src.core.exceptions import RoomNotFoundError
from src.core.game.game import GameStatus, create_game
from src.core.game.player import PlayerState

from server.runner import RoomSession
from server.schemas import RoomSummary

logger = logging.getLogger(__name__)


class RoomRegistry:
    """In-memory registry of open rooms."""

    def __init__(self, event_log_dir: Optional[str] = None):
        self._rooms: Dict[str, RoomSession] = {}
        self._lock = asyncio.Lock()
        self.event_log_dir = event_log_dir

    async def create_room(
        self,
        host_name: str,
        settings: Optional[Mapping[str, Any]] = None,
    ) -> Tuple[RoomSession, PlayerState]:
        async with self._lock:
            room_id = self._new_room_id()
            # The seed is never taken from clients.
            overrides = {k: v for k, v in (settings or {}).items() if k != "seed"}
            game = create_game(room_id, host_name, overrides)
            game_logger = GameLogger.for_room(self.event_log_dir, room_id) if self.event_log_dir else None
            session = RoomSession(game, game_logger)
            self._rooms[room_id] = session

        logger.info("Room %s created by %s", room_id, host_name)
        host = game.get_player(game.host_id)
        return session, host

    async def get(self, room_id: str) -> Optional[RoomSession]:
        return self._rooms.get(room_id)

    async def require(self, room_id: str) -> RoomSession:
        session = await self.get(room_id)
        if session is None:
            raise RoomNotFoundError()
        return session

    async def dispose(self, room_id: str) -> bool:
        async with self._lock:
            if self._rooms.pop(room_id, None) is None:
                return False
        logger.info("Room %s disposed", room_id)
        return True

    async def dispose_if_abandoned(self, room_id: str) -> bool:
        """Drop a finished room once nobody is connected to it."""
        session = await self.get(room_id)
        if session is None:
            return False
        if session.game.status == GameStatus.FINISHED and not session.connected_player_ids:
            return await self.dispose(room_id)
        return False

    def list_rooms(self) -> List[RoomSummary]:
        """Rooms someone can still see: not finished and with a live connection."""
        summaries = [session.summary() for session in list(self._rooms.values())]
        return [s for s in summaries if s.connected_count > 0 and s.status != GameStatus.FINISHED.value]

    def __len__(self) -> int:
        return len(self._rooms)

    def _new_room_id(self) -> str:
        while True:
            room_id = uuid.uuid4().hex[:6]
            if room_id not in self._rooms:
                return room_id
