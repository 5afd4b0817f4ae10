from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from typing import Any, Dict, Optional

import pydantic
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from src.core.exceptions import GameError, InvalidTargetError, ValidationError
from src.settings import get_server_settings

from .registry import RoomRegistry
from .runner import RoomSession
from .schemas import (
    GAME_ACTION_TYPES,
    CreateRoomMessage,
    ErrorPayload,
    JoinRoomMessage,
    ReconnectMessage,
    RoomCreatedPayload,
    RoomListResponse,
    client_message_adapter,
)

logger = logging.getLogger(__name__)

OUTBOUND_QUEUE_SIZE = 256


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle - startup and shutdown."""
    settings = get_server_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting Banco game server on %s:%s", settings.host, settings.port)
    if settings.event_log_dir:
        logger.info("Writing room logs to %s", settings.event_log_dir)

    yield

    logger.info("Shutting down, %d room(s) still open", len(registry))


settings = get_server_settings()
app = FastAPI(title="Banco Game Server", version="0.1.0", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins() or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
registry = RoomRegistry(event_log_dir=settings.event_log_dir)


# ---- HTTP ----


@app.get("/health")
async def health():
    return {"ok": True}


@app.get("/rooms", response_model=RoomListResponse)
async def list_rooms():
    return RoomListResponse(rooms=registry.list_rooms())


# ---- WebSocket ----


class _Connection:
    """Per-socket state: outbound queue and the room/player it is bound to."""

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=OUTBOUND_QUEUE_SIZE)
        self.session: Optional[RoomSession] = None
        self.player_id: Optional[str] = None

    def send(self, payload: Dict[str, Any]) -> None:
        self.queue.put_nowait(payload)

    def send_error(self, error: GameError) -> None:
        self.send(ErrorPayload(code=error.code, message=error.message).model_dump())

    async def leave(self) -> None:
        if self.session is None or self.player_id is None:
            return
        session, player_id = self.session, self.player_id
        self.session = None
        self.player_id = None
        await session.detach(player_id, self.queue)
        await registry.dispose_if_abandoned(session.room_id)


async def _handle_message(conn: _Connection, raw: Any) -> None:
    try:
        message = client_message_adapter.validate_python(raw)
    except pydantic.ValidationError as e:
        raise ValidationError(f"Malformed message: {e.error_count()} validation error(s).") from e

    if isinstance(message, CreateRoomMessage):
        await conn.leave()
        session, host = await registry.create_room(message.player_name, message.settings)
        conn.send(RoomCreatedPayload(room_id=session.room_id).model_dump())
        await session.reconnect(host.player_id, conn.queue)
        conn.session, conn.player_id = session, host.player_id
        return

    if isinstance(message, JoinRoomMessage):
        session = await registry.require(message.room_id)
        if conn.session is session and conn.player_id is not None:
            raise InvalidTargetError("This connection has already joined the room.")
        await conn.leave()
        player = await session.join(message.player_name, conn.queue)
        conn.session, conn.player_id = session, player.player_id
        return

    if isinstance(message, ReconnectMessage):
        session = await registry.require(message.room_id)
        if conn.session is not session or conn.player_id != message.player_id:
            await conn.leave()
        await session.reconnect(message.player_id, conn.queue)
        conn.session, conn.player_id = session, message.player_id
        return

    if message.type in GAME_ACTION_TYPES:
        if conn.session is None or conn.player_id is None:
            raise InvalidTargetError("Join a room first.")
        params = message.model_dump(exclude={"type"})
        await conn.session.apply_action_request(conn.player_id, message.type, params)
        return

    raise ValidationError(f"Unsupported message type: {message.type}")


@app.websocket("/ws")
async def ws_room(websocket: WebSocket):
    await websocket.accept()
    conn = _Connection(websocket)

    # Start a task to forward outbound messages
    async def sender():
        while True:
            msg = await conn.queue.get()
            await websocket.send_json(msg)

    sender_task = asyncio.create_task(sender())
    try:
        while True:
            try:
                raw = await websocket.receive_json()
            except WebSocketDisconnect:
                break
            except ValueError:
                conn.send_error(ValidationError("Message is not valid JSON."))
                continue

            try:
                await _handle_message(conn, raw)
            except GameError as e:
                conn.send_error(e)
            except Exception:
                logger.exception("Unexpected error while handling a client message")
                conn.send(ErrorPayload(code="InternalError", message="Internal server error.").model_dump())
    finally:
        await conn.leave()
        sender_task.cancel()
        with suppress(asyncio.CancelledError):
            try:
                await sender_task
            except Exception as e:
                logger.debug("Sender stopped after socket close: %r", e)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.app:app", host=settings.host, port=settings.port)
