from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter


# ---- Inbound (client -> server) ----


class CreateRoomMessage(BaseModel):
    type: Literal["create_room"]
    player_name: str = Field(min_length=1, max_length=32)
    settings: Optional[Dict[str, Any]] = None


class JoinRoomMessage(BaseModel):
    type: Literal["join_room"]
    room_id: str
    player_name: str = Field(min_length=1, max_length=32)


class ReconnectMessage(BaseModel):
    type: Literal["reconnect"]
    room_id: str
    player_id: str


class StartGameMessage(BaseModel):
    type: Literal["start_game"]


class FinishGameMessage(BaseModel):
    type: Literal["finish_game"]


class RollDiceMessage(BaseModel):
    type: Literal["roll_dice"]


class BuyPropertyMessage(BaseModel):
    type: Literal["buy_property"]
    property_id: str


class PassPurchaseMessage(BaseModel):
    type: Literal["pass_purchase"]


class UpgradePropertyMessage(BaseModel):
    type: Literal["upgrade_property"]
    property_id: str


class EndTurnMessage(BaseModel):
    type: Literal["end_turn"]


class PayBailMessage(BaseModel):
    type: Literal["pay_bail"]


ClientMessage = Annotated[
    Union[
        CreateRoomMessage,
        JoinRoomMessage,
        ReconnectMessage,
        StartGameMessage,
        FinishGameMessage,
        RollDiceMessage,
        BuyPropertyMessage,
        PassPurchaseMessage,
        UpgradePropertyMessage,
        EndTurnMessage,
        PayBailMessage,
    ],
    Field(discriminator="type"),
]

client_message_adapter: TypeAdapter = TypeAdapter(ClientMessage)

# Messages that act on the room the connection already belongs to.
GAME_ACTION_TYPES = {
    "start_game",
    "finish_game",
    "roll_dice",
    "buy_property",
    "pass_purchase",
    "upgrade_property",
    "end_turn",
    "pay_bail",
}


# ---- Outbound (server -> client) ----


class RoomCreatedPayload(BaseModel):
    type: Literal["room_created"] = "room_created"
    room_id: str


class JoinedPayload(BaseModel):
    type: Literal["joined"] = "joined"
    room_id: str
    player_id: str


class ErrorPayload(BaseModel):
    type: Literal["error"] = "error"
    code: str
    message: str


# ---- HTTP ----


class RoomPlayer(BaseModel):
    id: str
    name: str


class RoomSummary(BaseModel):
    id: str
    status: str
    host_name: Optional[str] = None
    player_count: int
    connected_count: int
    players: List[RoomPlayer] = Field(default_factory=list)


class RoomListResponse(BaseModel):
    rooms: List[RoomSummary]
