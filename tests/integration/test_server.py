from fastapi.testclient import TestClient

from server.app import app


def _receive_until(ws, msg_type: str) -> dict:
    while True:
        msg = ws.receive_json()
        if msg["type"] == msg_type:
            return msg


def _create_room(ws, name: str = "Alice", settings=None) -> dict:
    payload = {"type": "create_room", "player_name": name}
    if settings is not None:
        payload["settings"] = settings
    ws.send_json(payload)
    created = ws.receive_json()
    assert created["type"] == "room_created"
    joined = ws.receive_json()
    assert joined["type"] == "joined"
    state = ws.receive_json()
    assert state["type"] == "state"
    return {"room_id": created["room_id"], "player_id": joined["player_id"], "state": state["state"]}


def test_health():
    client = TestClient(app)
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"ok": True}


def test_create_room_and_list_it():
    with TestClient(app) as client:
        with client.websocket_connect("/ws") as ws:
            room = _create_room(ws, settings={"starting_cash": 2500})

            assert room["state"]["status"] == "lobby"
            assert room["state"]["host_id"] == room["player_id"]
            assert room["state"]["players"][0]["money"] == 2500

            rooms = client.get("/rooms").json()["rooms"]
            listed = next(r for r in rooms if r["id"] == room["room_id"])
            assert listed["status"] == "lobby"
            assert listed["host_name"] == "Alice"
            assert listed["player_count"] == 1
            assert listed["connected_count"] == 1
            assert listed["players"] == [{"id": room["player_id"], "name": "Alice"}]


def test_join_start_and_roll():
    with TestClient(app) as client:
        with client.websocket_connect("/ws") as host_ws, client.websocket_connect("/ws") as bob_ws:
            room = _create_room(host_ws)

            bob_ws.send_json({"type": "join_room", "room_id": room["room_id"], "player_name": "Bob"})
            joined = _receive_until(bob_ws, "joined")
            state = _receive_until(bob_ws, "state")["state"]
            assert len(state["players"]) == 2
            assert _receive_until(host_ws, "state")["state"]["players"][1]["id"] == joined["player_id"]

            bob_ws.send_json({"type": "start_game"})
            error = _receive_until(bob_ws, "error")
            assert error["code"] == "Unauthorized"

            host_ws.send_json({"type": "start_game"})
            started = _receive_until(host_ws, "state")["state"]
            assert started["status"] == "active"
            assert started["turn"]["current_player_id"] == room["player_id"]
            assert _receive_until(bob_ws, "state")["state"]["status"] == "active"

            bob_ws.send_json({"type": "roll_dice"})
            assert _receive_until(bob_ws, "error")["code"] == "NotYourTurn"

            host_ws.send_json({"type": "roll_dice"})
            dice = _receive_until(bob_ws, "dice")["roll"]
            assert 2 <= dice["total"] <= 12
            rolled = _receive_until(bob_ws, "state")["state"]
            assert rolled["turn"]["rolled"] is True


def test_unknown_room():
    with TestClient(app) as client:
        with client.websocket_connect("/ws") as ws:
            ws.send_json({"type": "join_room", "room_id": "nope", "player_name": "Bob"})
            error = ws.receive_json()
            assert error == {"type": "error", "code": "InvalidTarget", "message": "Room not found."}


def test_malformed_messages():
    with TestClient(app) as client:
        with client.websocket_connect("/ws") as ws:
            ws.send_json({"type": "teleport_everyone"})
            assert ws.receive_json()["code"] == "ValidationError"

            ws.send_json({"type": "create_room", "player_name": ""})
            assert ws.receive_json()["code"] == "ValidationError"

            ws.send_text("not json")
            assert ws.receive_json()["code"] == "ValidationError"


def test_action_before_joining():
    with TestClient(app) as client:
        with client.websocket_connect("/ws") as ws:
            ws.send_json({"type": "roll_dice"})
            error = ws.receive_json()
            assert error["type"] == "error"
            assert error["code"] == "InvalidTarget"


def test_disconnect_and_reconnect():
    with TestClient(app) as client:
        with client.websocket_connect("/ws") as host_ws:
            room = _create_room(host_ws)

            with client.websocket_connect("/ws") as bob_ws:
                bob_ws.send_json({"type": "join_room", "room_id": room["room_id"], "player_name": "Bob"})
                bob_id = _receive_until(bob_ws, "joined")["player_id"]
                _receive_until(host_ws, "state")

            state = _receive_until(host_ws, "state")["state"]
            bob = next(p for p in state["players"] if p["id"] == bob_id)
            assert bob["disconnected"] is True

            listed = next(r for r in client.get("/rooms").json()["rooms"] if r["id"] == room["room_id"])
            assert listed["connected_count"] == 1
            assert listed["player_count"] == 2

            with client.websocket_connect("/ws") as bob_ws:
                bob_ws.send_json({"type": "reconnect", "room_id": room["room_id"], "player_id": bob_id})
                assert _receive_until(bob_ws, "joined")["player_id"] == bob_id
                state = _receive_until(bob_ws, "state")["state"]
                bob = next(p for p in state["players"] if p["id"] == bob_id)
                assert bob["disconnected"] is False


def test_room_hidden_after_everyone_leaves():
    with TestClient(app) as client:
        with client.websocket_connect("/ws") as ws:
            room = _create_room(ws)

        rooms = client.get("/rooms").json()["rooms"]
        assert room["room_id"] not in [r["id"] for r in rooms]


def test_second_join_on_same_socket_rejected():
    with TestClient(app) as client:
        with client.websocket_connect("/ws") as host_ws:
            room = _create_room(host_ws)

            with client.websocket_connect("/ws") as guest_ws:
                guest_ws.send_json({"type": "join_room", "room_id": room["room_id"], "player_name": "Bob"})
                _receive_until(guest_ws, "state")

                guest_ws.send_json({"type": "join_room", "room_id": room["room_id"], "player_name": "Carol"})
                error = _receive_until(guest_ws, "error")
                assert error["code"] == "InvalidTarget"

            state = _receive_until(host_ws, "state")["state"]
            assert [p["name"] for p in state["players"]] == ["Alice", "Bob"]

        rooms = client.get("/rooms").json()["rooms"]
        assert room["room_id"] not in [r["id"] for r in rooms]


def test_name_can_rejoin_after_socket_closes():
    with TestClient(app) as client:
        with client.websocket_connect("/ws") as host_ws:
            room = _create_room(host_ws)

            with client.websocket_connect("/ws") as guest_ws:
                guest_ws.send_json({"type": "join_room", "room_id": room["room_id"], "player_name": "Bob"})
                bob_id = _receive_until(guest_ws, "joined")["player_id"]

            with client.websocket_connect("/ws") as guest_ws:
                guest_ws.send_json({"type": "join_room", "room_id": room["room_id"], "player_name": "Bob"})
                assert _receive_until(guest_ws, "joined")["player_id"] == bob_id
