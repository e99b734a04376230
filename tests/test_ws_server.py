import asyncio
import json
import socket

import pytest
import websockets

from api.ws_server import EventBroadcaster, MAX_QUEUED_EVENTS


class RecordingSocket:

    def __init__(self):
        self.sent = []

    async def send(self, message):
        self.sent.append(json.loads(message))


def free_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture
def server():
    ws = EventBroadcaster(port=free_port())
    ws.start()
    assert ws.wait_until_listening(timeout=5.0)
    yield ws
    ws.stop()
    ws._thread.join(timeout=5.0)


def test_client_receives_greeting_and_events(server):
    url = f"ws://127.0.0.1:{server.port}"

    async def listen():
        async with websockets.connect(url) as conn:
            greeting = json.loads(await asyncio.wait_for(conn.recv(), 5.0))
            server.push_event({"type": "shot_fired", "turret_id": 0, "total_fired": 1})
            event = json.loads(await asyncio.wait_for(conn.recv(), 5.0))
            return greeting, event

    greeting, event = asyncio.run(listen())

    assert greeting["event"] == "connected"
    assert event == {"event": "shot_fired", "data": {"turret_id": 0, "total_fired": 1}}


def test_stop_shuts_the_server_down(server):
    server.stop()
    server._thread.join(timeout=5.0)
    assert not server._thread.is_alive()
    assert not server.running


def test_port_in_use_drops_events():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as taken:
        taken.bind(("127.0.0.1", 0))
        taken.listen(1)
        ws = EventBroadcaster(port=taken.getsockname()[1])
        ws.start()

        assert not ws.wait_until_listening(timeout=5.0)
        ws._thread.join(timeout=5.0)

        for i in range(50):
            ws.push_event({"type": "turret_state", "turret_id": i})

    assert not ws.running
    assert ws.pending() == 0


def test_events_dropped_before_start():
    ws = EventBroadcaster()
    ws.push_event({"type": "shot_fired", "turret_id": 0})
    assert ws.pending() == 0


def test_queue_is_capped():
    ws = EventBroadcaster()
    ws._running = True
    for i in range(MAX_QUEUED_EVENTS + 10):
        ws.broadcast("hostile_spawned", {"id": i})
    assert ws.pending() == MAX_QUEUED_EVENTS


def test_flush_delivers_to_clients():
    ws = EventBroadcaster()
    ws._running = True
    sock = RecordingSocket()
    ws._clients.add(sock)

    ws.push_event({"type": "turret_state", "turret_id": 2, "from": "idle", "to": "tracking"})
    asyncio.run(ws._flush_queue())

    assert sock.sent == [{
        "event": "turret_state",
        "data": {"turret_id": 2, "from": "idle", "to": "tracking"},
    }]
    assert ws.pending() == 0
