import json

import httpx
import pytest

from client.defense_client import DefenseClient


@pytest.fixture
def requests_seen():
    return []


@pytest.fixture
def client(requests_seen):
    turret = {"id": 0, "state": "aligned", "heading_deg": 12.5}

    def handler(request: httpx.Request) -> httpx.Response:
        requests_seen.append(request)
        path = request.url.path
        if path == "/turrets":
            return httpx.Response(200, json={"turrets": [turret]})
        if path == "/turrets/0":
            return httpx.Response(200, json=turret)
        if path == "/hostiles" and request.method == "POST":
            body = json.loads(request.content)
            return httpx.Response(201, json={"ok": True, "hostile": {"id": 3, **body}})
        if path == "/sim/pause":
            return httpx.Response(200, json={"ok": True, "paused": True})
        return httpx.Response(404, json={"error": "not found"})

    c = DefenseClient(transport=httpx.MockTransport(handler))
    yield c
    c.close()


def test_get_turrets(client):
    assert client.get_turrets()[0]["state"] == "aligned"


def test_spawn_hostile_sends_payload(client, requests_seen):
    hostile = client.spawn_hostile([0, 20, 0])

    assert hostile["id"] == 3
    sent = json.loads(requests_seen[-1].content)
    assert sent == {"position": [0, 20, 0]}


def test_spawn_hostile_with_velocity(client, requests_seen):
    client.spawn_hostile((1, 1, 0), velocity=(0, -2, 0))
    assert json.loads(requests_seen[-1].content)["velocity"] == [0, -2, 0]


def test_pause(client):
    assert client.pause()["paused"] is True


def test_http_errors_raise(client):
    with pytest.raises(httpx.HTTPStatusError):
        client.get_turret(5)


def test_wait_for_state(client):
    assert client.wait_for_state(0, "aligned", timeout=0.5)
    assert not client.wait_for_state(0, "idle", timeout=0.1, poll=0.02)
