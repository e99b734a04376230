"""
Turret Defense Simulator - Python Client SDK

Usage:
    from client.defense_client import DefenseClient

    client = DefenseClient()

    # Drop a hostile 20 m north of the origin
    client.spawn_hostile([0, 20, 0])

    # Watch the turrets react
    for t in client.get_turrets():
        print(t["id"], t["state"], t["heading_deg"])

    # Events via WebSocket
    client.on_event(lambda e: print(e))
"""

import json
import time
import asyncio
import threading
from typing import Callable, Optional, List, Sequence

import httpx
import websockets


class DefenseClient:
    """
    Client SDK for the defense simulator REST API.
    """

    def __init__(self, host: str = "localhost", api_port: int = 8420,
                 ws_port: int = 8421, transport: httpx.BaseTransport = None):
        self.base_url = f"http://{host}:{api_port}"
        self.ws_url = f"ws://{host}:{ws_port}"
        self._http = httpx.Client(base_url=self.base_url, timeout=5.0,
                                  transport=transport)
        self._event_thread: Optional[threading.Thread] = None
        self._event_callback: Optional[Callable] = None
        self._ws_running = False

    def _get(self, path: str) -> dict:
        resp = self._http.get(path)
        resp.raise_for_status()
        return resp.json()

    def _post(self, path: str, data: dict = None) -> dict:
        resp = self._http.post(path, json=data or {})
        resp.raise_for_status()
        return resp.json()

    # === Status ===

    def get_status(self) -> dict:
        """Simulation summary."""
        return self._get("/status")

    def get_turrets(self) -> List[dict]:
        return self._get("/turrets")["turrets"]

    def get_turret(self, turret_id: int) -> dict:
        return self._get(f"/turrets/{turret_id}")

    def get_hostiles(self) -> List[dict]:
        return self._get("/hostiles")["hostiles"]

    def get_projectiles(self) -> List[dict]:
        return self._get("/projectiles")["projectiles"]

    # === Control ===

    def spawn_hostile(self, position: Sequence[float],
                      velocity: Sequence[float] = None) -> dict:
        """
        Spawn a hostile.

        Args:
            position: [x, y, z] world position
            velocity: optional [vx, vy, vz]; standing still if omitted
        """
        payload = {"position": list(position)}
        if velocity is not None:
            payload["velocity"] = list(velocity)
        return self._post("/hostiles", payload)["hostile"]

    def pause(self) -> dict:
        return self._post("/sim/pause")

    def resume(self) -> dict:
        return self._post("/sim/resume")

    # === WebSocket Events ===

    def on_event(self, callback: Callable[[dict], None]):
        """
        Subscribe to real-time events via WebSocket.

        Events: turret_placed, muzzle_resolved, turret_state, shot_fired,
        hostile_spawned, hostile_breached, hostile_expired
        """
        self._event_callback = callback
        if not self._ws_running:
            self._start_ws_listener()

    def _start_ws_listener(self):
        self._ws_running = True

        def ws_thread():
            loop = asyncio.new_event_loop()
            asyncio.set_event_loop(loop)
            loop.run_until_complete(self._ws_loop())

        self._event_thread = threading.Thread(
            target=ws_thread, daemon=True, name="ws-client"
        )
        self._event_thread.start()

    async def _ws_loop(self):
        while self._ws_running:
            try:
                async with websockets.connect(self.ws_url) as ws:
                    async for message in ws:
                        try:
                            event = json.loads(message)
                        except json.JSONDecodeError:
                            continue
                        if self._event_callback:
                            self._event_callback(event)
            except (OSError, websockets.ConnectionClosed):
                await asyncio.sleep(1)

    # === Utilities ===

    def wait_for_state(self, turret_id: int, state: str,
                       timeout: float = 5.0, poll: float = 0.05) -> bool:
        """Poll until a turret reports *state* ("idle", "tracking", "aligned")."""
        start = time.time()
        while time.time() - start < timeout:
            if self.get_turret(turret_id).get("state") == state:
                return True
            time.sleep(poll)
        return False

    def close(self):
        """Clean up."""
        self._ws_running = False
        self._http.close()
