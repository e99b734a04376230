"""
WebSocket Event Server

Pushes simulation events to connected clients as JSON
{"event": <type>, "data": {...}}:
  - turret_placed / muzzle_resolved
  - turret_state: idle / tracking / aligned transitions
  - shot_fired
  - hostile_spawned / hostile_breached / hostile_expired
"""

import json
import asyncio
import threading
import logging
from collections import deque
from typing import Set

import websockets

logger = logging.getLogger("turret_ws")

# Oldest events are dropped once this many are waiting
MAX_QUEUED_EVENTS = 1000


class EventBroadcaster:
    """
    Event broadcaster callable from the (non-async) frame loop.
    Events are queued under a lock and flushed from the server's own
    asyncio loop in a background thread. While the server is not
    running, events are dropped.
    """

    def __init__(self, host="127.0.0.1", port=8421):
        self.host = host
        self.port = port
        self._event_queue = deque(maxlen=MAX_QUEUED_EVENTS)
        self._lock = threading.Lock()
        self._clients: Set = set()
        self._thread = None
        self._running = False
        self._loop = None
        self._stop_future = None
        self._ready = threading.Event()
        self._listening = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self):
        """Start WebSocket server in background thread."""
        self._running = True
        self._ready.clear()
        self._thread = threading.Thread(
            target=self._run_server,
            daemon=True,
            name="turret_ws"
        )
        self._thread.start()

    def wait_until_listening(self, timeout: float = 5.0) -> bool:
        """Block until the server is accepting clients (or failed to start)."""
        self._ready.wait(timeout)
        return self._listening

    def stop(self):
        self._running = False
        loop = self._loop
        if loop and self._stop_future is not None and not loop.is_closed():
            loop.call_soon_threadsafe(self._release)

    def _release(self):
        if not self._stop_future.done():
            self._stop_future.set_result(None)

    def push_event(self, event: dict):
        """Manager event listener: forward a simulation event."""
        data = {k: v for k, v in event.items() if k != "type"}
        self.broadcast(event.get("type", "unknown"), data)

    def broadcast(self, event_type: str, data: dict = None):
        """Queue an event for broadcast (thread-safe)."""
        if not self._running:
            return
        message = json.dumps({"event": event_type, "data": data or {}})
        with self._lock:
            self._event_queue.append(message)

        loop = self._loop
        if self._listening and loop is not None and not loop.is_closed():
            loop.call_soon_threadsafe(
                lambda: asyncio.ensure_future(self._flush_queue())
            )

    def pending(self) -> int:
        with self._lock:
            return len(self._event_queue)

    async def _flush_queue(self):
        """Send queued events to all clients."""
        with self._lock:
            messages = list(self._event_queue)
            self._event_queue.clear()

        if not messages or not self._clients:
            return

        disconnected = set()
        for client in list(self._clients):
            for msg in messages:
                try:
                    await client.send(msg)
                except websockets.ConnectionClosed:
                    disconnected.add(client)
                    break

        self._clients -= disconnected

    async def _handler(self, websocket, path=None):
        self._clients.add(websocket)
        logger.info(f"WS client connected ({len(self._clients)} total)")
        try:
            await websocket.send(json.dumps({
                "event": "connected",
                "data": {"message": "Turret Defense WebSocket"},
            }))
            # Clients only listen; drain anything they send
            async for _ in websocket:
                pass
        except websockets.ConnectionClosed:
            pass
        finally:
            self._clients.discard(websocket)
            logger.info(f"WS client disconnected ({len(self._clients)} total)")

    async def _serve(self):
        self._stop_future = asyncio.get_running_loop().create_future()
        async with websockets.serve(self._handler, self.host, self.port):
            self._listening = True
            self._ready.set()
            logger.info(f"WebSocket server started on ws://{self.host}:{self.port}")
            await self._stop_future

    def _run_server(self):
        """Run async WebSocket server."""
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)
        try:
            self._loop.run_until_complete(self._serve())
        except Exception as e:
            logger.error(f"WebSocket server error: {e}")
        finally:
            self._running = False
            self._listening = False
            with self._lock:
                self._event_queue.clear()
            self._ready.set()
            self._loop.close()
