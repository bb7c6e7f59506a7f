"""Live feed of world updates over WebSockets.

A subscriber gets a `world_snapshot` message as soon as it connects, then one
`world_ticked` or `world_stopped` message per request that changed the world.
Every message carries the full world view plus the lines agents said and the
agents that stopped, so a client can follow the town without polling.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import Sequence
from typing import Any, Literal

from fastapi import WebSocket, WebSocketDisconnect

from westworld.core.events import WorldEvent, stopped_agents, transcript

logger = logging.getLogger(__name__)

FeedMessageType = Literal["world_snapshot", "world_ticked", "world_stopped"]


def feed_message(
    type: FeedMessageType,
    *,
    world: dict[str, Any],
    events: Sequence[WorldEvent] = (),
) -> dict[str, Any]:
    """Build one feed message from a JSON-ready world view and the events behind it."""

    return {
        "type": type,
        "world_id": world["world_id"],
        "tick": world["tick"],
        "phase": world["phase"],
        "world": world,
        "lines": transcript(events),
        "stopped": stopped_agents(events),
    }


class WorldFeed:
    """In-process subscribers per world, keyed by the world id string."""

    def __init__(self) -> None:
        self._subscribers: dict[str, set[WebSocket]] = defaultdict(set)
        self._lock = asyncio.Lock()

    async def subscribe(self, websocket: WebSocket, *, world: dict[str, Any]) -> None:
        await websocket.accept()
        # Snapshot first so the subscriber never sees an update before the state it applies to.
        await websocket.send_json(feed_message("world_snapshot", world=world))
        async with self._lock:
            self._subscribers[world["world_id"]].add(websocket)

    async def unsubscribe(self, world_id: str, websocket: WebSocket) -> None:
        async with self._lock:
            conns = self._subscribers.get(world_id)
            if not conns:
                return
            conns.discard(websocket)
            if not conns:
                self._subscribers.pop(world_id, None)

    async def publish(
        self,
        type: FeedMessageType,
        *,
        world: dict[str, Any],
        events: Sequence[WorldEvent],
    ) -> int:
        """Send an update to every subscriber of the world; returns how many got it."""

        world_id = world["world_id"]
        async with self._lock:
            conns = list(self._subscribers.get(world_id, ()))
        if not conns:
            return 0

        message = feed_message(type, world=world, events=events)
        dead: list[WebSocket] = []
        for ws in conns:
            try:
                await ws.send_json(message)
            except (WebSocketDisconnect, RuntimeError, OSError):
                logger.debug("dropping subscriber of world %s", world_id, exc_info=True)
                dead.append(ws)

        for ws in dead:
            await self.unsubscribe(world_id, ws)
        return len(conns) - len(dead)


feed = WorldFeed()
