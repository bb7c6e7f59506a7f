from __future__ import annotations

import asyncio
from collections.abc import Sequence
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect, status

from westworld.api.deps import get_store
from westworld.api.models import (
    TickResponse,
    WorldCreateRequest,
    WorldEventView,
    WorldListResponse,
    WorldView,
)
from westworld.core.events import WorldEvent
from westworld.live_feed import FeedMessageType, feed
from westworld.lock import world_lock
from westworld.world import World, WorldPhase, build_world
from westworld.world_store import WorldStore

router = APIRouter()


def _event_views(events: Sequence[WorldEvent]) -> list[WorldEventView]:
    return [WorldEventView(type=e.type, tick=e.tick, payload=e.payload, ts=e.ts) for e in events]


def _require_world(store: WorldStore, world_id: UUID) -> World:
    world = store.get(world_id)
    if world is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="World not found")
    return world


def _tick_locked(store: WorldStore, world: World, count: int) -> list[WorldEvent]:
    events: list[WorldEvent] = []
    with world_lock(store=store, world_id=world.world_id):
        for _ in range(count):
            if world.phase == WorldPhase.finished:
                break
            events.extend(world.run_single_tick())
    return events


def _stop_locked(store: WorldStore, world: World) -> list[WorldEvent]:
    with world_lock(store=store, world_id=world.world_id):
        return world.stop()


async def _respond(type: FeedMessageType, world: World, events: list[WorldEvent]) -> TickResponse:
    view = WorldView.from_world(world)
    await feed.publish(type, world=view.model_dump(mode="json"), events=events)
    return TickResponse(world=view, events=_event_views(events))


@router.websocket("/ws/world/{world_id}")
async def world_updates_ws(websocket: WebSocket, world_id: UUID, store: WorldStore = Depends(get_store)) -> None:
    world = store.get(world_id)
    if world is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    wid = str(world_id)
    await feed.subscribe(websocket, world=WorldView.from_world(world).model_dump(mode="json"))

    try:
        # Keep the socket open; client can optionally send pings.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        await feed.unsubscribe(wid, websocket)
    except Exception:
        await feed.unsubscribe(wid, websocket)
        raise


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/world", response_model=WorldView, status_code=status.HTTP_201_CREATED)
async def create_world_route(payload: WorldCreateRequest, store: WorldStore = Depends(get_store)) -> WorldView:
    try:
        world = build_world(
            miners=payload.miners,
            partners=payload.partners,
            seed=payload.seed,
            miner_config=payload.miner_config.to_config() if payload.miner_config else None,
            partner_config=payload.partner_config.to_config() if payload.partner_config else None,
        )
        store.add(world)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e

    return WorldView.from_world(world)


@router.get("/world", response_model=WorldListResponse)
async def list_worlds_route(store: WorldStore = Depends(get_store)) -> WorldListResponse:
    return WorldListResponse(worlds=[WorldView.from_world(w) for w in store.list_worlds()])


@router.get("/world/{world_id}", response_model=WorldView)
async def get_world_route(world_id: UUID, store: WorldStore = Depends(get_store)) -> WorldView:
    return WorldView.from_world(_require_world(store, world_id))


@router.post("/world/{world_id}/tick", response_model=TickResponse)
async def tick_world_route(
    world_id: UUID,
    count: int = Query(1, ge=1, le=1000),
    store: WorldStore = Depends(get_store),
) -> TickResponse:
    world = _require_world(store, world_id)

    # Agent callbacks are synchronous; keep them off the event loop.
    try:
        events = await asyncio.to_thread(_tick_locked, store, world, count)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

    return await _respond("world_ticked", world, events)


@router.post("/world/{world_id}/stop", response_model=TickResponse)
async def stop_world_route(world_id: UUID, store: WorldStore = Depends(get_store)) -> TickResponse:
    world = _require_world(store, world_id)

    try:
        events = await asyncio.to_thread(_stop_locked, store, world)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

    return await _respond("world_stopped", world, events)
