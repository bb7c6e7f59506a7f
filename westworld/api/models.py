from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from westworld.config import MinerConfig, PartnerConfig
from westworld.core.events import WorldEventType
from westworld.location import Location
from westworld.world import AgentSlot, World, WorldPhase


class MinerConfigModel(BaseModel):
    comfort_level: int = Field(5, ge=0)
    max_nuggets: int = Field(3, ge=1)
    thirst_level: int = Field(5, ge=0)
    tiredness_threshold: int = Field(5, ge=0)
    whiskey_price: int = Field(2, ge=0)

    def to_config(self) -> MinerConfig:
        return MinerConfig(**self.model_dump())


class PartnerConfigModel(BaseModel):
    bathroom_chance: float = Field(0.1, ge=0.0, le=1.0)

    def to_config(self) -> PartnerConfig:
        return PartnerConfig(**self.model_dump())


class WorldCreateRequest(BaseModel):
    miners: list[str] = Field(default_factory=list, max_length=32)
    partners: list[str] = Field(default_factory=list, max_length=32)
    seed: int | None = None
    miner_config: MinerConfigModel | None = None
    partner_config: PartnerConfigModel | None = None

    @model_validator(mode="after")
    def _at_least_one_agent(self) -> "WorldCreateRequest":
        if not self.miners and not self.partners:
            raise ValueError("At least one miner or partner is required")
        names = [*self.miners, *self.partners]
        if any(not n.strip() for n in names):
            raise ValueError("Agent names must not be blank")
        if len(set(names)) != len(names):
            raise ValueError("Agent names must be unique")
        return self


class AgentView(BaseModel):
    name: str
    kind: str
    location: Location
    running: bool
    # State names, bottom of the stack first; the last one is active.
    stack: list[str] = Field(default_factory=list)
    stats: dict[str, int] = Field(default_factory=dict)

    @staticmethod
    def from_slot(slot: AgentSlot) -> "AgentView":
        return AgentView(
            name=slot.name,
            kind=slot.kind,
            location=slot.context.location,
            running=slot.is_running(),
            stack=[str(s) for s in slot.stack.states()],
            stats=slot.context.stats(),
        )


class WorldView(BaseModel):
    world_id: UUID
    phase: WorldPhase
    tick: int
    seed: int | None = None
    agents: list[AgentView]

    @staticmethod
    def from_world(world: World) -> "WorldView":
        return WorldView(
            world_id=world.world_id,
            phase=world.phase,
            tick=world.tick,
            seed=world.seed,
            agents=[AgentView.from_slot(s) for s in world.slots],
        )


class WorldEventView(BaseModel):
    type: WorldEventType
    tick: int
    payload: dict[str, Any]
    ts: datetime


class TickResponse(BaseModel):
    world: WorldView
    events: list[WorldEventView]


class WorldListResponse(BaseModel):
    worlds: list[WorldView]
