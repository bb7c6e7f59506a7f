from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Literal
from uuid import UUID, uuid4

from statemachine import State
from statemachine import StateMachine as LifecycleMachine
from statemachine.exceptions import TransitionNotAllowed

from westworld.agents.base import AgentContext
from westworld.agents.miner import MINER_INITIAL_STATE, MinerHandler, make_miner
from westworld.agents.partner import PARTNER_INITIAL_STATE, PartnerHandler, make_partner
from westworld.config import MinerConfig, PartnerConfig
from westworld.core.events import WorldEvent
from westworld.fsm import Handler, StateMachine, StateStack

logger = logging.getLogger(__name__)

AgentKind = Literal["miner", "partner"]


class WorldPhase(StrEnum):
    created = "created"
    running = "running"
    finished = "finished"


class WorldLifecycle(LifecycleMachine):
    """Guards the world phases: created -> running -> finished.

    A finished world cannot be restarted; build a new one instead.
    """

    created = State(WorldPhase.created.value, value=WorldPhase.created.value, initial=True)
    running = State(WorldPhase.running.value, value=WorldPhase.running.value)
    finished = State(WorldPhase.finished.value, value=WorldPhase.finished.value, final=True)

    begin = created.to(running)
    conclude = running.to(finished) | created.to(finished)


@dataclass(slots=True)
class AgentSlot:
    """One agent: its context, the handler for its states, and its state stack."""

    name: str
    kind: AgentKind
    handler: Handler[Any, Any]
    context: AgentContext
    initial_state: Any
    stack: StateStack[Any] = field(default_factory=StateStack)

    def is_running(self) -> bool:
        return StateMachine.is_running(self.stack)


class World:
    def __init__(self, *, world_id: UUID | None = None, seed: int | None = None) -> None:
        self.world_id: UUID = world_id or uuid4()
        self.seed = seed
        self.tick = 0
        self.slots: list[AgentSlot] = []
        self.history: list[WorldEvent] = []
        self._lifecycle = WorldLifecycle()
        self._seed_rng = random.Random(seed)

    @property
    def phase(self) -> WorldPhase:
        return WorldPhase(str(self._lifecycle.current_state.value))

    def add_agent(self, slot: AgentSlot) -> AgentSlot:
        if self.phase != WorldPhase.created:
            raise ValueError("Agents can only be added before the world starts")
        if any(s.name == slot.name for s in self.slots):
            raise ValueError(f"Duplicate agent name: {slot.name}")
        self.slots.append(slot)
        return slot

    def add_miner(self, name: str, *, config: MinerConfig | None = None) -> AgentSlot:
        return self.add_agent(
            AgentSlot(
                name=name,
                kind="miner",
                handler=MinerHandler(),
                context=make_miner(name=name, config=config),
                initial_state=MINER_INITIAL_STATE,
            )
        )

    def add_partner(self, name: str, *, config: PartnerConfig | None = None) -> AgentSlot:
        # Per-agent seeds derive from the world seed so a seeded world replays identically.
        agent_seed = self._seed_rng.randrange(2**32) if self.seed is not None else None
        return self.add_agent(
            AgentSlot(
                name=name,
                kind="partner",
                handler=PartnerHandler(),
                context=make_partner(name=name, config=config, seed=agent_seed),
                initial_state=PARTNER_INITIAL_STATE,
            )
        )

    def get_slot(self, name: str) -> AgentSlot | None:
        return next((s for s in self.slots if s.name == name), None)

    def is_running(self) -> bool:
        return any(s.is_running() for s in self.slots)

    def start(self) -> list[WorldEvent]:
        """Seed every agent with its initial state, firing `on_start`.

        The seeding lines are recorded in `history` and returned.
        """

        events = self._seed_agents()
        self.history.extend(events)
        self._finish_if_idle()
        return events

    def run_single_tick(self) -> list[WorldEvent]:
        """Update every running agent once.

        A created world is started first, inside the tick. A finished world
        yields no events.
        """

        if self.phase == WorldPhase.finished:
            return []

        tick = self.tick
        events = [WorldEvent.tick_started(tick, agents=len(self.slots))]

        if self.phase == WorldPhase.created:
            events.extend(self._seed_agents())

        for slot in self.slots:
            if not slot.is_running():
                continue
            StateMachine.update(slot.handler, slot.stack, slot.context)
            events.extend(self._said_events(slot))
            if not slot.is_running():
                events.append(WorldEvent.agent_stopped(self.tick, agent=slot.name))

        events.append(WorldEvent.tick_ended(tick, running=self.is_running()))

        self.history.extend(events)
        self.tick += 1
        self._finish_if_idle()
        return events

    def stop(self) -> list[WorldEvent]:
        """Unwind every agent's stack, firing `on_stop` top to bottom."""

        if self.phase == WorldPhase.finished:
            raise ValueError("World already finished")

        events: list[WorldEvent] = []
        for slot in self.slots:
            if not slot.is_running():
                continue
            StateMachine.stop(slot.handler, slot.stack, slot.context)
            events.extend(self._said_events(slot))
            events.append(WorldEvent.agent_stopped(self.tick, agent=slot.name))

        self._lifecycle.conclude()
        self.history.extend(events)
        return events

    def _seed_agents(self) -> list[WorldEvent]:
        try:
            self._lifecycle.begin()
        except TransitionNotAllowed as e:
            raise ValueError(f"World cannot be started from phase {self.phase.value}") from e

        events: list[WorldEvent] = []
        for slot in self.slots:
            StateMachine.push(slot.handler, slot.initial_state, slot.stack, slot.context)
            events.extend(self._said_events(slot))

        logger.info("world %s started with %d agents", self.world_id, len(self.slots))
        return events

    def _finish_if_idle(self) -> None:
        if self.phase == WorldPhase.running and not self.is_running():
            self._lifecycle.conclude()
            logger.info("world %s finished after %d ticks", self.world_id, self.tick)

    def _said_events(self, slot: AgentSlot) -> list[WorldEvent]:
        return [WorldEvent.agent_said(self.tick, agent=slot.name, line=line) for line in slot.context.drain_transcript()]


def build_world(
    *,
    miners: list[str],
    partners: list[str],
    seed: int | None = None,
    miner_config: MinerConfig | None = None,
    partner_config: PartnerConfig | None = None,
) -> World:
    world = World(seed=seed)
    for name in miners:
        world.add_miner(name, config=miner_config)
    for name in partners:
        world.add_partner(name, config=partner_config)
    return world
