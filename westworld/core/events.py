"""Events a world emits while it runs.

Every event is stamped with the tick it happened in. Agent events name the
agent, and `AGENT_SAID` carries the spoken line, which is how an agent's
transcript reaches the API and the live feed.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any


class WorldEventType(StrEnum):
    TICK_STARTED = "TICK_STARTED"
    AGENT_SAID = "AGENT_SAID"
    AGENT_STOPPED = "AGENT_STOPPED"
    TICK_ENDED = "TICK_ENDED"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class WorldEvent:
    type: WorldEventType
    tick: int
    payload: dict[str, Any] = field(default_factory=dict)
    ts: datetime = field(default_factory=_utcnow)

    @classmethod
    def tick_started(cls, tick: int, *, agents: int) -> WorldEvent:
        return cls(type=WorldEventType.TICK_STARTED, tick=tick, payload={"agents": agents})

    @classmethod
    def agent_said(cls, tick: int, *, agent: str, line: str) -> WorldEvent:
        return cls(type=WorldEventType.AGENT_SAID, tick=tick, payload={"agent": agent, "line": line})

    @classmethod
    def agent_stopped(cls, tick: int, *, agent: str) -> WorldEvent:
        return cls(type=WorldEventType.AGENT_STOPPED, tick=tick, payload={"agent": agent})

    @classmethod
    def tick_ended(cls, tick: int, *, running: bool) -> WorldEvent:
        return cls(type=WorldEventType.TICK_ENDED, tick=tick, payload={"running": running})

    def as_line(self) -> str | None:
        """`"<agent>: <line>"` for spoken events, None for everything else."""

        if self.type != WorldEventType.AGENT_SAID:
            return None
        return f"{self.payload['agent']}: {self.payload['line']}"


def transcript(events: Iterable[WorldEvent]) -> list[str]:
    return [line for e in events if (line := e.as_line()) is not None]


def stopped_agents(events: Iterable[WorldEvent]) -> list[str]:
    return [e.payload["agent"] for e in events if e.type == WorldEventType.AGENT_STOPPED]
