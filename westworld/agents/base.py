from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TypeVar

from westworld.fsm import Handler, StateTransition
from westworld.location import Location

logger = logging.getLogger(__name__)

S = TypeVar("S", bound=StrEnum)
D = TypeVar("D", bound="AgentContext")


@dataclass(slots=True)
class AgentContext:
    """Data shared by every state of one agent.

    This is the mutable context threaded through the FSM callbacks.
    """

    name: str
    location: Location = Location.shack
    transcript: list[str] = field(default_factory=list)

    def say(self, msg: str) -> None:
        logger.info("%s: %s", self.name, msg)
        self.transcript.append(msg)

    def drain_transcript(self) -> list[str]:
        lines = list(self.transcript)
        self.transcript.clear()
        return lines

    def stats(self) -> dict[str, int]:
        return {}

    def walk_to(self, location: Location, announce: str) -> None:
        """Move to `location`, announcing it only if the agent is elsewhere."""

        if self.location != location:
            self.say(announce)
            self.location = location


class DispatchHandler(Handler[S, D]):
    """Routes every callback to the behavior registered for the state.

    Subclasses set `states` to their state enum and `kind` to the agent kind
    used in error messages. Construction fails unless every state is covered.
    """

    states: type[StrEnum]
    kind: str = "agent"

    def __init__(self, behaviors: Mapping[S, Handler[S, D]]) -> None:
        self._behaviors = dict(behaviors)
        missing = set(self.states) - set(self._behaviors)
        if missing:
            raise ValueError(f"No behavior for {self.kind} states: {sorted(m.value for m in missing)}")

    def _for(self, state: S) -> Handler[S, D]:
        return self._behaviors[self.states(state)]

    def on_start(self, state: S, ctx: D) -> None:
        self._for(state).on_start(state, ctx)

    def on_stop(self, state: S, ctx: D) -> None:
        self._for(state).on_stop(state, ctx)

    def on_pause(self, state: S, ctx: D) -> None:
        self._for(state).on_pause(state, ctx)

    def on_resume(self, state: S, ctx: D) -> None:
        self._for(state).on_resume(state, ctx)

    def update(self, state: S, ctx: D) -> StateTransition[S]:
        return self._for(state).update(state, ctx)
