from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import StrEnum

from westworld.agents.base import AgentContext, DispatchHandler
from westworld.config import PartnerConfig
from westworld.fsm import Handler, StateTransition
from westworld.location import Location


class PartnerChore(StrEnum):
    mopping = "mopping"
    washing = "washing"
    bed_making = "bed_making"


CHORE_LINES: dict[PartnerChore, str] = {
    PartnerChore.mopping: "Moppin' the floor",
    PartnerChore.washing: "Washin' the dishes",
    PartnerChore.bed_making: "Makin' the bed",
}


@dataclass(slots=True)
class Partner(AgentContext):
    config: PartnerConfig = field(default_factory=PartnerConfig)
    rng: random.Random = field(default_factory=random.Random, repr=False)

    def pick_chore(self) -> PartnerChore:
        return self.rng.choice(list(PartnerChore))

    def needs_bathroom(self) -> bool:
        return self.rng.random() < self.config.bathroom_chance


class PartnerState(StrEnum):
    do_house_work = "do_house_work"
    visit_bathroom = "visit_bathroom"


class DoHouseWork(Handler[PartnerState, Partner]):
    def on_resume(self, state: PartnerState, ctx: Partner) -> None:
        ctx.say("Back to the chores")

    def update(self, state: PartnerState, ctx: Partner) -> StateTransition[PartnerState]:
        if ctx.needs_bathroom():
            return StateTransition.push(PartnerState.visit_bathroom)

        ctx.say(CHORE_LINES[ctx.pick_chore()])
        return StateTransition.none()


class VisitBathroom(Handler[PartnerState, Partner]):
    def on_start(self, state: PartnerState, ctx: Partner) -> None:
        ctx.say("Walkin' to the can")

    def on_resume(self, state: PartnerState, ctx: Partner) -> None:
        self.on_start(state, ctx)

    def update(self, state: PartnerState, ctx: Partner) -> StateTransition[PartnerState]:
        ctx.say("Ahhhhhh! Sweet relief")
        return StateTransition.pop()

    def on_stop(self, state: PartnerState, ctx: Partner) -> None:
        ctx.say("Leavin' the Jon")


PARTNER_BEHAVIORS: dict[PartnerState, Handler[PartnerState, Partner]] = {
    PartnerState.do_house_work: DoHouseWork(),
    PartnerState.visit_bathroom: VisitBathroom(),
}

PARTNER_INITIAL_STATE = PartnerState.do_house_work


class PartnerHandler(DispatchHandler[PartnerState, Partner]):
    states = PartnerState
    kind = "partner"

    def __init__(self, behaviors: dict[PartnerState, Handler[PartnerState, Partner]] | None = None) -> None:
        super().__init__(behaviors or PARTNER_BEHAVIORS)


def make_partner(*, name: str, config: PartnerConfig | None = None, seed: int | None = None) -> Partner:
    return Partner(
        name=name,
        location=Location.shack,
        config=config or PartnerConfig(),
        rng=random.Random(seed),
    )
