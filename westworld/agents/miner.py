from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum

from westworld.agents.base import AgentContext, DispatchHandler
from westworld.config import MinerConfig
from westworld.fsm import Handler, StateTransition
from westworld.location import Location

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Miner(AgentContext):
    gold: int = 0
    bank: int = 0
    thirst: int = 0
    fatigue: int = 0
    config: MinerConfig = field(default_factory=MinerConfig)

    def stats(self) -> dict[str, int]:
        return {"gold": self.gold, "bank": self.bank, "thirst": self.thirst, "fatigue": self.fatigue}

    def add_to_gold_carried(self, gold: int) -> None:
        self.gold = max(self.gold + gold, 0)

    def increase_fatigue(self) -> None:
        self.fatigue += 1

    def decrease_fatigue(self) -> None:
        self.fatigue -= 1

    def pockets_full(self) -> bool:
        return self.gold >= self.config.max_nuggets

    def increase_thirst(self) -> None:
        self.thirst += 1

    def thirsty(self) -> bool:
        return self.thirst > self.config.thirst_level

    def buy_and_drink_whiskey(self) -> None:
        self.bank -= self.config.whiskey_price
        self.thirst = 0

    def move_gold_to_bank(self) -> None:
        self.bank += self.gold
        self.gold = 0

    def wealth(self) -> int:
        return self.bank

    def fatigued(self) -> bool:
        return self.fatigue > self.config.tiredness_threshold


class MinerState(StrEnum):
    enter_mine_and_dig_for_nugget = "enter_mine_and_dig_for_nugget"
    visit_bank_and_deposit_gold = "visit_bank_and_deposit_gold"
    quench_thirst = "quench_thirst"
    go_home_and_sleep_til_rested = "go_home_and_sleep_til_rested"


MinerTransition = StateTransition[MinerState]


class EnterMineAndDigForNugget(Handler[MinerState, Miner]):
    def on_start(self, state: MinerState, ctx: Miner) -> None:
        ctx.walk_to(Location.goldmine, "Walkin' to the goldmine")

    def on_resume(self, state: MinerState, ctx: Miner) -> None:
        self.on_start(state, ctx)

    def update(self, state: MinerState, ctx: Miner) -> MinerTransition:
        ctx.increase_thirst()
        ctx.add_to_gold_carried(1)
        ctx.increase_fatigue()

        ctx.say("Pickin' up a nugget")

        if ctx.pockets_full():
            return StateTransition.switch(MinerState.visit_bank_and_deposit_gold)
        if ctx.thirsty():
            return StateTransition.switch(MinerState.quench_thirst)
        return StateTransition.none()

    def on_stop(self, state: MinerState, ctx: Miner) -> None:
        ctx.say("Ah'm leavin' the goldmine with mah pockets full o' sweet gold")


class VisitBankAndDepositGold(Handler[MinerState, Miner]):
    def on_start(self, state: MinerState, ctx: Miner) -> None:
        ctx.walk_to(Location.bank, "Goin' to the bank. Yes siree")

    def on_resume(self, state: MinerState, ctx: Miner) -> None:
        self.on_start(state, ctx)

    def update(self, state: MinerState, ctx: Miner) -> MinerTransition:
        ctx.increase_thirst()
        ctx.move_gold_to_bank()
        ctx.say(f"Depositing gold. Total savings now: {ctx.wealth()}")

        if ctx.wealth() >= ctx.config.comfort_level:
            ctx.say("WooHoo! Rich enough for now. Back home to mah li'lle lady")
            return StateTransition.switch(MinerState.go_home_and_sleep_til_rested)
        return StateTransition.switch(MinerState.enter_mine_and_dig_for_nugget)

    def on_stop(self, state: MinerState, ctx: Miner) -> None:
        ctx.say("Leavin' the bank")


class GoHomeAndSleepTilRested(Handler[MinerState, Miner]):
    def on_start(self, state: MinerState, ctx: Miner) -> None:
        ctx.walk_to(Location.shack, "Walkin' home")

    def update(self, state: MinerState, ctx: Miner) -> MinerTransition:
        ctx.increase_thirst()
        if not ctx.fatigued():
            ctx.say("What a God darn fantastic nap! Time to find more gold")
            return StateTransition.switch(MinerState.enter_mine_and_dig_for_nugget)

        ctx.decrease_fatigue()
        ctx.say("ZZZZ... ")
        return StateTransition.none()

    def on_stop(self, state: MinerState, ctx: Miner) -> None:
        ctx.say("Leaving the house")


class QuenchThirst(Handler[MinerState, Miner]):
    def on_start(self, state: MinerState, ctx: Miner) -> None:
        ctx.walk_to(Location.saloon, "Boy, ah sure is thusty! Walking to the saloon")

    def update(self, state: MinerState, ctx: Miner) -> MinerTransition:
        ctx.increase_thirst()
        if ctx.thirsty():
            ctx.buy_and_drink_whiskey()
            ctx.say("That's mighty fine sippin liquer")
            return StateTransition.switch(MinerState.enter_mine_and_dig_for_nugget)

        # Only reachable when the miner walked in without being thirsty.
        logger.error("%s: at the saloon without a thirst (thirst=%d), quitting", ctx.name, ctx.thirst)
        return StateTransition.quit()

    def on_stop(self, state: MinerState, ctx: Miner) -> None:
        ctx.say("Leaving the saloon, feelin' good")


MINER_BEHAVIORS: dict[MinerState, Handler[MinerState, Miner]] = {
    MinerState.enter_mine_and_dig_for_nugget: EnterMineAndDigForNugget(),
    MinerState.visit_bank_and_deposit_gold: VisitBankAndDepositGold(),
    MinerState.quench_thirst: QuenchThirst(),
    MinerState.go_home_and_sleep_til_rested: GoHomeAndSleepTilRested(),
}

MINER_INITIAL_STATE = MinerState.go_home_and_sleep_til_rested


class MinerHandler(DispatchHandler[MinerState, Miner]):
    states = MinerState
    kind = "miner"

    def __init__(self, behaviors: dict[MinerState, Handler[MinerState, Miner]] | None = None) -> None:
        super().__init__(behaviors or MINER_BEHAVIORS)


def make_miner(*, name: str, config: MinerConfig | None = None) -> Miner:
    return Miner(name=name, location=Location.shack, config=config or MinerConfig())
