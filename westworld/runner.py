"""Command-line driver: runs a world until every agent's machine stops.

Usage:
    python scripts/run_westworld.py
    WESTWORLD_MAX_TICKS=50 WESTWORLD_TICK_MS=0 westworld
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path

from dotenv import load_dotenv

from westworld.config import SimulationSettings, miner_config_from_env, partner_config_from_env, settings_from_env
from westworld.world import World, WorldPhase, build_world

logger = logging.getLogger(__name__)

DEFAULT_MINERS = ("Miner Bob",)
DEFAULT_PARTNERS = ("Elsa",)


def run_world(
    world: World,
    settings: SimulationSettings,
    *,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Tick `world` until it stops or `settings.max_ticks` is reached.

    Returns the number of ticks run.
    """

    ticks = 0
    if world.phase == WorldPhase.created:
        world.start()

    while world.is_running():
        if settings.max_ticks is not None and ticks >= settings.max_ticks:
            logger.info("stopping after max_ticks=%d", settings.max_ticks)
            break

        world.run_single_tick()
        ticks += 1

        if settings.tick_ms > 0:
            sleep(settings.tick_ms / 1000)

    return ticks


def main() -> int:
    env_path = Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=False)

    logging.basicConfig(level=logging.INFO, format="%(message)s")

    settings = settings_from_env()
    world = build_world(
        miners=list(DEFAULT_MINERS),
        partners=list(DEFAULT_PARTNERS),
        seed=settings.seed,
        miner_config=miner_config_from_env(),
        partner_config=partner_config_from_env(),
    )

    try:
        ticks = run_world(world, settings)
    except KeyboardInterrupt:
        logger.info("interrupted, stopping agents")
        world.stop()
        return 130

    logger.info("ran %d ticks", ticks)
    return 0
