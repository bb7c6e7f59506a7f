from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class MinerConfig:
    # Bank savings at which the miner feels comfortable and heads home.
    comfort_level: int = 5
    # Nuggets the miner can carry.
    max_nuggets: int = 3
    # Above this value the miner is thirsty.
    thirst_level: int = 5
    # Above this value the miner is sleepy.
    tiredness_threshold: int = 5
    whiskey_price: int = 2


@dataclass(frozen=True, slots=True)
class PartnerConfig:
    # Per-tick chance of leaving the chores for the bathroom.
    bathroom_chance: float = 0.1


@dataclass(frozen=True, slots=True)
class SimulationSettings:
    # Delay between two ticks of the driver loop.
    tick_ms: int = 800
    # Stop the driver after this many ticks even if agents are still running.
    max_ticks: int | None = None
    seed: int | None = None


def _env_int(name: str, default: int | None) -> int | None:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e


def settings_from_env() -> SimulationSettings:
    defaults = SimulationSettings()
    tick_ms = _env_int("WESTWORLD_TICK_MS", defaults.tick_ms)
    if tick_ms is None or tick_ms < 0:
        raise ValueError("WESTWORLD_TICK_MS must be >= 0")

    return SimulationSettings(
        tick_ms=tick_ms,
        max_ticks=_env_int("WESTWORLD_MAX_TICKS", defaults.max_ticks),
        seed=_env_int("WESTWORLD_SEED", defaults.seed),
    )


def miner_config_from_env() -> MinerConfig:
    d = MinerConfig()
    return MinerConfig(
        comfort_level=_env_int("WESTWORLD_COMFORT_LEVEL", d.comfort_level),  # type: ignore[arg-type]
        max_nuggets=_env_int("WESTWORLD_MAX_NUGGETS", d.max_nuggets),  # type: ignore[arg-type]
        thirst_level=_env_int("WESTWORLD_THIRST_LEVEL", d.thirst_level),  # type: ignore[arg-type]
        tiredness_threshold=_env_int("WESTWORLD_TIREDNESS_THRESHOLD", d.tiredness_threshold),  # type: ignore[arg-type]
        whiskey_price=_env_int("WESTWORLD_WHISKEY_PRICE", d.whiskey_price),  # type: ignore[arg-type]
    )


def partner_config_from_env() -> PartnerConfig:
    chance = _env_float("WESTWORLD_BATHROOM_CHANCE", PartnerConfig().bathroom_chance)
    if not 0.0 <= chance <= 1.0:
        raise ValueError("WESTWORLD_BATHROOM_CHANCE must be between 0 and 1")
    return PartnerConfig(bathroom_chance=chance)
