from __future__ import annotations

import pytest

from westworld.config import (
    MinerConfig,
    PartnerConfig,
    SimulationSettings,
    miner_config_from_env,
    partner_config_from_env,
    settings_from_env,
)

_VARS = (
    "WESTWORLD_TICK_MS",
    "WESTWORLD_MAX_TICKS",
    "WESTWORLD_SEED",
    "WESTWORLD_COMFORT_LEVEL",
    "WESTWORLD_MAX_NUGGETS",
    "WESTWORLD_THIRST_LEVEL",
    "WESTWORLD_TIREDNESS_THRESHOLD",
    "WESTWORLD_WHISKEY_PRICE",
    "WESTWORLD_BATHROOM_CHANCE",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_env() -> None:
    assert settings_from_env() == SimulationSettings()
    assert miner_config_from_env() == MinerConfig()
    assert partner_config_from_env() == PartnerConfig()


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WESTWORLD_TICK_MS", "10")
    monkeypatch.setenv("WESTWORLD_MAX_TICKS", "100")
    monkeypatch.setenv("WESTWORLD_SEED", "42")
    monkeypatch.setenv("WESTWORLD_COMFORT_LEVEL", "9")
    monkeypatch.setenv("WESTWORLD_BATHROOM_CHANCE", "0.5")

    assert settings_from_env() == SimulationSettings(tick_ms=10, max_ticks=100, seed=42)
    assert miner_config_from_env().comfort_level == 9
    assert partner_config_from_env().bathroom_chance == 0.5


def test_malformed_env_names_the_variable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WESTWORLD_MAX_NUGGETS", "lots")

    with pytest.raises(ValueError, match="WESTWORLD_MAX_NUGGETS"):
        miner_config_from_env()


def test_out_of_range_values_are_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WESTWORLD_TICK_MS", "-1")
    monkeypatch.setenv("WESTWORLD_BATHROOM_CHANCE", "1.5")

    with pytest.raises(ValueError):
        settings_from_env()
    with pytest.raises(ValueError):
        partner_config_from_env()
