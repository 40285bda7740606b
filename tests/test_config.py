import pytest

from fiplanner.config import DEFAULT_HORIZON_YEARS, DEFAULT_MC_PATHS, EngineSettings, settings_from_env

ENV_VARS = (
    "FIPLANNER_HORIZON_YEARS",
    "FIPLANNER_MC_PATHS",
    "FIPLANNER_MC_VOLATILITY",
    "FIPLANNER_MC_SEED",
    "FIPLANNER_MC_WORKERS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_environment():
    settings = settings_from_env()

    assert settings == EngineSettings()
    assert settings.horizon_years == DEFAULT_HORIZON_YEARS
    assert settings.mc_paths == DEFAULT_MC_PATHS
    assert settings.mc_seed is None


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("FIPLANNER_HORIZON_YEARS", "40")
    monkeypatch.setenv("FIPLANNER_MC_PATHS", "1000")
    monkeypatch.setenv("FIPLANNER_MC_VOLATILITY", "0.2")
    monkeypatch.setenv("FIPLANNER_MC_SEED", " 123 ")
    monkeypatch.setenv("FIPLANNER_MC_WORKERS", "4")

    settings = settings_from_env()

    assert settings == EngineSettings(horizon_years=40, mc_paths=1000, mc_volatility=0.2, mc_seed=123, mc_workers=4)


def test_blank_value_falls_back_to_default(monkeypatch):
    monkeypatch.setenv("FIPLANNER_MC_PATHS", "  ")

    assert settings_from_env().mc_paths == DEFAULT_MC_PATHS


def test_unparseable_value_is_rejected(monkeypatch):
    monkeypatch.setenv("FIPLANNER_MC_PATHS", "lots")

    with pytest.raises(ValueError, match="FIPLANNER_MC_PATHS"):
        settings_from_env()


@pytest.mark.parametrize(
    "name, value",
    [
        ("FIPLANNER_HORIZON_YEARS", "0"),
        ("FIPLANNER_MC_PATHS", "-1"),
        ("FIPLANNER_MC_WORKERS", "0"),
    ],
)
def test_out_of_range_values_are_rejected(monkeypatch, name, value):
    monkeypatch.setenv(name, value)

    with pytest.raises(ValueError):
        settings_from_env()
