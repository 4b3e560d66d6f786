from __future__ import annotations

import logging

import pytest

from common import settings
from common.logging import resolve_level
from util.color import normalize_color, parse_hex_color_str


def test_settings_defaults(clean_settings) -> None:  # noqa: ANN001
    s = settings.get()
    assert s.WORKERS is None and s.SEED is None
    assert s.NEAR_CUTOFF == 5.5
    assert s.SYNC is False
    assert s.LOG_LEVEL == "INFO"


def test_settings_reload_from_env(clean_settings) -> None:  # noqa: ANN001
    clean_settings.setenv("CHASE_WORKERS", "-3")
    clean_settings.setenv("CHASE_SEED", "42")
    clean_settings.setenv("CHASE_SYNC", "yes")
    clean_settings.setenv("CHASE_NEAR_CUTOFF", "0")
    clean_settings.setenv("CHASE_LOG_LEVEL", "debug")
    settings.reload_from_env()
    s = settings.get()
    assert s.WORKERS == 0
    assert s.SEED == 42
    assert s.SYNC is True
    assert s.NEAR_CUTOFF == 0.0
    assert resolve_level(None) == logging.DEBUG


def test_settings_invalid_values_fall_back(clean_settings) -> None:  # noqa: ANN001
    clean_settings.setenv("CHASE_SEED", "abc")
    clean_settings.setenv("CHASE_NEAR_CUTOFF", "near")
    settings.reload_from_env()
    assert settings.get().SEED is None
    assert settings.get().NEAR_CUTOFF == 5.5


def test_resolve_level_variants() -> None:
    assert resolve_level("warning") == logging.WARNING
    assert resolve_level(10) == 10
    assert resolve_level("nonsense") == logging.INFO


def test_color_parsing() -> None:
    assert parse_hex_color_str("#007FFF") == (0, 127, 255)
    assert parse_hex_color_str("0x007fffcc") == (0, 127, 255)
    assert normalize_color([0, 127, 255]) == (0, 127, 255)
    assert normalize_color((300, -5, 10)) == (255, 0, 10)
    assert normalize_color((0.0, 0.5, 1.0)) == (0, 128, 255)
    with pytest.raises(ValueError):
        parse_hex_color_str("#12345")
    with pytest.raises(ValueError):
        normalize_color(12)
    with pytest.raises(ValueError):
        normalize_color((1, 2))


def test_env_helpers_parse_and_fall_back(monkeypatch: pytest.MonkeyPatch) -> None:
    from common.env import env_bool, env_float, env_int, env_str

    monkeypatch.setenv("CHASE_TEST_INT", " 7 ")
    monkeypatch.setenv("CHASE_TEST_FLOAT", "oops")
    monkeypatch.setenv("CHASE_TEST_BOOL", "2")
    monkeypatch.setenv("CHASE_TEST_STR", "   ")
    assert env_int("CHASE_TEST_INT", None, min_value=10) == 10
    assert env_float("CHASE_TEST_FLOAT", 1.5) == 1.5
    assert env_bool("CHASE_TEST_BOOL") is True
    assert env_str("CHASE_TEST_STR", "dflt") == "dflt"
    monkeypatch.setenv("CHASE_TEST_BOOL", "maybe")
    assert env_bool("CHASE_TEST_BOOL", True) is True
    monkeypatch.setenv("CHASE_TEST_BOOL", "Off")
    assert env_bool("CHASE_TEST_BOOL", True) is False
