"""Tests for display configuration parsing and host resolution."""

from __future__ import annotations

import pytest

from sicp_display.client import (
    AxisConfig,
    InputDefinition,
    SicpDisplayConfig,
    VolumeConfig,
    parse_code,
    resolve_display_tcp_host,
)
from sicp_display.constants import DEFAULT_PORT, DEFAULT_POLL_INTERVAL, DEFAULT_TIMEOUT
from sicp_display.exceptions import SicpDisplayError, UnconfiguredAxisError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("SICP_DISPLAY_HOST", "SICP_DISPLAY_PORT", "SICP_DISPLAY_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


@pytest.mark.parametrize(
    "raw, expected",
    [(0x44, 0x44), ("0x44", 0x44), ("0X1f", 0x1F), ("68", 68), (" 12 ", 12), (0x1AC, 0xAC), (None, None), ("", None)],
)
def test_parse_code(raw, expected) -> None:
    assert parse_code(raw) == expected


@pytest.mark.parametrize("raw", ["loud", "0xZZ", True])
def test_parse_code_rejects_garbage(raw) -> None:
    with pytest.raises(SicpDisplayError):
        parse_code(raw)


def test_defaults() -> None:
    config = SicpDisplayConfig(host="10.0.0.20")

    assert config.name == "10.0.0.20"
    assert config.port == DEFAULT_PORT
    assert config.timeout_secs == DEFAULT_TIMEOUT
    assert config.poll_interval_secs == DEFAULT_POLL_INTERVAL
    assert config.target_id == 1
    assert config.packet_group_id == 0
    assert [(i.identifier, i.code) for i in config.inputs] == [(1, 0x0D), (2, 0x06), (3, 0x0F), (4, 0x19)]
    assert config.volume.mode == "unconfigured"
    assert config.brightness.mode == "unconfigured"


def test_environment_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SICP_DISPLAY_HOST", "lobby.local")
    monkeypatch.setenv("SICP_DISPLAY_PORT", "5001")
    monkeypatch.setenv("SICP_DISPLAY_TIMEOUT", "2.5")

    config = SicpDisplayConfig()

    assert config.host == "lobby.local"
    assert config.port == 5001
    assert config.timeout_secs == 2.5


def test_group_disabled_drops_group_id() -> None:
    config = SicpDisplayConfig(host="x", group_enabled=False, group_id=3)

    assert config.packet_group_id is None


def test_from_jsonable_with_aliases() -> None:
    config = SicpDisplayConfig.from_jsonable(
        {
            "name": "Lobby",
            "host": "10.0.0.20",
            "monitorId": 3,
            "includeGroup": False,
            "timeoutMs": 2000,
            "pollInterval": 0,
            "inputs": [{"label": "PC", "code": "0x05"}, {"identifier": 7, "label": "DP", "code": 10}],
            "volume": {"setCode": "0x44", "muteToggleCode": "0x45", "initial": 20},
            "brightness": {"upCode": "0x11", "downCode": "0x12", "stepDelayMs": 150},
        }
    )

    assert config.name == "Lobby"
    assert config.target_id == 3
    assert config.group_enabled is False
    assert config.timeout_secs == 2.0
    assert config.poll_interval_secs == 0
    assert [(i.identifier, i.label, i.code) for i in config.inputs] == [(1, "PC", 0x05), (7, "DP", 0x0A)]
    assert config.volume.mode == "absolute"
    assert config.volume.mute_mode == "toggle"
    assert config.volume.initial == 20
    assert config.brightness.mode == "relative"
    assert config.brightness.step_delay_secs == 0.15


def test_half_configured_axis_is_rejected() -> None:
    with pytest.raises(UnconfiguredAxisError):
        AxisConfig(up_code=0x11)
    with pytest.raises(UnconfiguredAxisError):
        VolumeConfig.from_jsonable({"downCode": "0x21"})


def test_set_code_wins_over_step_codes() -> None:
    axis = AxisConfig(set_code=0x10, up_code=0x11)

    assert axis.mode == "absolute"


def test_axis_initial_is_clamped() -> None:
    axis = AxisConfig(min_value=10, max_value=20, initial=50)

    assert axis.initial == 20


def test_duplicate_input_identifiers_are_rejected() -> None:
    with pytest.raises(SicpDisplayError):
        SicpDisplayConfig(host="x", inputs=[InputDefinition(1, "A", 1), InputDefinition(1, "B", 2)])


def test_base_config_is_copied() -> None:
    base = SicpDisplayConfig(host="x", name="base", target_id=4)

    derived = SicpDisplayConfig(name="derived", base_config=base)

    assert derived.host == "x"
    assert derived.target_id == 4
    assert derived.name == "derived"
    assert base.name == "base"


@pytest.mark.parametrize(
    "host, default_port, expected",
    [
        ("10.0.0.20", None, ("10.0.0.20", DEFAULT_PORT)),
        ("tcp://10.0.0.20", 6000, ("10.0.0.20", 6000)),
        ("display.local:5002", 6000, ("display.local", 5002)),
    ],
)
def test_resolve_host(host, default_port, expected) -> None:
    assert resolve_display_tcp_host(host, default_port) == expected


def test_resolve_host_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SICP_DISPLAY_HOST", "env.local")
    monkeypatch.setenv("SICP_DISPLAY_PORT", "5010")

    assert resolve_display_tcp_host() == ("env.local", 5010)


@pytest.mark.parametrize("host", [None, "udp://10.0.0.20", "10.0.0.20:http", ":5000"])
def test_resolve_host_errors(host) -> None:
    with pytest.raises(SicpDisplayError):
        resolve_display_tcp_host(host)
