"""Tests for the stateful SICP display client."""

from __future__ import annotations

import asyncio
from typing import List

import pytest

from conftest import ACK_REPLY, NACK_REPLY, NAV_REPLY, FakeTransport, make_config
from sicp_display.client import (
    AxisConfig,
    InputDefinition,
    PowerState,
    SicpDisplayClient,
    StateChange,
    VolumeConfig,
)
from sicp_display.client import client_impl
from sicp_display.exceptions import (
    DeviceRejectedError,
    SicpConnectionError,
    SicpTimeoutError,
    UnknownInputError,
)

POWER_ON = bytes([0x18, 0x02])
POWER_OFF = bytes([0x18, 0x01])


async def _powered_on(client: SicpDisplayClient, transport: FakeTransport) -> None:
    """Turn the display on and forget the packets it took."""
    await client.set_power(True)
    transport.sent.clear()


@pytest.fixture
def sleeps(monkeypatch: pytest.MonkeyPatch) -> List[float]:
    """Record the delays the client sleeps for, without actually waiting."""
    recorded: List[float] = []
    real_sleep = asyncio.sleep

    async def fake_sleep(delay: float, *args, **kwargs):
        recorded.append(delay)
        await real_sleep(0)

    monkeypatch.setattr(client_impl.asyncio, "sleep", fake_sleep)
    return recorded


@pytest.mark.asyncio
async def test_set_power_on_frames_expected_packet(client, transport) -> None:
    await client.set_power(True)

    checksum = 0x06 ^ 0x01 ^ 0x00 ^ 0x18 ^ 0x02
    assert [p.raw_data for p in transport.sent] == [bytes([0x06, 0x01, 0x00, 0x18, 0x02, checksum])]
    assert client.power == PowerState.ON


@pytest.mark.asyncio
async def test_set_power_rejected_leaves_state(transport) -> None:
    transport.default = NACK_REPLY
    client = SicpDisplayClient(transport, make_config())

    with pytest.raises(DeviceRejectedError):
        await client.set_power(True)

    assert client.power == PowerState.OFF


@pytest.mark.asyncio
async def test_set_power_with_empty_reply_commits(transport) -> None:
    transport.default = b""
    client = SicpDisplayClient(transport, make_config())

    await client.set_power(True)

    assert client.power == PowerState.ON


@pytest.mark.asyncio
async def test_get_power_unreachable_assumes_off(client, transport) -> None:
    await _powered_on(client, transport)
    transport.replies = [SicpConnectionError("refused")]

    assert await client.get_power() == PowerState.OFF
    assert client.power == PowerState.OFF
    assert transport.payloads == [bytes([0x19])]


@pytest.mark.asyncio
async def test_get_power_timeout_assumes_off(client, transport) -> None:
    transport.replies = [SicpTimeoutError("no reply")]

    assert await client.get_power() == PowerState.OFF


@pytest.mark.asyncio
async def test_get_power_reads_status_from_reply(client, transport) -> None:
    transport.replies = [bytes([0x06, 0x02])]
    assert await client.get_power() == PowerState.ON

    transport.replies = [bytes([0x06, 0x01, 0x00, 0x19, 0x01, 0x1F])]
    assert await client.get_active_state() is False

    transport.replies = [bytes([0x06, 0x01, 0x00, 0x19, 0x02, 0x1C])]
    assert await client.get_active_state() is True


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "reply",
    [ACK_REPLY, bytes([0x06, 0x01, 0x00, 0x00, 0x06, 0x01])],
    ids=["bare-ack", "ack-packet"],
)
async def test_get_power_ack_without_status_keeps_state(client, transport, reply) -> None:
    await _powered_on(client, transport)
    changes: List[StateChange] = []
    client.add_state_listener(changes.append)
    transport.replies = [reply]

    assert await client.get_power() == PowerState.ON

    assert client.power == PowerState.ON
    assert changes == []
    await client.ensure_on()
    assert transport.payloads == [bytes([0x19])]


@pytest.mark.asyncio
async def test_get_power_ignores_header_bytes_that_look_like_opcodes(transport) -> None:
    client = SicpDisplayClient(transport, make_config(target_id=0x19, group_id=0x01))
    transport.replies = [bytes([0x06, 0x19, 0x01, 0x19, 0x02, 0x05])]

    assert await client.get_power() == PowerState.ON
    assert transport.sent[0].target_id == 0x19


@pytest.mark.asyncio
async def test_get_power_ungrouped_data_reply_without_ack(transport) -> None:
    client = SicpDisplayClient(transport, make_config(group_enabled=False))
    transport.replies = [bytes([0x05, 0x01, 0x19, 0x02, 0x1F])]

    assert await client.get_power() == PowerState.ON
    assert transport.sent[0].raw_data[:3] == bytes([0x04, 0x01, 0x19])


@pytest.mark.asyncio
async def test_get_power_indeterminate_or_rejected_assumes_off(client, transport) -> None:
    await _powered_on(client, transport)
    transport.replies = [b""]
    assert await client.get_power() == PowerState.OFF

    await _powered_on(client, transport)
    transport.replies = [bytes([0x15, 0x02])]
    assert await client.get_power() == PowerState.OFF


@pytest.mark.asyncio
async def test_ensure_on_is_noop_when_on(client, transport, sleeps) -> None:
    await _powered_on(client, transport)

    await client.ensure_on()

    assert transport.sent == []
    assert sleeps == []


@pytest.mark.asyncio
async def test_ensure_on_powers_on_and_settles(transport, sleeps) -> None:
    client = SicpDisplayClient(transport, make_config(power_settle_secs=0.3))

    await client.ensure_on()

    assert transport.payloads == [POWER_ON]
    assert client.power == PowerState.ON
    assert sleeps == [0.3]


@pytest.mark.asyncio
async def test_set_input_unknown_issues_no_commands(client, transport) -> None:
    with pytest.raises(UnknownInputError):
        await client.set_input(99)

    assert transport.sent == []
    assert client.power == PowerState.OFF


@pytest.mark.asyncio
async def test_set_input_powers_on_first(client, transport) -> None:
    await client.set_input(2)

    assert transport.payloads == [POWER_ON, bytes([0xAC, 0x06])]
    assert client.get_active_input() == 2


@pytest.mark.asyncio
async def test_set_input_rejected_keeps_previous_input(transport) -> None:
    transport.replies = [ACK_REPLY, NAV_REPLY]
    client = SicpDisplayClient(
        transport,
        make_config(inputs=[InputDefinition(5, "PC", 0x05), InputDefinition(6, "DP", "0x07")]),
    )

    with pytest.raises(DeviceRejectedError):
        await client.set_input(6)

    assert client.get_active_input() == 5
    assert transport.payloads[-1] == bytes([0xAC, 0x07])


@pytest.mark.asyncio
async def test_absolute_volume_sends_one_command_with_filler(transport) -> None:
    client = SicpDisplayClient(transport, make_config(volume=VolumeConfig(initial=15, set_code=0x44)))
    await _powered_on(client, transport)

    await client.set_volume(30)

    assert transport.payloads == [bytes([0x44, 30, 0xFF])]
    assert client.get_volume() == 30


@pytest.mark.asyncio
@pytest.mark.parametrize("requested, committed", [(-5, 0), (150, 100), (42.6, 43)])
async def test_volume_is_clamped(transport, requested, committed) -> None:
    client = SicpDisplayClient(transport, make_config(volume=VolumeConfig(set_code=0x44)))
    await _powered_on(client, transport)

    await client.set_volume(requested)

    assert client.get_volume() == committed
    assert transport.payloads == [bytes([0x44, committed, 0xFF])]


@pytest.mark.asyncio
async def test_relative_brightness_steps_down(transport, sleeps) -> None:
    config = make_config(brightness=AxisConfig(initial=50, up_code=0x11, down_code=0x12, step_delay_secs=0.12))
    client = SicpDisplayClient(transport, config)
    await _powered_on(client, transport)

    await client.set_brightness(47)

    assert transport.payloads == [bytes([0x12])] * 3
    assert [d for d in sleeps if d > 0] == [0.12] * 3
    assert client.get_brightness() == 47


@pytest.mark.asyncio
async def test_relative_volume_steps_up(transport) -> None:
    config = make_config(volume=VolumeConfig(initial=10, up_code=0x20, down_code=0x21, step_delay_secs=0.0))
    client = SicpDisplayClient(transport, config)
    await _powered_on(client, transport)

    await client.set_volume(14)

    assert transport.payloads == [bytes([0x20])] * 4
    assert client.get_volume() == 14


@pytest.mark.asyncio
async def test_relative_volume_same_value_sends_nothing(transport) -> None:
    config = make_config(volume=VolumeConfig(initial=10, up_code=0x20, down_code=0x21, step_delay_secs=0.0))
    client = SicpDisplayClient(transport, config)
    await _powered_on(client, transport)

    await client.set_volume(10)

    assert transport.sent == []


@pytest.mark.asyncio
async def test_volume_failure_does_not_commit(transport) -> None:
    client = SicpDisplayClient(transport, make_config(volume=VolumeConfig(initial=15, set_code=0x44)))
    await _powered_on(client, transport)
    transport.replies = [SicpTimeoutError("no reply")]

    with pytest.raises(SicpTimeoutError):
        await client.set_volume(60)

    assert client.get_volume() == 15


@pytest.mark.asyncio
async def test_unconfigured_volume_sends_nothing(client, transport) -> None:
    await _powered_on(client, transport)

    await client.set_volume(33)

    assert transport.sent == []
    assert client.get_volume() == 33


@pytest.mark.asyncio
async def test_mute_toggle_only_sends_on_change(transport) -> None:
    client = SicpDisplayClient(transport, make_config(volume=VolumeConfig(mute_toggle_code=0x45)))
    await _powered_on(client, transport)

    await client.set_mute(False)
    assert transport.sent == []

    await client.set_mute(True)
    assert transport.payloads == [bytes([0x45])]
    assert client.get_mute() is True

    await client.set_mute(True)
    assert len(transport.sent) == 1


@pytest.mark.asyncio
async def test_mute_absolute_sends_explicit_value(transport) -> None:
    client = SicpDisplayClient(transport, make_config(volume=VolumeConfig(mute_set_code=0x47)))

    await client.set_mute(True)

    assert transport.payloads == [POWER_ON, bytes([0x47, 0x01])]
    assert client.get_mute() is True


@pytest.mark.asyncio
async def test_mute_unconfigured_is_noop(client, transport) -> None:
    await client.set_mute(True)

    assert transport.sent == []
    assert client.get_mute() is False


@pytest.mark.asyncio
async def test_brightness_ignored_while_off(client, transport) -> None:
    await client.set_brightness(80)

    assert transport.sent == []
    assert client.get_brightness() == 50
    assert client.power == PowerState.OFF


@pytest.mark.asyncio
async def test_unconfigured_brightness_uses_video_parameters(client, transport) -> None:
    await _powered_on(client, transport)

    await client.set_brightness(70)

    assert transport.payloads == [bytes([0x32, 70, 0xFF, 0xFF, 0xFF, 0xFF, 0xFF, 0xFF])]
    assert client.get_brightness() == 70


@pytest.mark.asyncio
async def test_brightness_rejected_does_not_commit(client, transport) -> None:
    await _powered_on(client, transport)
    transport.replies = [NAV_REPLY]

    with pytest.raises(DeviceRejectedError):
        await client.set_brightness(70)

    assert client.get_brightness() == 50


@pytest.mark.asyncio
async def test_backlight_helpers(transport) -> None:
    client = SicpDisplayClient(transport, make_config(brightness=AxisConfig(initial=0, set_code=0x10)))

    await client.set_backlight_on(True)
    assert transport.sent == []
    assert client.get_backlight_on() is False

    await _powered_on(client, transport)
    await client.set_backlight_on(True)
    assert transport.payloads == [bytes([0x10, 10])]
    assert client.get_backlight_on() is True

    await client.set_backlight_on(False)
    assert transport.payloads[-1] == bytes([0x10, 0])
    assert client.get_brightness() == 0


@pytest.mark.asyncio
async def test_state_listeners_receive_committed_changes(client, transport) -> None:
    changes: List[StateChange] = []
    client.add_state_listener(changes.append)

    await client.set_input(3)
    await client.set_power(False)

    assert changes == [
        StateChange("power", PowerState.ON),
        StateChange("active_input", 3),
        StateChange("power", PowerState.OFF),
        StateChange("inputs_cleared", None),
    ]


@pytest.mark.asyncio
async def test_raising_listener_does_not_break_operation(client, transport) -> None:
    def broken(change: StateChange) -> None:
        raise RuntimeError("boom")

    client.add_state_listener(broken)

    await client.set_power(True)

    assert client.power == PowerState.ON


@pytest.mark.asyncio
async def test_snapshot_and_close(client, transport) -> None:
    await client.set_input(4)

    assert client.snapshot() == {
        "name": "lobby",
        "power": "on",
        "active_input": 4,
        "volume": 15,
        "muted": False,
        "brightness": 50,
        "backlight_on": True,
    }

    await client.aclose()
    assert transport.closed
