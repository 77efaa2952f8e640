"""Tests for background power polling."""

from __future__ import annotations

import asyncio

import pytest

from conftest import FakeTransport, make_config
from sicp_display.client import PowerPoller, PowerState, SicpDisplayClient


class FlakyClient:
    """Stands in for a client whose power query raises every other call."""

    def __init__(self) -> None:
        self.config = make_config()
        self.calls = 0

    async def get_power(self) -> PowerState:
        self.calls += 1
        if self.calls % 2 == 1:
            raise RuntimeError("flaky")
        return PowerState.ON


@pytest.mark.asyncio
async def test_tick_swallows_errors() -> None:
    client = FlakyClient()
    poller = PowerPoller(client, 10.0)  # type: ignore[arg-type]

    await poller.tick()
    await poller.tick()

    assert client.calls == 2
    assert poller.tick_count == 2


@pytest.mark.asyncio
async def test_polling_continues_after_failures() -> None:
    client = FlakyClient()
    poller = PowerPoller(client, 0.01)  # type: ignore[arg-type]

    poller.start()
    assert poller.running
    for _ in range(100):
        if client.calls >= 3:
            break
        await asyncio.sleep(0.01)
    await poller.stop()

    assert client.calls >= 3
    assert not poller.running


@pytest.mark.asyncio
async def test_zero_interval_disables_polling() -> None:
    transport = FakeTransport()
    client = SicpDisplayClient(transport, make_config())

    client.start_polling()

    assert not client.poller.enabled
    assert not client.poller.running
    await asyncio.sleep(0.01)
    assert transport.sent == []
    await client.aclose()


@pytest.mark.asyncio
async def test_poll_updates_client_state() -> None:
    transport = FakeTransport(default=bytes([0x06, 0x01, 0x00, 0x19, 0x02, 0x1C]))
    client = SicpDisplayClient(transport, make_config())

    await client.poller.tick()

    assert client.power == PowerState.ON
    assert transport.payloads == [bytes([0x19])]
