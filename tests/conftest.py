"""Shared fixtures for the sicp_display tests."""

from __future__ import annotations

from typing import Any, List, Optional, Sequence, Union

import pytest

from sicp_display.client import (
    AxisConfig,
    SicpClientTransport,
    SicpDisplayClient,
    SicpDisplayConfig,
    VolumeConfig,
)
from sicp_display.protocol import Packet

ACK_REPLY = bytes([0x06])
NACK_REPLY = bytes([0x15])
NAV_REPLY = bytes([0x18])

Reply = Union[bytes, BaseException]


class FakeTransport(SicpClientTransport):
    """Records transmitted packets and returns scripted replies.

    Scripted replies are consumed in order; once exhausted, ``default`` is
    returned. An exception instance in the script is raised instead.
    """

    def __init__(self, replies: Optional[Sequence[Reply]] = None, default: Reply = ACK_REPLY) -> None:
        self.sent: List[Packet] = []
        self.replies: List[Reply] = list(replies or [])
        self.default = default
        self.closed = False

    async def transmit(self, command_packet: Packet) -> bytes:
        self.sent.append(command_packet)
        reply = self.replies.pop(0) if self.replies else self.default
        if isinstance(reply, BaseException):
            raise reply
        return reply

    async def shutdown(self) -> None:
        self.closed = True

    async def wait(self) -> None:
        pass

    @property
    def payloads(self) -> List[bytes]:
        return [packet.payload for packet in self.sent]


def make_config(**kwargs: Any) -> SicpDisplayConfig:
    """Return a test display config with no settle delay and polling disabled."""
    kwargs.setdefault("volume", VolumeConfig(step_delay_secs=0.0))
    kwargs.setdefault("brightness", AxisConfig(step_delay_secs=0.0))
    kwargs.setdefault("host", "display.test")
    kwargs.setdefault("name", "lobby")
    kwargs.setdefault("power_settle_secs", 0.0)
    kwargs.setdefault("poll_interval_secs", 0)
    return SicpDisplayConfig(**kwargs)


@pytest.fixture
def transport() -> FakeTransport:
    """Return a fake transport that acknowledges everything."""
    return FakeTransport()


@pytest.fixture
def client(transport: FakeTransport) -> SicpDisplayClient:
    """Return a client for a default test display."""
    return SicpDisplayClient(transport, make_config())
