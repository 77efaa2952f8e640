# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

from __future__ import annotations

from ..internal_types import *
from .packet import Packet
from .constants import (
    Opcode,
    PowerStatus,
    FILLER,
    DEFAULT_FILL_COUNTS,
  )

class SicpCommand:
    """A SICP command payload, not yet addressed to a display.

    The payload is the opcode followed by its parameters; framing (size,
    target, group, checksum) is added by to_packet().
    """
    name: str
    payload: bytes

    def __init__(self, name: str, payload: ByteSequence):
        self.name = name
        self.payload = bytes(b & 0xFF for b in payload)

    @property
    def opcode(self) -> int:
        return self.payload[0]

    def to_packet(self, target_id: int, group_id: Optional[int]=None) -> Packet:
        """Frames the command for a target display."""
        return Packet.encode(target_id, group_id, self.payload)

    @classmethod
    def power_get(cls) -> Self:
        return cls("power.get", [Opcode.POWER_GET])

    @classmethod
    def power_set(cls, on: bool) -> Self:
        status = PowerStatus.ON if on else PowerStatus.OFF
        return cls("power.set", [Opcode.POWER_SET, status])

    @classmethod
    def input_set(cls, input_code: int) -> Self:
        return cls("input.set", [Opcode.INPUT_SET, input_code])

    @classmethod
    def absolute_set(
            cls,
            name: str,
            code: int,
            value: int,
            fill_count: Optional[int]=None,
          ) -> Self:
        """A command that sets a value directly.

        Some codes pack sibling parameters into the same command; those take
        trailing "no change" filler bytes after the value. If fill_count is None,
        the default for the code from DEFAULT_FILL_COUNTS is used.
        """
        code &= 0xFF
        if fill_count is None:
            fill_count = DEFAULT_FILL_COUNTS.get(code, 0)
        return cls(name, [code, value] + [FILLER] * fill_count)

    @classmethod
    def step(cls, name: str, code: int) -> Self:
        """A single-step (up or down) command with no parameters."""
        return cls(name, [code])

    @classmethod
    def mute_set(cls, code: int, muted: bool) -> Self:
        return cls("mute.set", [code, 0x01 if muted else 0x00])

    @classmethod
    def mute_toggle(cls, code: int) -> Self:
        return cls("mute.toggle", [code])

    def __str__(self) -> str:
        return f"SicpCommand({self.name}: [{self.payload.hex(' ')}])"

    def __repr__(self) -> str:
        return str(self)
