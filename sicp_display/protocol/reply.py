# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

from __future__ import annotations

from ..internal_types import *
from .constants import ACK, NACK, NAV, Opcode, PowerStatus
from .packet import split_packets

class SicpReply:
    """The raw bytes returned by the display for one command, with their
    classification.

    SICP replies are not correlated to commands and their exact shape varies by
    model and firmware, so classification is deliberately narrow and driven only
    by sentinel bytes:

        sentinels present               classification
        ------------------------------  ---------------
        NACK (0x15)                     rejected
        NAV (0x18)                      rejected
        ACK (0x06) and neither of the   acknowledged
          above
        none of the above, or no bytes  indeterminate

    An indeterminate reply is not an acknowledgement; each caller decides
    what it means for its own command.
    """
    raw_data: bytes
    ack_seen: bool
    nack_seen: bool
    not_available_seen: bool

    def __init__(self, raw_data: ByteSequence):
        self.raw_data = bytes(raw_data)
        self.ack_seen = ACK in self.raw_data
        self.nack_seen = NACK in self.raw_data
        self.not_available_seen = NAV in self.raw_data

    @property
    def is_ack(self) -> bool:
        """True iff the reply is positively acknowledged."""
        return self.ack_seen and not self.nack_seen and not self.not_available_seen

    @property
    def is_rejected(self) -> bool:
        """True iff the display refused the command (NACK or not available)."""
        return self.nack_seen or self.not_available_seen

    @property
    def is_indeterminate(self) -> bool:
        """True iff no sentinel was seen (including an empty reply)."""
        return not (self.ack_seen or self.nack_seen or self.not_available_seen)

    @property
    def classification(self) -> str:
        if self.is_rejected:
            return "rejected"
        if self.is_ack:
            return "ack"
        return "indeterminate"

    def power_status(self, has_group: bool=True) -> Optional[PowerStatus]:
        """Extracts the power status from a power-get reply.

        If the reply parses completely into valid packets, the status is taken
        only from a packet whose payload is the power-get opcode followed by the
        status byte; header and checksum bytes are never read as status. A
        reply that does not parse as packets is read as a bare ACK followed by
        the status byte, unless it carries NACK or "not available".

        Returns None if no status is present.
        """
        packets, rest = split_packets(self.raw_data, has_group=has_group)
        if len(packets) > 0 and len(rest) == 0 and all(p.is_valid for p in packets):
            for packet in packets:
                payload = packet.payload
                if len(payload) >= 2 and payload[0] == Opcode.POWER_GET:
                    return _to_power_status(payload[1])
            return None
        if self.is_rejected:
            return None
        i = self.raw_data.rfind(bytes([ACK]))
        if i >= 0 and i + 1 < len(self.raw_data):
            return _to_power_status(self.raw_data[i+1])
        return None

    def hex(self) -> str:
        return self.raw_data.hex(' ')

    def __str__(self) -> str:
        return f"SicpReply({self.classification}: [{self.hex()}])"

    def __repr__(self) -> str:
        return str(self)

def _to_power_status(value: int) -> Optional[PowerStatus]:
    try:
        return PowerStatus(value)
    except ValueError:
        return None

def classify_reply(raw_data: ByteSequence) -> SicpReply:
    """Classifies raw reply bytes. See SicpReply."""
    return SicpReply(raw_data)
