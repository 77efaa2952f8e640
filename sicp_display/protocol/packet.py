# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
SICP packet framing.
"""

from __future__ import annotations

from functools import reduce

from ..internal_types import *
from ..exceptions import SicpDisplayError
from .constants import MIN_PACKET_LENGTH, MAX_PACKET_LENGTH

def xor_checksum(data: ByteSequence) -> int:
    """Returns the XOR of all bytes in data."""
    return reduce(lambda a, b: a ^ b, bytes(data), 0)

class Packet:
    """A raw SICP packet, either outbound (command) or inbound (reply)."""

    raw_data: bytes
    has_group: bool

    def __init__(self, raw_data: ByteSequence, has_group: bool=True):
        self.raw_data = bytes(raw_data)
        self.has_group = has_group

    @classmethod
    def encode(
            cls,
            target_id: int,
            group_id: Optional[int],
            payload: ByteSequence,
          ) -> Self:
        """Frames a payload for a target display.

        If group_id is None, the group byte is omitted (group addressing disabled).
        """
        body = [target_id & 0xFF]
        if group_id is not None:
            body.append(group_id & 0xFF)
        body.extend(b & 0xFF for b in payload)
        size = 1 + len(body) + 1
        if size > MAX_PACKET_LENGTH:
            raise SicpDisplayError(f"Packet too long ({size} bytes)")
        data = bytes([size] + body)
        return cls(data + bytes([xor_checksum(data)]), has_group=group_id is not None)

    @property
    def size(self) -> int:
        """The declared size byte, or 0 if the packet is empty."""
        return self.raw_data[0] if len(self.raw_data) > 0 else 0

    @property
    def target_id(self) -> int:
        return self.raw_data[1]

    @property
    def group_id(self) -> Optional[int]:
        return self.raw_data[2] if self.has_group else None

    @property
    def header_length(self) -> int:
        return 3 if self.has_group else 2

    @property
    def payload(self) -> bytes:
        """The bytes between the address header and the checksum."""
        return self.raw_data[self.header_length:-1]

    @property
    def checksum(self) -> int:
        return self.raw_data[-1]

    @property
    def checksum_valid(self) -> bool:
        """True iff the XOR of the whole packet, checksum included, is 0."""
        return len(self.raw_data) > 0 and xor_checksum(self.raw_data) == 0

    @property
    def is_valid(self) -> bool:
        return (
            len(self.raw_data) >= MIN_PACKET_LENGTH and
            len(self.raw_data) >= self.header_length + 1 and
            self.size == len(self.raw_data) and
            self.checksum_valid
          )

    def validate(self) -> None:
        """Raises SicpDisplayError if the packet is malformed."""
        if len(self.raw_data) < max(MIN_PACKET_LENGTH, self.header_length + 1):
            raise SicpDisplayError(f"Packet too short: {self}")
        if self.size != len(self.raw_data):
            raise SicpDisplayError(f"Packet size byte {self.size} does not match length {len(self.raw_data)}: {self}")
        if not self.checksum_valid:
            raise SicpDisplayError(f"Packet checksum mismatch: {self}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Packet):
            return NotImplemented
        return self.raw_data == other.raw_data

    def __hash__(self) -> int:
        return hash(self.raw_data)

    def __len__(self) -> int:
        return len(self.raw_data)

    def __bytes__(self) -> bytes:
        return self.raw_data

    def __str__(self) -> str:
        return f"Packet([{self.raw_data.hex(' ')}])"

    def __repr__(self) -> str:
        return str(self)

def encode_packet(target_id: int, group_id: Optional[int], payload: ByteSequence) -> Packet:
    """Frames a payload for a target display. See Packet.encode()."""
    return Packet.encode(target_id, group_id, payload)

def split_packets(data: bytes, has_group: bool=True) -> Tuple[List[Packet], bytes]:
    """Splits a byte stream into size-delimited packets.

    Returns the complete packets and any trailing partial data. Packets are not
    validated.
    """
    packets: List[Packet] = []
    offset = 0
    while offset < len(data):
        size = data[offset]
        if size == 0:
            # a zero size byte can never start a packet; resync on the next byte
            offset += 1
            continue
        if offset + size > len(data):
            break
        packets.append(Packet(data[offset:offset + size], has_group=has_group))
        offset += size
    return packets, data[offset:]
