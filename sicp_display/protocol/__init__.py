# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Low-level protocol definitions for Philips SICP displays.

Only the packet framing and the handful of opcodes needed for power, input,
volume, mute and brightness control are implemented.
"""

from .constants import (
    ACK,
    NACK,
    NAV,
    FILLER,
    BROADCAST_TARGET_ID,
    MIN_PACKET_LENGTH,
    MAX_PACKET_LENGTH,
    DEFAULT_FILL_COUNTS,
    DEFAULT_BRIGHTNESS_CODE,
    Opcode,
    PowerStatus,
  )

from .packet import (
    Packet,
    encode_packet,
    split_packets,
    xor_checksum,
  )

from .reply import (
    SicpReply,
    classify_reply,
  )

from .command import (
    SicpCommand,
  )
