# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
SICP display emulator.

Provides a simple emulation of a SICP display on TCP/IP.
"""

from .session import SicpDisplayEmulatorSession
from .emulator_impl import SicpDisplayEmulator
