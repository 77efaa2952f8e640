#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Exceptions defined by this package"""

from __future__ import annotations

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .protocol import SicpReply

class SicpDisplayError(Exception):
  """Base class for all error exceptions defined by this package."""
  pass

class SicpTimeoutError(SicpDisplayError, TimeoutError):
  """No reply bytes were received from the display before the deadline.

  The outcome of the command is indeterminate; the display may or may not
  have applied it."""
  pass

class SicpConnectionError(SicpDisplayError, ConnectionError):
  """The display could not be reached (refused, reset, unreachable), or the
  transport is closed."""
  pass

class DeviceRejectedError(SicpDisplayError):
  """The display understood the command but answered NACK or "not available"."""
  reply: Optional[SicpReply]

  def __init__(self, message: str, reply: Optional[SicpReply]=None):
      super().__init__(message)
      self.reply = reply

class UnknownInputError(SicpDisplayError, KeyError):
  """An input identifier is not configured for the display."""

  def __str__(self) -> str:
      # KeyError quotes its argument; keep the plain message
      return str(self.args[0]) if len(self.args) > 0 else ''

class UnconfiguredAxisError(SicpDisplayError):
  """A control axis is only partially configured (e.g., an up code without a down code)."""
  pass
