# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
SICP display client abstract transport connector interface.

Provides a low-level abstract interface for objects that can create
client transports to a SICP display. This abstraction allows for the
implementation of proxies, fakes, and alternate network transports.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..internal_types import *
from .client_transport import SicpClientTransport
from .client_config import SicpDisplayConfig

class SicpDisplayConnector(ABC):
    """Abstract base class for SICP display client transport connectors."""

    config: SicpDisplayConfig

    @abstractmethod
    async def connect(self) -> SicpClientTransport:
        """Create a client transport for the display associated with this
           connector.

        Must be implemented by subclasses.
        """
        raise NotImplementedError()
