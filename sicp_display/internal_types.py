# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Type hints shared by all modules in this package. Intended for
   'from ..internal_types import *'"""

from __future__ import annotations

from typing import (
    TYPE_CHECKING,
    Any,
    AsyncContextManager,
    AsyncIterator,
    Awaitable,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Type,
    Union,
  )

from types import TracebackType

from typing_extensions import Self

Jsonable = Union[Dict[str, 'Jsonable'], List['Jsonable'], str, int, float, bool, None]
"""A type hint for a value that can be serialized to JSON."""

JsonableDict = Dict[str, Jsonable]
"""A type hint for a JSON object."""

ByteSequence = Union[bytes, bytearray, Sequence[int]]
"""Anything that can be converted to bytes with bytes(x)."""
