"""
Key generators for Portable Text ``_key`` values.

Every block, span and link definition in a Sanity document carries a
``_key`` that must be unique within its array.  Keys are never derived
from content: converting the same HTML twice yields the same structure
with different keys.  The converter receives a generator object so tests
can substitute :class:`SequentialKeyGenerator` for predictable output.
"""

from __future__ import annotations

import itertools
from typing import Protocol
import uuid


class KeyGenerator(Protocol):
    """Anything with a ``next()`` returning a key unique for the document."""

    def next(self) -> str: ...


class RandomKeyGenerator:
    """Produce 12 hex character keys from a random UUID4."""

    def next(self) -> str:
        return uuid.uuid4().hex[:12]


class SequentialKeyGenerator:
    """Produce ``k1``, ``k2``, ... (or ``<prefix>1`` ...) in order."""

    def __init__(self, prefix: str = "k") -> None:
        self.prefix = prefix
        self._counter = itertools.count(1)

    def next(self) -> str:
        return f"{self.prefix}{next(self._counter)}"
