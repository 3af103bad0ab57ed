"""
Identifier generation -- injected capability, never a global.

Bank entries and pools receive their ids from an ``IdGenerator``: any
zero-argument callable returning a string.  Production code uses
``uuid_generator``; tests pass a ``SequentialIdGenerator`` so ids are
predictable.
"""

from collections.abc import Callable
from uuid import uuid4

IdGenerator = Callable[[], str]


def uuid_generator() -> str:
    """Random UUID4 identifier in canonical string form."""
    return str(uuid4())


class SequentialIdGenerator:
    """
    Deterministic generator producing ``"<prefix>-1"``, ``"<prefix>-2"``, ...

    Used for tests and replay where identifiers must be stable.
    """

    def __init__(self, prefix: str = "id", start: int = 1):
        self._prefix = prefix
        self._next = start

    def __call__(self) -> str:
        value = f"{self._prefix}-{self._next}"
        self._next += 1
        return value
