"""
Identifier Allocation Module

Account and card numbers come from an allocator injected into the bank
service. The default allocator is a prefixed counter that starts at a fixed
seed, scoped to the service that owns it rather than to the process.
"""

import threading
from typing import Protocol


class IdentifierAllocator(Protocol):
    """Anything that can hand out unique identifiers"""

    def next_id(self) -> str:
        ...


class SequentialIdAllocator:
    """
    Thread-safe prefixed counter

    SequentialIdAllocator("ACC", 1001) yields ACC1001, ACC1002, ...
    An identifier is never handed out twice by the same allocator.
    """

    def __init__(self, prefix: str, start: int):
        if start < 0:
            raise ValueError("Allocator start must not be negative")
        self.prefix = prefix
        self.start = start
        self._next = start
        self._lock = threading.Lock()

    def next_id(self) -> str:
        """Allocate the next identifier"""
        with self._lock:
            value = self._next
            self._next += 1
        return f"{self.prefix}{value}"

    @property
    def issued_count(self) -> int:
        """Number of identifiers handed out so far"""
        with self._lock:
            return self._next - self.start
