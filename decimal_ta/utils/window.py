"""Immutable fixed-capacity window used by streaming state."""

from dataclasses import dataclass
from typing import Any, Tuple


@dataclass(frozen=True)
class RollingWindow:
    """
    FIFO window of at most `capacity` items.

    push() returns a new window and never touches the receiver, so a state
    holding a window stays valid after any later update.
    """
    capacity: int
    items: Tuple[Any, ...] = ()

    def __post_init__(self):
        if self.capacity < 1:
            raise ValueError("capacity must be >= 1")
        if len(self.items) > self.capacity:
            object.__setattr__(self, 'items', tuple(self.items[-self.capacity:]))

    def push(self, item) -> "RollingWindow":
        items = self.items + (item,)
        if len(items) > self.capacity:
            items = items[1:]
        return RollingWindow(self.capacity, items)

    @property
    def full(self) -> bool:
        return len(self.items) == self.capacity

    @property
    def first(self):
        return self.items[0] if self.items else None

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def tail(self, size: int) -> Tuple[Any, ...]:
        """Most recent `size` items, oldest first."""
        return self.items[-size:] if size else ()

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)
