"""
Storage abstraction for key rotation state.

Rotation state maps a key list identity (see ``core.key_list.list_identity``)
to the index of the key the next request should try first. The forwarder
only depends on ``RotationStore``, so alternative backends can be swapped in
without touching the rotation algorithm.
"""

import threading
from abc import ABC, abstractmethod
from collections import OrderedDict


class RotationStore(ABC):
    """Abstract storage backend for rotation state."""

    @abstractmethod
    def get(self, identity: str) -> int:
        """Return the stored start index for ``identity`` (0 if unknown)."""
        pass

    @abstractmethod
    def set(self, identity: str, index: int) -> None:
        """Store the start index for ``identity``."""
        pass


class InMemoryRotationStore(RotationStore):
    """Process-local rotation state.

    Entries are created lazily and are never removed by the rotation
    algorithm. When ``max_entries`` is given, the least recently written
    identity is evicted once the bound is exceeded; an evicted identity
    simply starts again from index 0.

    The lock only protects the mapping itself. Concurrent requests sharing
    an identity may still read a stale index, which only changes which key
    is tried first.
    """

    def __init__(self, max_entries: int | None = None) -> None:
        if max_entries is not None and max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self._max_entries = max_entries
        self._indices: OrderedDict[str, int] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, identity: str) -> int:
        with self._lock:
            return self._indices.get(identity, 0)

    def set(self, identity: str, index: int) -> None:
        if index < 0:
            raise ValueError(f"Rotation index must be non-negative, got {index}")
        with self._lock:
            self._indices[identity] = index
            self._indices.move_to_end(identity)
            if self._max_entries is not None:
                while len(self._indices) > self._max_entries:
                    self._indices.popitem(last=False)

    def __len__(self) -> int:
        with self._lock:
            return len(self._indices)

    def __contains__(self, identity: object) -> bool:
        with self._lock:
            return identity in self._indices

    def __repr__(self) -> str:
        return f"InMemoryRotationStore(entries={len(self)}, max_entries={self._max_entries})"
