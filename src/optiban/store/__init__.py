"""Document stores a board session can persist to."""

from optiban.store.git import GitStore
from optiban.store.memory import MemoryStore
from optiban.store.protocol import BoardStore

__all__ = ["BoardStore", "GitStore", "MemoryStore"]
