from .allocator import LongIdAllocator
from .flusher import PeriodicFlusher

__all__ = [
    "LongIdAllocator",
    "PeriodicFlusher",
]
