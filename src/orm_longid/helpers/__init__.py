from .batch import batch_context

__all__ = [
    "batch_context",
]
