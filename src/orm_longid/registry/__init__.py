from .registry import ModelDescriptor, TypeRegistry

__all__ = [
    "ModelDescriptor",
    "TypeRegistry",
]
