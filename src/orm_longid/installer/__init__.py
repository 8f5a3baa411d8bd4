from .installer import LongIdInstaller

__all__ = [
    "LongIdInstaller",
]
