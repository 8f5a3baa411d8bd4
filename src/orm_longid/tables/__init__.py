from .base import (
    ConfiguredTable,
    LongIdTableBase,
    LongIdTableSettings,
    longid_table,
    LongIdTableProtocol,
    LongIdStorageProtocol,
)

__all__ = [
    "ConfiguredTable",
    "LongIdTableBase",
    "LongIdTableSettings",
    "longid_table",
    "LongIdTableProtocol",
    "LongIdStorageProtocol",
]
