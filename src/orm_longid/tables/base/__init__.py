from .configured_table import ConfiguredTable
from .orm_table import LongIdTableBase
from .longid_table import LongIdTableSettings, longid_table
from .typing import LongIdTableProtocol, LongIdStorageProtocol

__all__ = [
    "ConfiguredTable",
    "LongIdTableBase",
    "LongIdTableSettings",
    "longid_table",
    "LongIdTableProtocol",
    "LongIdStorageProtocol",
]
