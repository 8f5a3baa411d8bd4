from .keys import (
    UniqueKey,
    UniqueKeysProvider,
    group_keys,
    resolve_key_column,
    LONG_DB_DATA_TYPE,
)

__all__ = [
    "UniqueKey",
    "UniqueKeysProvider",
    "group_keys",
    "resolve_key_column",
    "LONG_DB_DATA_TYPE",
]
