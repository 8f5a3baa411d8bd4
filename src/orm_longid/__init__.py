from .errors import (
    LongIdError,
    FieldRangeError,
    InvalidStateError,
    UnknownTypeError,
    DuplicateTypeError,
    TypeMismatchError,
    InconsistentRowError,
    SequenceExhaustedError,
    KeyResolutionError,
)
from .ids import LongId, encode, decode, to_signed, to_unsigned
from .tables import (
    ConfiguredTable,
    LongIdTableBase,
    LongIdTableSettings,
    LongIdStorageProtocol,
)
from .metadata import UniqueKey, UniqueKeysProvider, resolve_key_column
from .storage import (
    TypeState,
    ReconciliationPlan,
    plan_reconciliation,
    BootstrapScanner,
    DbLongIdStorage,
    DbLongIdStorageWithInstaller,
)
from .allocation import LongIdAllocator, PeriodicFlusher
from .installer import LongIdInstaller
from .registry import TypeRegistry
from .helpers.default import DefaultHelper

__all__ = [
    "LongIdError",
    "FieldRangeError",
    "InvalidStateError",
    "UnknownTypeError",
    "DuplicateTypeError",
    "TypeMismatchError",
    "InconsistentRowError",
    "SequenceExhaustedError",
    "KeyResolutionError",
    "LongId",
    "encode",
    "decode",
    "to_signed",
    "to_unsigned",
    "ConfiguredTable",
    "LongIdTableBase",
    "LongIdTableSettings",
    "LongIdStorageProtocol",
    "UniqueKey",
    "UniqueKeysProvider",
    "resolve_key_column",
    "TypeState",
    "ReconciliationPlan",
    "plan_reconciliation",
    "BootstrapScanner",
    "DbLongIdStorage",
    "DbLongIdStorageWithInstaller",
    "LongIdAllocator",
    "PeriodicFlusher",
    "LongIdInstaller",
    "TypeRegistry",
    "DefaultHelper",
]
