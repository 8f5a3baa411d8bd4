from .data_classes import TypeState
from .reconciliation import ReconciliationPlan, ensure_unique_types, plan_reconciliation
from .bootstrap import BootstrapScanner
from .db_storage import DbLongIdStorage, DbLongIdStorageWithInstaller

__all__ = [
    "TypeState",
    "ReconciliationPlan",
    "ensure_unique_types",
    "plan_reconciliation",
    "BootstrapScanner",
    "DbLongIdStorage",
    "DbLongIdStorageWithInstaller",
]
