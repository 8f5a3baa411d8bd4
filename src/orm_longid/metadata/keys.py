from collections import defaultdict
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional
import logging
import sqlalchemy as sa
from sqlalchemy.engine import Dialect
from sqlalchemy.exc import CompileError

from ..errors import KeyResolutionError
from ..tables.base.configured_table import ConfiguredTable

logger = logging.getLogger(__name__)

LONG_DB_DATA_TYPE = "BIGINT"


@dataclass(frozen=True)
class UniqueKey:
    """
    A primary key or unique constraint on a real table.

    ``column_name`` is the first constrained column; only single-column keys
    are eligible to hold identifiers.
    """
    schema: Optional[str]
    table_name: str
    column_name: str
    is_primary_key: bool
    column_count: int
    data_type: str

    @property
    def full_name(self) -> str:
        if self.schema:
            return f"{self.schema}.{self.table_name}"
        return self.table_name


def _data_type_name(col_type: sa.types.TypeEngine, dialect: Dialect) -> str:
    if isinstance(col_type, sa.BigInteger):
        return LONG_DB_DATA_TYPE
    try:
        name = col_type.compile(dialect=dialect).upper()
    except CompileError:
        name = type(col_type).__name__.upper()
    # sqlite stores every INT-affinity column as a 64-bit integer
    if dialect.name == "sqlite" and "INT" in name:
        return LONG_DB_DATA_TYPE
    return name


class UniqueKeysProvider:
    """
    Reads primary / unique key constraints through the SQLAlchemy inspector.
    """

    def unique_keys(
        self,
        bind: sa.Engine | sa.Connection,
        tables: Iterable[ConfiguredTable],
    ) -> list[UniqueKey]:
        inspector = sa.inspect(bind)
        dialect = bind.dialect
        keys: list[UniqueKey] = []

        for table in tables:
            if not inspector.has_table(table.table_name, schema=table.schema):
                logger.warning(f"Table {table.full_name} does not exist; no keys to resolve")
                continue

            col_types = {
                c["name"]: c["type"]
                for c in inspector.get_columns(table.table_name, schema=table.schema)
            }

            pk = inspector.get_pk_constraint(table.table_name, schema=table.schema)
            pk_cols = pk.get("constrained_columns") or []
            if pk_cols:
                keys.append(self._key(table, pk_cols, col_types, dialect, is_primary_key=True))

            for uc in inspector.get_unique_constraints(table.table_name, schema=table.schema):
                uc_cols = uc.get("column_names") or []
                if uc_cols:
                    keys.append(self._key(table, uc_cols, col_types, dialect, is_primary_key=False))

        return keys

    @staticmethod
    def _key(table, columns, col_types, dialect, *, is_primary_key: bool) -> UniqueKey:
        column = columns[0]
        return UniqueKey(
            schema=table.schema,
            table_name=table.table_name,
            column_name=column,
            is_primary_key=is_primary_key,
            column_count=len(columns),
            data_type=_data_type_name(col_types[column], dialect),
        )


def group_keys(keys: Iterable[UniqueKey]) -> dict[str, list[UniqueKey]]:
    grouped: dict[str, list[UniqueKey]] = defaultdict(list)
    for key in keys:
        grouped[key.full_name.lower()].append(key)
    return dict(grouped)


def resolve_key_column(
    table: ConfiguredTable,
    keys: Mapping[str, list[UniqueKey]],
    use_unique_if_primary_key_not_match: bool = False,
) -> str:
    """
    Pick the column of ``table`` holding its identifiers.

    Only single-column BIGINT keys qualify; primary keys are preferred over
    unique keys, which are considered only when allowed. An explicit
    ``key_column_name`` must itself be one of the qualifying keys.
    """
    candidates = keys.get(table.full_name.lower())
    if not candidates:
        raise KeyResolutionError(f"No key constraint found for {table.full_name}.")

    eligible = sorted(
        (
            k for k in candidates
            if k.column_count == 1
            and (k.is_primary_key or use_unique_if_primary_key_not_match)
            and k.data_type.upper() == LONG_DB_DATA_TYPE
        ),
        key=lambda k: not k.is_primary_key,
    )

    if not eligible:
        raise KeyResolutionError(
            f"No key constraint with single {LONG_DB_DATA_TYPE} column found for {table.full_name}."
        )

    if table.key_column_name:
        for k in eligible:
            if k.column_name.lower() == table.key_column_name.lower():
                return k.column_name
        raise KeyResolutionError(
            f"No key constraint with single {LONG_DB_DATA_TYPE} column found for "
            f"{table.full_name}.{table.key_column_name}."
        )

    if len(eligible) == 1 or eligible[0].is_primary_key:
        return eligible[0].column_name

    raise KeyResolutionError(
        f"Multiple key constraints with single {LONG_DB_DATA_TYPE} column found for "
        f"{table.full_name}. Use ConfiguredTable.key_column_name to specify desired column."
    )
