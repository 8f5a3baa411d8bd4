from typing import Iterable, Optional
import logging
import sqlalchemy as sa
import sqlalchemy.orm as so

from ..errors import DuplicateTypeError, TypeMismatchError
from ..ids.long_id import LongId, decode
from ..metadata.keys import UniqueKeysProvider, group_keys, resolve_key_column
from ..tables.base.configured_table import ConfiguredTable
from .data_classes import TypeState

logger = logging.getLogger(__name__)


class BootstrapScanner:
    """
    Recovers last issued identifiers from the real data tables.

    For every configured table the maximum of its key column is read; an
    empty table yields the zero-sequence identifier for the table's type and
    shard. A maximum that decodes to another type means the table (or its
    key column) is misconfigured and stops the scan.
    """

    def __init__(
        self,
        keys_provider: Optional[UniqueKeysProvider] = None,
        *,
        shard: int = 0,
        reserved: int = 0,
        use_unique_if_primary_key_not_match: bool = False,
    ):
        LongId.first(1, shard, reserved)  # range-check shard / reserved up front
        self.keys_provider = keys_provider or UniqueKeysProvider()
        self.shard = shard
        self.reserved = reserved
        self.use_unique_if_primary_key_not_match = use_unique_if_primary_key_not_match

    def resolve_tables(
        self,
        session: so.Session,
        tables: Iterable[ConfiguredTable],
    ) -> list[ConfiguredTable]:
        tables = list(tables)
        seen: set[int] = set()
        for table in tables:
            if table.type_id in seen:
                raise DuplicateTypeError(table.type_id)
            seen.add(table.type_id)

        unresolved = [t for t in tables if not t.key_column_name]
        if not unresolved:
            return tables

        keys = group_keys(self.keys_provider.unique_keys(session.connection(), unresolved))
        resolved = []
        for table in tables:
            if not table.key_column_name:
                key = resolve_key_column(table, keys, self.use_unique_if_primary_key_not_match)
                logger.debug(f"Resolved key column {key} for {table.full_name}")
                table = table.with_key(key)
            resolved.append(table)
        return resolved

    def scan_table(self, session: so.Session, table: ConfiguredTable) -> TypeState:
        if not table.key_column_name:
            table = self.resolve_tables(session, [table])[0]

        key = sa.column(table.key_column_name)
        target = sa.table(table.table_name, key, schema=table.schema)
        found = session.execute(sa.select(sa.func.max(key)).select_from(target)).scalar()

        if found is None:
            shard = table.shard if table.shard is not None else self.shard
            first = LongId.first(table.type_id, shard, self.reserved)
            logger.warning(
                f"{table.full_name} is empty; starting type {table.type_id:#06x} at {first}"
            )
            return TypeState(table.type_id, first.value)

        long_id = decode(found)
        if long_id.type_id != table.type_id:
            raise TypeMismatchError(table.full_name, long_id.type_id, table.type_id)

        logger.debug(f"Recovered {long_id} from {table.full_name}.{table.key_column_name}")
        return TypeState(table.type_id, long_id.value)

    def scan(
        self,
        session: so.Session,
        tables: Iterable[ConfiguredTable],
    ) -> list[TypeState]:
        resolved = self.resolve_tables(session, tables)
        states = [self.scan_table(session, table) for table in resolved]
        logger.info(f"Bootstrap scan recovered {len(states)} type(s) from real tables")
        return states
