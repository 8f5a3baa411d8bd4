from typing import Iterable, Optional
import logging
import sqlalchemy as sa
import sqlalchemy.orm as so

from ..errors import InconsistentRowError
from ..helpers.batch import batch_context
from ..ids.long_id import decode, to_signed, to_unsigned
from ..metadata.keys import UniqueKeysProvider
from ..tables.base.configured_table import ConfiguredTable
from ..tables.base.longid_table import (
    LongIdTableSettings,
    longid_table,
    TYPE_COLUMN_NAME,
    ID_COLUMN_NAME,
    TABLE_NAME_COLUMN_NAME,
    KEY_COLUMN_NAME,
    SHARD_COLUMN_NAME,
)
from .bootstrap import BootstrapScanner
from .data_classes import TypeState
from .reconciliation import ReconciliationPlan, ensure_unique_types, plan_reconciliation

logger = logging.getLogger(__name__)


class DbLongIdStorage:
    """
    Keeps the last identifier per type in a table (``_longIds`` by default).

    Every call opens its own session on ``engine`` and commits or rolls back
    before returning. Only one process should save into a given table: rows
    are overwritten with the caller's values without comparing against what
    another writer may have stored in between.
    """

    def __init__(
        self,
        engine: sa.Engine,
        *,
        settings: Optional[LongIdTableSettings] = None,
        tables: Optional[Iterable[ConfiguredTable]] = None,
        shard: int = 0,
        reserved: int = 0,
        keys_provider: Optional[UniqueKeysProvider] = None,
        use_unique_if_primary_key_not_match: bool = False,
    ):
        if engine is None:
            raise ValueError("engine is required")
        self._engine = engine
        self.settings = settings or LongIdTableSettings()
        self.metadata = sa.MetaData()
        self.table = longid_table(self.metadata, self.settings)
        self.tables = list(tables) if tables else []
        self.scanner = BootstrapScanner(
            keys_provider,
            shard=shard,
            reserved=reserved,
            use_unique_if_primary_key_not_match=use_unique_if_primary_key_not_match,
        )
        self._table_info: dict[int, ConfiguredTable] = {t.type_id: t for t in self.tables}

    @property
    def table_name(self) -> str:
        return self.settings.full_name

    def create_table(self, bind: sa.Engine | sa.Connection) -> None:
        self.table.create(bind, checkfirst=True)

    def load(self, bootstrap_from_real_tables: bool = False) -> list[TypeState]:
        with so.Session(self._engine) as session:
            self.on_before_load(session)
            if bootstrap_from_real_tables:
                return self._select_from_tables_and_save(session)

            states = list(self._select_from_configuration(session).values())
            logger.info(f"Loaded {len(states)} type(s) from {self.table_name}")
            return states

    def save(
        self,
        states: Iterable[TypeState],
        remove_unmatched: bool = True,
    ) -> ReconciliationPlan:
        if states is None:
            raise ValueError("states must not be None")
        states = ensure_unique_types(states)

        with so.Session(self._engine) as session, batch_context(session):
            self.on_before_save(session)
            persisted = self._select_from_configuration(session)
            plan = plan_reconciliation(states, persisted, remove_unmatched=remove_unmatched)
            self._apply(session, plan)

        logger.debug(f"Saved {len(states)} type(s) to {self.table_name}: {plan.summary()}")
        return plan

    def save_last_value(self, state: TypeState) -> ReconciliationPlan:
        return self.save([state], remove_unmatched=False)

    def on_before_load(self, session: so.Session) -> None:
        """Hook run with an open session before values are read."""

    def on_before_save(self, session: so.Session) -> None:
        """Hook run with an open session before values are written."""

    def _select_from_configuration(self, session: so.Session) -> dict[int, TypeState]:
        out: dict[int, TypeState] = {}
        for row in session.execute(sa.select(self.table)).mappings():
            value = to_unsigned(row[ID_COLUMN_NAME])
            stored_type = to_unsigned(row[TYPE_COLUMN_NAME], 16)
            found_type = decode(value).type_id
            if found_type != stored_type:
                raise InconsistentRowError(self.table_name, value, found_type, stored_type)
            out[stored_type] = TypeState(stored_type, value)
        return out

    def _configured_from_rows(self, session: so.Session) -> list[ConfiguredTable]:
        t = self.table
        stmt = (
            sa.select(t)
            .where(t.c[TABLE_NAME_COLUMN_NAME].is_not(None))
            .order_by(t.c[TYPE_COLUMN_NAME])
        )
        tables = []
        for row in session.execute(stmt).mappings():
            type_id = to_unsigned(row[TYPE_COLUMN_NAME], 16)
            if type_id == 0:
                logger.warning(f"Skipping reserved type 0 row for {row[TABLE_NAME_COLUMN_NAME]}")
                continue
            schema, _, name = row[TABLE_NAME_COLUMN_NAME].rpartition(".")
            tables.append(ConfiguredTable(
                type_id=type_id,
                table_name=name,
                schema=schema or None,
                key_column_name=row[KEY_COLUMN_NAME],
                shard=row[SHARD_COLUMN_NAME],
            ))
        return tables

    def _select_from_tables_and_save(self, session: so.Session) -> list[TypeState]:
        with batch_context(session):
            persisted = self._select_from_configuration(session)
            tables = self.tables or self._configured_from_rows(session)
            if not tables:
                logger.warning(f"No configured tables to bootstrap {self.table_name} from")

            resolved = self.scanner.resolve_tables(session, tables)
            self._table_info.update({t.type_id: t for t in resolved})

            states = self.scanner.scan(session, resolved)
            plan = plan_reconciliation(states, persisted, remove_unmatched=False)
            # unchanged rows are rewritten too so their table mapping gets recorded
            self._apply(session, ReconciliationPlan(
                inserts=plan.inserts,
                updates=plan.updates + plan.unchanged,
            ))

        logger.info(f"Bootstrapped {len(states)} type(s) into {self.table_name}: {plan.summary()}")
        return states

    def _row_values(self, state: TypeState) -> dict:
        info = self._table_info.get(state.type_id)
        return {
            TYPE_COLUMN_NAME: to_signed(state.type_id, 16),
            ID_COLUMN_NAME: to_signed(state.last_value),
            TABLE_NAME_COLUMN_NAME: info.full_name if info else None,
            KEY_COLUMN_NAME: info.key_column_name if info else None,
            SHARD_COLUMN_NAME: state.long_id.shard,
        }

    def _apply(self, session: so.Session, plan: ReconciliationPlan) -> None:
        t = self.table

        if plan.inserts:
            session.execute(
                sa.insert(t),
                [self._row_values(s) for s in plan.inserts],
            )

        if plan.updates:
            # table mapping is only overwritten when this storage knows it
            session.execute(
                sa.update(t)
                .where(t.c[TYPE_COLUMN_NAME] == sa.bindparam("b_type_id"))
                .values({
                    ID_COLUMN_NAME: sa.bindparam("b_id"),
                    SHARD_COLUMN_NAME: sa.bindparam("b_shard"),
                    TABLE_NAME_COLUMN_NAME: sa.func.coalesce(
                        sa.bindparam("b_table_name", type_=t.c[TABLE_NAME_COLUMN_NAME].type),
                        t.c[TABLE_NAME_COLUMN_NAME],
                    ),
                    KEY_COLUMN_NAME: sa.func.coalesce(
                        sa.bindparam("b_key_name", type_=t.c[KEY_COLUMN_NAME].type),
                        t.c[KEY_COLUMN_NAME],
                    ),
                }),
                [
                    {
                        "b_type_id": row[TYPE_COLUMN_NAME],
                        "b_id": row[ID_COLUMN_NAME],
                        "b_shard": row[SHARD_COLUMN_NAME],
                        "b_table_name": row[TABLE_NAME_COLUMN_NAME],
                        "b_key_name": row[KEY_COLUMN_NAME],
                    }
                    for row in map(self._row_values, plan.updates)
                ],
            )

        if plan.deletes:
            session.execute(
                sa.delete(t).where(
                    t.c[TYPE_COLUMN_NAME].in_([to_signed(s.type_id, 16) for s in plan.deletes])
                )
            )


class DbLongIdStorageWithInstaller(DbLongIdStorage):
    """
    Creates the backing table on first load when it does not exist yet.
    """

    def on_before_load(self, session: so.Session) -> None:
        super().on_before_load(session)
        bind = session.get_bind()
        if not sa.inspect(bind).has_table(self.settings.table_name, schema=self.settings.schema):
            logger.warning(f"Table {self.table_name} does not exist; creating")
            self.create_table(session.connection())
            # DDL has to be committed before the load transaction reads from it
            session.commit()
