from typing import Iterable, Optional
import logging
import sqlalchemy as sa

from ..metadata.keys import UniqueKeysProvider
from ..storage.data_classes import TypeState
from ..storage.db_storage import DbLongIdStorage
from ..tables.base.configured_table import ConfiguredTable
from ..tables.base.longid_table import LongIdTableSettings

logger = logging.getLogger(__name__)


class LongIdInstaller:
    """
    Creates the last-identifier table and seeds one row per configured table.

    Each row starts from the current maximum of the table's key column, or
    from the zero-sequence identifier when the table is empty. Key columns
    not given on the ConfiguredTable are resolved from primary keys (and
    unique keys, when ``use_unique_if_primary_key_not_match`` is set).
    """

    def __init__(
        self,
        engine: sa.Engine,
        keys_provider: Optional[UniqueKeysProvider] = None,
        *,
        settings: Optional[LongIdTableSettings] = None,
    ):
        if engine is None:
            raise ValueError("engine is required")
        self._engine = engine
        self.keys_provider = keys_provider or UniqueKeysProvider()
        self.settings = settings or LongIdTableSettings()

    @property
    def table_name(self) -> str:
        return self.settings.full_name

    def storage(
        self,
        *,
        tables: Optional[Iterable[ConfiguredTable]] = None,
        shard: int = 0,
        reserved: int = 0,
        use_unique_if_primary_key_not_match: bool = False,
    ) -> DbLongIdStorage:
        return DbLongIdStorage(
            self._engine,
            settings=self.settings,
            tables=tables,
            shard=shard,
            reserved=reserved,
            keys_provider=self.keys_provider,
            use_unique_if_primary_key_not_match=use_unique_if_primary_key_not_match,
        )

    def install(
        self,
        shard: int = 0,
        reserved: int = 0,
        use_unique_if_primary_key_not_match: bool = False,
        tables: Optional[Iterable[ConfiguredTable]] = None,
    ) -> list[TypeState]:
        tables = list(tables) if tables else []
        storage = self.storage(
            tables=tables,
            shard=shard,
            reserved=reserved,
            use_unique_if_primary_key_not_match=use_unique_if_primary_key_not_match,
        )

        with self._engine.begin() as conn:
            storage.create_table(conn)
        logger.info(f"Installed {self.table_name}")

        if not tables:
            return []

        states = storage.load(bootstrap_from_real_tables=True)
        logger.info(f"Seeded {len(states)} type(s) into {self.table_name}")
        return states
