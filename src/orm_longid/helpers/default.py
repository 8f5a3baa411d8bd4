from typing import Optional
import threading
import sqlalchemy as sa

from ..allocation.allocator import LongIdAllocator
from ..installer.installer import LongIdInstaller
from ..metadata.keys import UniqueKeysProvider
from ..storage.data_classes import TypeState
from ..storage.db_storage import DbLongIdStorage
from ..tables.base.configured_table import ConfiguredTable
from ..tables.base.longid_table import LongIdTableSettings


class DefaultHelper:
    """
    Wires storage, allocator and installer for one engine and table.
    """

    def __init__(
        self,
        engine: sa.Engine,
        *,
        settings: Optional[LongIdTableSettings] = None,
        keys_provider: Optional[UniqueKeysProvider] = None,
    ):
        self._engine = engine
        self.settings = settings or LongIdTableSettings()
        self.keys_provider = keys_provider
        self._allocator: Optional[LongIdAllocator] = None
        self._lock = threading.Lock()

    def get_storage(self) -> DbLongIdStorage:
        return DbLongIdStorage(
            self._engine,
            settings=self.settings,
            keys_provider=self.keys_provider,
        )

    def get_allocator(self) -> LongIdAllocator:
        """Shared allocator, loaded from storage on first use."""
        if self._allocator is None:
            with self._lock:
                if self._allocator is None:
                    self._allocator = LongIdAllocator(self.get_storage())
        return self._allocator

    def install(
        self,
        shard: int = 0,
        reserved: int = 0,
        use_unique_if_primary_key_not_match: bool = False,
        *tables: ConfiguredTable,
    ) -> list[TypeState]:
        installer = LongIdInstaller(
            self._engine,
            self.keys_provider,
            settings=self.settings,
        )
        return installer.install(shard, reserved, use_unique_if_primary_key_not_match, tables)
