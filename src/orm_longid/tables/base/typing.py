from typing import Protocol, ClassVar, runtime_checkable, TYPE_CHECKING, Optional, Iterable
import sqlalchemy.orm as so
import sqlalchemy as sa

from .configured_table import ConfiguredTable

if TYPE_CHECKING:
    from ...storage.data_classes import TypeState
    from ...storage.reconciliation import ReconciliationPlan


@runtime_checkable
class LongIdTableProtocol(Protocol):
    """
    Structural protocol for ORM-mapped *table classes* carrying packed identifiers.
    """

    __tablename__: ClassVar[str]
    __longid_type__: ClassVar[Optional[int]]

    @classmethod
    def mapper_for(cls) -> so.Mapper: ...

    @classmethod
    def pk_names(cls) -> list[str]: ...

    @classmethod
    def key_column(cls) -> sa.ColumnElement: ...

    @classmethod
    def max_id(cls, session: so.Session) -> Optional[int]: ...

    @classmethod
    def configured_table(cls, type_id: Optional[int] = None) -> ConfiguredTable: ...


@runtime_checkable
class LongIdStorageProtocol(Protocol):
    """
    Load / save contract between the allocator and a durable medium.

    ``load(True)`` recomputes last values from the real tables and persists
    them as a side effect. ``save`` rejects duplicate types before writing.
    """

    def load(self, bootstrap_from_real_tables: bool = False) -> list["TypeState"]: ...

    def save(
        self,
        states: Iterable["TypeState"],
        remove_unmatched: bool = True,
    ) -> "ReconciliationPlan": ...

    def save_last_value(self, state: "TypeState") -> "ReconciliationPlan": ...
