import sqlalchemy as sa
import sqlalchemy.orm as so
from typing import ClassVar, Optional, Type, cast
import logging

from .configured_table import ConfiguredTable
from ...ids.long_id import LongId, decode

logger = logging.getLogger(__name__)

class LongIdTableBase:
    """
    Mixin for SQLAlchemy ORM-mapped tables whose primary key holds packed
    identifiers of a single type.

    - primary key introspection
    - current maximum identifier lookup
    - ConfiguredTable derivation for installers and bootstrap scans
    """

    __abstract__ = True
    __longid_type__: ClassVar[Optional[int]] = None
    __longid_key__: ClassVar[Optional[str]] = None

    @classmethod
    def mapper_for(cls: Type) -> so.Mapper:
        mapper = sa.inspect(cls)
        if not mapper:
            raise TypeError(f"{cls.__name__} is not a mapped ORM class")
        return cast(so.Mapper, mapper)

    @classmethod
    def pk_columns(cls) -> list[sa.ColumnElement]:
        pks = list(cls.mapper_for().primary_key)
        if not pks:
            raise ValueError(f"{cls.__name__} has no primary key")
        return pks

    @classmethod
    def pk_names(cls) -> list[str]:
        return [c.key for c in cls.pk_columns() if c.key is not None]

    @classmethod
    def key_column(cls) -> sa.ColumnElement:
        if cls.__longid_key__:
            table = cls.mapper_for().local_table
            return table.c[cls.__longid_key__]
        pks = cls.pk_columns()
        if len(pks) != 1:
            raise ValueError(
                f"{cls.__name__} has composite PK; set __longid_key__ to choose the id column"
            )
        return pks[0]

    @classmethod
    def max_id(cls, session: so.Session) -> Optional[int]:
        return session.query(sa.func.max(cls.key_column())).scalar()

    @classmethod
    def last_long_id(cls, session: so.Session) -> Optional[LongId]:
        found = cls.max_id(session)
        if found is None:
            return None
        return decode(found)

    @classmethod
    def configured_table(cls, type_id: Optional[int] = None) -> ConfiguredTable:
        type_id = type_id if type_id is not None else cls.__longid_type__
        if type_id is None:
            raise ValueError(f"{cls.__name__} does not declare __longid_type__")
        table = cls.mapper_for().local_table
        key = cls.key_column()
        return ConfiguredTable(
            type_id=type_id,
            table_name=table.name,
            schema=table.schema,
            key_column_name=key.name,
        )
