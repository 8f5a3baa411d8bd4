from dataclasses import dataclass
from typing import Optional
import sqlalchemy as sa

TYPE_COLUMN_NAME = "TypeId"
ID_COLUMN_NAME = "Id"
TABLE_NAME_COLUMN_NAME = "TableName"
KEY_COLUMN_NAME = "KeyName"
SHARD_COLUMN_NAME = "Shard"

DEFAULT_TABLE_NAME = "_longIds"
SYS_NAME_SIZE = 128


@dataclass(frozen=True)
class LongIdTableSettings:
    """
    Location of the table holding the last issued identifier per type.
    """
    table_name: str = DEFAULT_TABLE_NAME
    schema: Optional[str] = None

    @property
    def full_name(self) -> str:
        if self.schema:
            return f"{self.schema}.{self.table_name}"
        return self.table_name


def longid_table(
    metadata: sa.MetaData,
    settings: Optional[LongIdTableSettings] = None,
) -> sa.Table:
    """
    Build the backing table definition on ``metadata``.

    TypeId duplicates the high 16 bits of Id; it is kept as the row key so
    updates and deletes never need to decode identifiers in SQL.
    """
    settings = settings or LongIdTableSettings()
    return sa.Table(
        settings.table_name,
        metadata,
        sa.Column(TYPE_COLUMN_NAME, sa.SmallInteger, primary_key=True, autoincrement=False),
        sa.Column(ID_COLUMN_NAME, sa.BigInteger, nullable=False),
        sa.Column(TABLE_NAME_COLUMN_NAME, sa.String(SYS_NAME_SIZE), nullable=True),
        sa.Column(KEY_COLUMN_NAME, sa.String(SYS_NAME_SIZE), nullable=True),
        sa.Column(SHARD_COLUMN_NAME, sa.SmallInteger, nullable=True),
        schema=settings.schema,
    )
