from dataclasses import dataclass, replace
from typing import Optional

from ...ids.long_id import TYPE_MASK


@dataclass(frozen=True)
class ConfiguredTable:
    """
    A real data table whose key column carries identifiers of one type.

    ``key_column_name`` may be left out and resolved later from primary /
    unique key metadata. ``shard`` overrides the scanner's shard for the
    zero-sequence baseline of an empty table.
    """
    type_id: int
    table_name: str
    schema: Optional[str] = None
    key_column_name: Optional[str] = None
    shard: Optional[int] = None

    def __post_init__(self):
        if not self.table_name:
            raise ValueError("table_name is required")
        if not 0 < self.type_id <= TYPE_MASK:
            raise ValueError(
                f"type_id for {self.table_name} must be in 1..{TYPE_MASK}, got {self.type_id}"
            )
        if self.shard is not None and not 0 <= self.shard <= 0xFF:
            raise ValueError(f"shard for {self.table_name} must fit in 8 bits, got {self.shard}")

    @property
    def full_name(self) -> str:
        if self.schema:
            return f"{self.schema}.{self.table_name}"
        return self.table_name

    def with_key(self, key_column_name: str) -> "ConfiguredTable":
        return replace(self, key_column_name=key_column_name)
