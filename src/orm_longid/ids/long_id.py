from dataclasses import dataclass

from ..errors import FieldRangeError

"""
Packed 64-bit identifiers
=========================

Layout, low bits first:

- sequence: bits 0-31, counter value for one type
- reserved: bits 32-39, free-form tag
- shard:    bits 40-47, origin shard
- type:     bits 48-63, entity type (0 is reserved for internal use)

Identifiers are plain ints in [0, 2**64). Databases store them as signed
BIGINT, so ``to_signed`` / ``to_unsigned`` convert at the storage edge and
``decode`` accepts either rendition.
"""

SEQUENCE_BITS = 32
RESERVED_BITS = 8
SHARD_BITS = 8
TYPE_BITS = 16

RESERVED_SHIFT = SEQUENCE_BITS
SHARD_SHIFT = RESERVED_SHIFT + RESERVED_BITS
TYPE_SHIFT = SHARD_SHIFT + SHARD_BITS

SEQUENCE_MASK = (1 << SEQUENCE_BITS) - 1
RESERVED_MASK = (1 << RESERVED_BITS) - 1
SHARD_MASK = (1 << SHARD_BITS) - 1
TYPE_MASK = (1 << TYPE_BITS) - 1

MAX_SEQUENCE = SEQUENCE_MASK
TYPE_SPACE = 1 << TYPE_BITS


def to_signed(value: int, bits: int = 64) -> int:
    value &= (1 << bits) - 1
    if value >= 1 << (bits - 1):
        value -= 1 << bits
    return value


def to_unsigned(value: int, bits: int = 64) -> int:
    return value & ((1 << bits) - 1)


def _check(field: str, value: int, width: int) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{field} must be an int, got {type(value).__name__}")
    if value < 0 or value >> width:
        raise FieldRangeError(field, value, width)
    return value


def encode(type_id: int, shard: int, reserved: int, sequence: int) -> int:
    _check("type_id", type_id, TYPE_BITS)
    _check("shard", shard, SHARD_BITS)
    _check("reserved", reserved, RESERVED_BITS)
    _check("sequence", sequence, SEQUENCE_BITS)
    return (
        (type_id << TYPE_SHIFT)
        | (shard << SHARD_SHIFT)
        | (reserved << RESERVED_SHIFT)
        | sequence
    )


def decode(value: int) -> "LongId":
    value = to_unsigned(int(value))
    return LongId(
        type_id=(value >> TYPE_SHIFT) & TYPE_MASK,
        shard=(value >> SHARD_SHIFT) & SHARD_MASK,
        reserved=(value >> RESERVED_SHIFT) & RESERVED_MASK,
        sequence=value & SEQUENCE_MASK,
    )


@dataclass(frozen=True)
class LongId:
    """
    Field view of a packed identifier.

    Construct through ``decode`` or ``LongId.first``; the fields are
    range-checked on creation.
    """

    type_id: int
    shard: int
    reserved: int
    sequence: int

    def __post_init__(self):
        _check("type_id", self.type_id, TYPE_BITS)
        _check("shard", self.shard, SHARD_BITS)
        _check("reserved", self.reserved, RESERVED_BITS)
        _check("sequence", self.sequence, SEQUENCE_BITS)

    @classmethod
    def first(cls, type_id: int, shard: int = 0, reserved: int = 0) -> "LongId":
        """Zero-sequence identifier: nothing allocated yet for this lineage."""
        return cls(type_id=type_id, shard=shard, reserved=reserved, sequence=0)

    @property
    def value(self) -> int:
        return encode(self.type_id, self.shard, self.reserved, self.sequence)

    @property
    def signed(self) -> int:
        return to_signed(self.value)

    def with_sequence(self, sequence: int) -> "LongId":
        return LongId(self.type_id, self.shard, self.reserved, sequence)

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return f"{self.value:#018x}"
