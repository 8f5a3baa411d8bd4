from .long_id import (
    LongId,
    encode,
    decode,
    to_signed,
    to_unsigned,
    MAX_SEQUENCE,
    TYPE_SPACE,
)

__all__ = [
    "LongId",
    "encode",
    "decode",
    "to_signed",
    "to_unsigned",
    "MAX_SEQUENCE",
    "TYPE_SPACE",
]
