from dataclasses import dataclass

from ..errors import TypeMismatchError
from ..ids.long_id import LongId, decode, to_unsigned


@dataclass(frozen=True)
class TypeState:
    """
    Last issued identifier for one type.
    """
    type_id: int
    last_value: int

    def __post_init__(self):
        value = to_unsigned(self.last_value)
        object.__setattr__(self, "last_value", value)
        found = decode(value).type_id
        if found != self.type_id:
            raise TypeMismatchError(f"state {value:#018x}", found, self.type_id)

    @classmethod
    def from_value(cls, value: int) -> "TypeState":
        return cls(type_id=decode(value).type_id, last_value=value)

    @property
    def long_id(self) -> LongId:
        return decode(self.last_value)
