from typing import Optional


class LongIdError(Exception):
    """Base class for every error raised by orm_longid."""


class FieldRangeError(LongIdError, ValueError):
    def __init__(self, field: str, value: int, width: int):
        self.field = field
        self.value = value
        self.width = width
        super().__init__(
            f"{field}={value!r} does not fit in {width} bits (0..{(1 << width) - 1})"
        )


class InvalidStateError(LongIdError, RuntimeError):
    pass


def _type_label(type_id) -> str:
    if isinstance(type_id, int):
        return f"{type_id:#06x}"
    return repr(type_id)


class UnknownTypeError(LongIdError, LookupError):
    def __init__(self, type_id: int):
        self.type_id = type_id
        super().__init__(
            f"Type {_type_label(type_id)} is not known to this allocator; "
            "reload the allocator after adding new types to storage"
        )


class DuplicateTypeError(LongIdError, ValueError):
    def __init__(self, type_id: int, value: Optional[int] = None):
        self.type_id = type_id
        self.value = value
        if value is None:
            message = f"Duplicated type {type_id:#06x}."
        else:
            message = f"Duplicated type {type_id:#06x} for id {value:#018x}."
        super().__init__(message)


class TypeMismatchError(LongIdError, ValueError):
    def __init__(
        self,
        table: str,
        found_type: int,
        expected_type: int,
        message: Optional[str] = None,
    ):
        self.table = table
        self.found_type = found_type
        self.expected_type = expected_type
        super().__init__(
            message
            or f"Identifiers in {table} have type {found_type:#06x} "
            f"but type {expected_type:#06x} is configured"
        )


class InconsistentRowError(TypeMismatchError):
    """
    A persisted row whose TypeId column disagrees with the type encoded in its Id.
    """

    def __init__(self, table: str, value: int, found_type: int, stored_type: int):
        self.value = value
        super().__init__(
            table,
            found_type,
            stored_type,
            message=(
                f"Type for id {value:#018x} in {table} should be {found_type:#06x} "
                f"but equals to {stored_type:#06x}"
            ),
        )


class SequenceExhaustedError(LongIdError, OverflowError):
    def __init__(self, type_id: int):
        self.type_id = type_id
        super().__init__(f"Sequence space for type {type_id:#06x} is exhausted")


class KeyResolutionError(LongIdError, ValueError):
    pass
