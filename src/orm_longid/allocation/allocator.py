from types import MappingProxyType
from typing import Mapping
import logging
import threading

from ..errors import InvalidStateError, SequenceExhaustedError, UnknownTypeError
from ..ids.long_id import MAX_SEQUENCE, SEQUENCE_MASK, TYPE_SPACE
from ..storage.data_classes import TypeState
from ..tables.base.typing import LongIdStorageProtocol

logger = logging.getLogger(__name__)


class _Counter:
    """
    Last issued identifier for one type, mutated only through ``increment``.
    """

    __slots__ = ("type_id", "_value", "_lock")

    def __init__(self, type_id: int, value: int):
        self.type_id = type_id
        self._value = value
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        return self._value

    def increment(self) -> int:
        with self._lock:
            if self._value & SEQUENCE_MASK == MAX_SEQUENCE:
                raise SequenceExhaustedError(self.type_id)
            self._value += 1
            return self._value


class LongIdAllocator:
    """
    Thread-safe allocator of sequential packed identifiers, one sequence per type.

    The set of known types is fixed when the allocator is built: each type
    owns its counter and lock, and the type -> counter mapping is read-only,
    so ``create`` never takes a lock shared between types. To start issuing
    a new type, add it to storage and build a new allocator.

    ``flush_to_storage`` snapshots the counters and hands them to the
    storage in one ``save`` call; values issued while the snapshot is being
    taken may or may not be included and are picked up by the next flush.
    """

    def __init__(self, storage: LongIdStorageProtocol):
        if storage is None:
            raise InvalidStateError("storage is required")

        states = self._safe_load(storage)
        counters: dict[int, _Counter] = {}
        for state in states:
            if state.type_id in counters:
                raise InvalidStateError(
                    f"Storage returned type {state.type_id:#06x} more than once"
                )
            counters[state.type_id] = _Counter(state.type_id, state.last_value)

        self._storage = storage
        self._counters: Mapping[int, _Counter] = MappingProxyType(counters)
        logger.info(f"Allocator loaded {len(counters)} type(s)")

    @staticmethod
    def _safe_load(storage: LongIdStorageProtocol) -> list[TypeState]:
        states = list(storage.load())
        if len(states) > TYPE_SPACE:
            raise InvalidStateError(
                f"Length of available types {len(states)} greater than {TYPE_SPACE}."
            )
        return states

    @property
    def storage(self) -> LongIdStorageProtocol:
        return self._storage

    @property
    def known_types(self) -> frozenset[int]:
        return frozenset(self._counters)

    def create(self, type_id: int) -> int:
        try:
            counter = self._counters[type_id]
        except KeyError:
            raise UnknownTypeError(type_id) from None
        return counter.increment()

    def last_value(self, type_id: int) -> int:
        try:
            return self._counters[type_id].value
        except KeyError:
            raise UnknownTypeError(type_id) from None

    def snapshot(self) -> list[TypeState]:
        return [TypeState(c.type_id, c.value) for c in self._counters.values()]

    def flush_to_storage(self) -> None:
        states = self.snapshot()
        self._storage.save(states)
        logger.debug(f"Flushed {len(states)} type(s) to storage")
