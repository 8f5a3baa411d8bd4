from dataclasses import dataclass, field
from typing import Iterable, Mapping
import logging

from ..errors import DuplicateTypeError
from .data_classes import TypeState

logger = logging.getLogger(__name__)

"""
Reconciliation
==============

Diffs the states a caller wants persisted against the rows already
persisted, keyed by type. The result is three disjoint sets of row
identities (insert / update / delete) plus the matched rows whose value
did not move, so the write side can apply them in any order.

Nothing here touches a database; applying the plan is the storage's job.
"""


@dataclass
class ReconciliationPlan:
    inserts: list[TypeState] = field(default_factory=list)
    updates: list[TypeState] = field(default_factory=list)
    deletes: list[TypeState] = field(default_factory=list)
    unchanged: list[TypeState] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.inserts or self.updates or self.deletes)

    def summary(self) -> str:
        return (
            f"{len(self.inserts)} insert(s), {len(self.updates)} update(s), "
            f"{len(self.deletes)} delete(s), {len(self.unchanged)} unchanged"
        )


def ensure_unique_types(states: Iterable[TypeState]) -> list[TypeState]:
    """Return ``states`` as a list, raising on the first repeated type."""
    seen: set[int] = set()
    out = []
    for state in states:
        if state.type_id in seen:
            raise DuplicateTypeError(state.type_id, state.last_value)
        seen.add(state.type_id)
        out.append(state)
    return out


def plan_reconciliation(
    incoming: Iterable[TypeState],
    persisted: Mapping[int, TypeState],
    *,
    remove_unmatched: bool = True,
) -> ReconciliationPlan:
    incoming = ensure_unique_types(incoming)
    unmatched = dict(persisted)
    plan = ReconciliationPlan()

    for state in incoming:
        current = unmatched.pop(state.type_id, None)
        if current is None:
            plan.inserts.append(state)
        elif current.last_value == state.last_value:
            plan.unchanged.append(state)
        else:
            plan.updates.append(state)

    if remove_unmatched:
        plan.deletes.extend(unmatched.values())

    logger.debug(f"Reconciliation plan: {plan.summary()}")
    return plan
