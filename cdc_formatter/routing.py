"""Emission planning for each operation type and the pk-update policy."""

from dataclasses import dataclass
from typing import Tuple, Union

from .config import PkUpdatePolicy
from .models import OpType, Side


@dataclass(frozen=True)
class Emission:
    """One record/key pair to build: its effective op type and row image."""

    kind: OpType
    side: Side


INSERT = Emission(OpType.INSERT, Side.AFTER)
UPDATE = Emission(OpType.UPDATE, Side.AFTER)
DELETE = Emission(OpType.DELETE, Side.BEFORE)


@dataclass(frozen=True)
class Single:
    emission: Emission

    @property
    def emissions(self) -> Tuple[Emission, ...]:
        return (self.emission,)


@dataclass(frozen=True)
class Pair:
    first: Emission
    second: Emission

    @property
    def emissions(self) -> Tuple[Emission, ...]:
        return (self.first, self.second)


@dataclass(frozen=True)
class Fatal:
    reason: str

    @property
    def emissions(self) -> Tuple[Emission, ...]:
        return ()


Plan = Union[Single, Pair, Fatal]


def plan_operation(op_type: OpType, policy: PkUpdatePolicy) -> Plan:
    """Decide what to emit for an operation.

    Plain updates carry only the after image even though a before image
    exists on the operation.
    """
    if op_type is OpType.INSERT:
        return Single(INSERT)
    if op_type is OpType.DELETE:
        return Single(DELETE)
    if op_type is OpType.UPDATE:
        return Single(UPDATE)
    if op_type is OpType.PK_UPDATE:
        if policy is PkUpdatePolicy.TREAT_AS_UPDATE:
            return Single(UPDATE)
        if policy is PkUpdatePolicy.SPLIT_DELETE_INSERT:
            return Pair(first=DELETE, second=INSERT)
        return Fatal(
            "Encountered an update including a primary key. "
            "The behavior is configured to ABEND in this scenario."
        )
    return Fatal(f"Encountered an unknown operation [{op_type.value}].")
