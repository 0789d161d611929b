"""
Abstract state models for replaying histories.

A model describes the legal sequential behaviour of the system under
test.  ``step`` takes a state and an operation and returns either the
next state wrapped in :class:`Consistent`, or :class:`Inconsistent`
with a diagnostic when the model cannot explain the operation.  States
are values: a step never modifies the state it was given.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass
from typing import Any, Iterable, Union

from histcheck.core.operation import Operation


@dataclass(frozen=True)
class Consistent:
    """The model accepted an operation and moved to ``state``."""

    state: Any


@dataclass(frozen=True)
class Inconsistent:
    """The model rejected an operation."""

    message: str


StepResult = Union[Consistent, Inconsistent]


def is_inconsistent(result: StepResult) -> bool:
    """True if *result* is a rejection."""
    return isinstance(result, Inconsistent)


class Model(ABC):
    """
    Sequential specification of a datatype.

    Subclasses provide the initial state and the transition function.
    """

    @abstractmethod
    def initial(self) -> Any:
        """Return the state before any operation has been applied."""

    @abstractmethod
    def step(self, state: Any, op: Operation) -> StepResult:
        """
        Apply *op* to *state*.

        Returns:
            ``Consistent(new_state)`` or ``Inconsistent(message)``.
        """

    def _unknown(self, op: Operation) -> Inconsistent:
        return Inconsistent(f"{type(self).__name__} cannot apply {op.f!r}")

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def replay(model: Model, ops: Iterable[Operation]) -> StepResult:
    """
    Fold ``model.step`` over *ops*, starting from ``model.initial()``.

    Stops at the first rejection and returns it.
    """
    result: StepResult = Consistent(model.initial())
    for op in ops:
        result = model.step(result.state, op)
        if is_inconsistent(result):
            return result
    return result


# ---------------------------------------------------------------------- #
# Stock models
# ---------------------------------------------------------------------- #


class UnorderedQueue(Model):
    """
    A queue that may deliver elements in any order.

    The state is a multiset of pending elements.  ``enqueue`` adds its
    value; ``dequeue`` removes its value and is rejected when that value
    is not pending.
    """

    def initial(self) -> Counter:
        return Counter()

    def step(self, state: Counter, op: Operation) -> StepResult:
        if op.f == "enqueue":
            pending = Counter(state)
            pending[op.value] += 1
            return Consistent(pending)
        if op.f == "dequeue":
            if state[op.value] <= 0:
                return Inconsistent(f"can't dequeue {op.value!r}")
            pending = Counter(state)
            pending[op.value] -= 1
            if not pending[op.value]:
                del pending[op.value]
            return Consistent(pending)
        return self._unknown(op)


class FIFOQueue(Model):
    """A strictly first-in first-out queue; the state is a tuple."""

    def initial(self) -> tuple:
        return ()

    def step(self, state: tuple, op: Operation) -> StepResult:
        if op.f == "enqueue":
            return Consistent(state + (op.value,))
        if op.f == "dequeue":
            if not state:
                return Inconsistent(f"can't dequeue {op.value!r} from empty queue")
            if state[0] != op.value:
                return Inconsistent(
                    f"can't dequeue {op.value!r}; head of queue is {state[0]!r}"
                )
            return Consistent(state[1:])
        return self._unknown(op)


class Register(Model):
    """A read/write register holding a single value, initially None."""

    def __init__(self, initial_value: Any = None) -> None:
        self.initial_value = initial_value

    def initial(self) -> Any:
        return self.initial_value

    def step(self, state: Any, op: Operation) -> StepResult:
        if op.f == "write":
            return Consistent(op.value)
        if op.f == "read":
            if op.value is None or op.value == state:
                return Consistent(state)
            return Inconsistent(f"can't read {op.value!r} from register {state!r}")
        return self._unknown(op)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.initial_value!r})"


class CASRegister(Register):
    """
    A register that also supports compare-and-set.

    ``cas`` takes ``(expected, new)`` and succeeds only when the current
    value equals ``expected``.
    """

    def step(self, state: Any, op: Operation) -> StepResult:
        if op.f == "cas":
            expected, new = op.value
            if state == expected:
                return Consistent(new)
            return Inconsistent(
                f"can't CAS {state!r} from {expected!r} to {new!r}"
            )
        return super().step(state, op)
