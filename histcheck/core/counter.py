"""
Counter checker.

A counter starts at zero; ``add`` operations increment it by their
value and ``read`` operations return the current value.  Since reads
run concurrently with adds, the value a read may legally return is
bounded rather than exact:

- the lower bound is the sum of all adds known to have completed ``ok``
  by the time the read was invoked;
- the upper bound is the sum of all adds invoked by the time the read
  completed, whether or not they were acknowledged.

Increments must be non-negative.  Negative amounts would require
widening the bounds of every pending read on each add, which this
checker does not attempt.
"""

from __future__ import annotations

from typing import Any, Dict, Hashable, List, Optional, Tuple

from histcheck.core import history as h
from histcheck.core.checker import Checker, Report
from histcheck.core.history import History
from histcheck.core.model import Model


class CounterChecker(Checker):
    """
    Validates that each read falls between its lower and upper bound.

    Report entries:
        reads: ``[lower, value, upper]`` for every completed read.
        errors: the subset of reads outside their bounds.
    """

    def check(self, test: Any, model: Optional[Model], history: History) -> Report:
        lower = 0
        upper = 0
        # process -> (lower bound at invoke, read value)
        pending: Dict[Hashable, Tuple[Any, Any]] = {}
        # process -> amount of the outstanding add
        adding: Dict[Hashable, Any] = {}
        reads: List[List[Any]] = []

        for op in h.complete(history):
            if op.f == "read":
                if op.is_invoke():
                    pending[op.process] = (lower, op.value)
                elif op.is_ok():
                    read_lower, value = pending.pop(op.process)
                    reads.append([read_lower, value, upper])
            elif op.f == "add":
                if op.is_invoke():
                    if op.value < 0:
                        raise ValueError(
                            f"Counter increments must be non-negative, got {op!r}"
                        )
                    upper += op.value
                    adding[op.process] = op.value
                elif op.is_ok():
                    lower += adding.pop(op.process)
                else:
                    adding.pop(op.process, None)

        errors = [r for r in reads if not r[0] <= r[1] <= r[2]]
        self.logger.debug(
            "Counter reads", reads=len(reads), errors=len(errors),
            final_bounds=(lower, upper),
        )
        return {
            "valid": not errors,
            "reads": reads,
            "errors": errors,
        }
