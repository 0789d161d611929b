"""
Queue checkers.

:class:`TotalQueueChecker` verifies that what goes in comes out, using
multiset arithmetic so that repeated values are counted.
:class:`QueueChecker` replays the history against a queue model.
"""

from __future__ import annotations

from collections import Counter
from typing import Any, Optional

from histcheck.core import history as h
from histcheck.core.checker import Checker, Report, fraction
from histcheck.core.history import History
from histcheck.core.model import Model, is_inconsistent, replay


def _values(history: History, type_: str, f: str) -> Counter:
    """Multiset of values of the operations matching *type_* and *f*."""
    return Counter(op.value for op in history if op.type == type_ and op.f == f)


class TotalQueueChecker(Checker):
    """
    What goes in *must* come out.

    Every successful enqueue needs a successful dequeue, and every dequeue
    must return a value somebody attempted to enqueue.  Queues only obey
    this if the history drains them completely.  O(n).

    Report entries:
        lost: enqueued for certain, never dequeued.
        unexpected: dequeued, but never enqueued by anyone.
        recovered: enqueue outcome unknown, yet the value was dequeued.
        *_frac: each group's size relative to attempted enqueues.
    """

    def check(self, test: Any, model: Optional[Model], history: History) -> Report:
        h.validate(history)

        attempts = _values(history, "invoke", "enqueue")
        enqueues = _values(history, "ok", "enqueue")
        dequeues = _values(history, "ok", "dequeue")

        # Dequeues of values somebody tried to enqueue
        ok = dequeues & attempts
        # Values nobody ever enqueued: duplicates, or leftovers from an
        # earlier state
        unexpected = dequeues - attempts
        lost = enqueues - dequeues
        recovered = ok - enqueues

        self.logger.debug(
            "Queue partitions",
            attempts=sum(attempts.values()),
            enqueues=sum(enqueues.values()),
            dequeues=sum(dequeues.values()),
        )

        n = sum(attempts.values())
        return {
            "valid": not lost and not unexpected,
            "lost": lost,
            "unexpected": unexpected,
            "recovered": recovered,
            "ok_frac": fraction(sum(ok.values()), n),
            "unexpected_frac": fraction(sum(unexpected.values()), n),
            "lost_frac": fraction(sum(lost.values()), n),
            "recovered_frac": fraction(sum(recovered.values()), n),
        }


class QueueChecker(Checker):
    """
    Every dequeue must come from somewhere.

    Assumes every attempted enqueue succeeded and only ``ok`` dequeues
    took effect, then replays those operations through the model in
    history order.  No alternate orderings are searched, so this is a
    single O(n) pass and not a linearizability check: concurrent
    operations recorded out of their effective order can be reported
    inconsistent.  Best used with an unordered queue model.
    """

    def check(self, test: Any, model: Optional[Model], history: History) -> Report:
        if model is None:
            raise ValueError("QueueChecker requires a model")
        h.validate(history)

        ops = [
            op for op in history
            if (op.f == "enqueue" and op.is_invoke())
            or (op.f == "dequeue" and op.is_ok())
        ]
        self.logger.debug(f"Replaying {len(ops)} operations", model=repr(model))

        final = replay(model, ops)
        if is_inconsistent(final):
            return {"valid": False, "error": final.message}
        return {"valid": True, "final_queue": final.state}
