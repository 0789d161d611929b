"""
History utilities: invariant checking, completion and latency pairing.

A history is the ordered list of operations recorded during one test
run.  Recording order is not necessarily the real-world order of
effects, but every completion follows the invocation it completes, and
each process has at most one outstanding invocation at a time.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Dict, Hashable, List, Optional, Sequence

from histcheck.core.operation import INFO, Operation

History = Sequence[Operation]


class HistoryError(ValueError):
    """Raised when a history violates the single-outstanding-operation rule."""
    pass


@dataclass(frozen=True)
class LatencyOperation:
    """
    An invocation paired with its completion.

    Attributes:
        invocation: The ``invoke`` operation.
        completion: The matching completion, or None if it never completed.
        latency: ``completion.time - invocation.time`` in nanoseconds, or
            None when either timestamp is missing.
    """

    invocation: Operation
    completion: Optional[Operation]
    latency: Optional[int]

    @property
    def f(self) -> str:
        return self.invocation.f

    @property
    def outcome(self) -> Optional[str]:
        """Completion type, or None for an invocation that never completed."""
        return self.completion.type if self.completion is not None else None


def _invoke_conflict(op: Operation, outstanding: Operation) -> HistoryError:
    return HistoryError(
        f"Process {op.process!r} already running {outstanding!r}, "
        f"yet attempted to invoke {op!r} concurrently"
    )


def _orphan_completion(op: Operation) -> HistoryError:
    return HistoryError(
        f"Completion {op!r} has no outstanding invocation "
        f"on process {op.process!r}"
    )


def validate(history: History) -> None:
    """
    Check that every process runs at most one operation at a time.

    Args:
        history: The recorded operations.

    Raises:
        HistoryError: On an invocation while another is outstanding on the
            same process, or on a completion with no outstanding invocation.
    """
    outstanding: Dict[Hashable, Operation] = {}
    for op in history:
        if op.is_invoke():
            if op.process in outstanding:
                raise _invoke_conflict(op, outstanding[op.process])
            outstanding[op.process] = op
        else:
            if op.process not in outstanding:
                raise _orphan_completion(op)
            del outstanding[op.process]


def complete(history: History) -> List[Operation]:
    """
    Fill in what the history learned only at completion time.

    When a request is invoked its result is not yet known; this returns a
    new history in which:

    - an invocation completed ``ok`` carries the completion's value, or
      keeps its own when the completion has none (a read learns what it
      read); completions are left as recorded;
    - every invocation still outstanding at the end of the history gets a
      synthetic ``info`` completion appended, since it may or may not
      have taken effect.

    The input history is not modified.

    Raises:
        HistoryError: If the history violates the process invariant.
    """
    result: List[Operation] = []
    index: Dict[Hashable, int] = {}

    for op in history:
        if op.is_invoke():
            if op.process in index:
                raise _invoke_conflict(op, result[index[op.process]])
            index[op.process] = len(result)
            result.append(op)
            continue

        if op.process not in index:
            raise _orphan_completion(op)
        i = index.pop(op.process)
        if op.is_ok():
            invocation = result[i]
            value = op.value if op.value is not None else invocation.value
            result[i] = invocation.replace(value=value)
        result.append(op)

    # Dangling invocations, oldest first
    for i in sorted(index.values()):
        invocation = result[i]
        result.append(
            Operation(
                process=invocation.process,
                type=INFO,
                f=invocation.f,
                value=invocation.value,
            )
        )

    return result


def latencies(history: History) -> List[LatencyOperation]:
    """
    Pair every invocation with its completion.

    Args:
        history: The recorded operations.

    Returns:
        One LatencyOperation per invocation, in invocation order.

    Raises:
        HistoryError: If the history violates the process invariant.
    """
    pairs: List[LatencyOperation] = []
    pending: Dict[Hashable, int] = {}

    for op in history:
        if op.is_invoke():
            if op.process in pending:
                raise _invoke_conflict(op, pairs[pending[op.process]].invocation)
            pending[op.process] = len(pairs)
            pairs.append(LatencyOperation(op, None, None))
            continue

        if op.process not in pending:
            raise _orphan_completion(op)
        i = pending.pop(op.process)
        invocation = pairs[i].invocation
        latency = None
        if invocation.time is not None and op.time is not None:
            latency = op.time - invocation.time
        pairs[i] = LatencyOperation(invocation, op, latency)

    return pairs


def nanos_to_ms(nanos: float) -> float:
    """Convert nanoseconds to milliseconds."""
    return nanos / 1e6


def latency_statistics(history: History) -> Dict[str, Dict[str, Any]]:
    """
    Summarize latencies per operation kind.

    Returns:
        Mapping from ``f`` to a dict with ``count``, the number of
        completions of each type (``pending`` for none), and ``mean_ms``
        and ``max_ms`` over the operations that have a latency.
    """
    by_f: Dict[str, List[LatencyOperation]] = defaultdict(list)
    for pair in latencies(history):
        by_f[pair.f].append(pair)

    stats: Dict[str, Dict[str, Any]] = {}
    for f in sorted(by_f, key=str):
        pairs = by_f[f]
        outcomes: Dict[str, int] = defaultdict(int)
        for pair in pairs:
            outcomes[pair.outcome or "pending"] += 1
        timed = [nanos_to_ms(p.latency) for p in pairs if p.latency is not None]
        entry: Dict[str, Any] = {"count": len(pairs)}
        entry.update(sorted(outcomes.items()))
        entry["mean_ms"] = sum(timed) / len(timed) if timed else None
        entry["max_ms"] = max(timed) if timed else None
        stats[f] = entry
    return stats
