"""
Operation representation for recorded test histories.

Each operation is a single event issued by one logical client process:
either the invocation of a request or its completion.  Completions are
``ok`` (the request took effect), ``fail`` (it definitely did not) or
``info`` (indeterminate, e.g. a timeout or a crashed client, so the
request may or may not have taken effect).
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Hashable, Mapping, Optional

INVOKE = "invoke"
OK = "ok"
FAIL = "fail"
INFO = "info"

_VALID_OPERATION_TYPES = frozenset({INVOKE, OK, FAIL, INFO})
_REQUIRED_FIELDS = ("process", "type", "f")


@dataclass(frozen=True)
class Operation:
    """
    Immutable representation of one history event.

    Processes are single-threaded: a process has at most one outstanding
    invocation, and its next event after an ``invoke`` is the matching
    completion.

    Attributes:
        process: Identifier of the logical client that issued the event.
        type: One of ``'invoke'``, ``'ok'``, ``'fail'``, ``'info'``.
        f: Operation kind, e.g. ``'read'``, ``'enqueue'``, ``'add'``.
        value: Payload on invocation, result on completion.
        time: Monotonic timestamp in nanoseconds, if recorded.
    """

    process: Hashable
    type: str
    f: str
    value: Any = None
    time: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate the operation type."""
        if self.type not in _VALID_OPERATION_TYPES:
            raise ValueError(
                f"type must be one of {sorted(_VALID_OPERATION_TYPES)}, "
                f"got '{self.type}'"
            )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Operation:
        """
        Build an operation from a parsed map.

        Args:
            data: Mapping with ``process``, ``type``, ``f`` and optionally
                ``value`` and ``time`` keys.

        Raises:
            ValueError: If a required key is missing or the type is invalid.
        """
        missing = [k for k in _REQUIRED_FIELDS if k not in data]
        if missing:
            raise ValueError(f"Operation is missing required keys: {missing}")
        return cls(
            process=data["process"],
            type=data["type"],
            f=data["f"],
            value=data.get("value"),
            time=data.get("time"),
        )

    def replace(self, **changes: Any) -> Operation:
        """Return a copy of this operation with the given fields changed."""
        return dataclasses.replace(self, **changes)

    # ------------------------------------------------------------------ #
    # Type checks
    # ------------------------------------------------------------------ #

    def is_invoke(self) -> bool:
        """True if this is an invocation."""
        return self.type == INVOKE

    def is_ok(self) -> bool:
        """True if this completion definitely took effect."""
        return self.type == OK

    def is_fail(self) -> bool:
        """True if this completion definitely did not take effect."""
        return self.type == FAIL

    def is_info(self) -> bool:
        """True if the outcome of this completion is unknown."""
        return self.type == INFO

    def is_completion(self) -> bool:
        """True for any of ``ok``, ``fail`` or ``info``."""
        return self.type != INVOKE
