"""
Set checker for add-then-read workloads.
"""

from __future__ import annotations

from typing import Any, Optional

from histcheck.core import history as h
from histcheck.core.checker import Checker, Report, fraction
from histcheck.core.history import History
from histcheck.core.model import Model


class SetChecker(Checker):
    """
    Given a set of ``add`` operations followed by a final ``read``,
    verifies that every successfully added element is present in the
    read, and that the read contains only elements for which an add was
    attempted.

    Report entries:
        ok: read elements for which an add was attempted.
        lost: definitely added, but missing from the read.
        unexpected: read, but never attempted.
        recovered: add outcome unknown, yet present in the read.
    """

    def check(self, test: Any, model: Optional[Model], history: History) -> Report:
        h.validate(history)

        attempts = {op.value for op in history if op.is_invoke() and op.f == "add"}
        adds = {op.value for op in history if op.is_ok() and op.f == "add"}
        reads = [op.value for op in history if op.is_ok() and op.f == "read"]

        # An ok read that returned nil observed nothing
        if not reads or reads[-1] is None:
            return {"valid": False, "error": "Set was never read"}
        final_read = set(reads[-1])

        ok = final_read & attempts
        unexpected = final_read - attempts
        lost = adds - final_read
        recovered = ok - adds

        self.logger.debug(
            "Set partitions",
            attempts=len(attempts),
            adds=len(adds),
            read=len(final_read),
        )

        n = len(attempts)
        return {
            "valid": not lost and not unexpected,
            "ok": ok,
            "lost": lost,
            "unexpected": unexpected,
            "recovered": recovered,
            "ok_frac": fraction(len(ok), n),
            "unexpected_frac": fraction(len(unexpected), n),
            "lost_frac": fraction(len(lost), n),
            "recovered_frac": fraction(len(recovered), n),
        }
