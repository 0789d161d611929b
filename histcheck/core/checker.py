"""
Checker contract and combinators.

A checker validates a history against some notion of correctness and
returns a report: a dict with at least a boolean ``"valid"`` entry plus
checker-specific diagnostics.  Checkers are pure functions of their
inputs; the only concurrency lives in :class:`Compose`, which runs
several checkers over the same history in parallel.
"""

from __future__ import annotations

import traceback
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Mapping, Optional

from histcheck.core.history import History
from histcheck.core.model import Model
from histcheck.utils.logger import CheckLogger, LogLevel

Report = Dict[str, Any]


class Checker(ABC):
    """
    Validates a history with respect to some model.

    Attributes:
        logger: Logger for diagnostics (silent by default).
    """

    def __init__(self, logger: Optional[CheckLogger] = None) -> None:
        self.logger: CheckLogger = logger or CheckLogger(LogLevel.SILENT)

    @abstractmethod
    def check(self, test: Any, model: Optional[Model], history: History) -> Report:
        """
        Verify the history.

        Args:
            test: Opaque test context; most checkers ignore it.
            model: Model for checkers that replay the history, else ignored.
            history: Recorded operations.

        Returns:
            A report such as ``{"valid": True}``, or ``{"valid": False,
            ...}`` with details of what went wrong.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def check_safe(
    checker: Checker,
    test: Any,
    model: Optional[Model],
    history: History,
    logger: Optional[CheckLogger] = None,
) -> Report:
    """
    Like ``checker.check``, but converts a failure into a report.

    Any exception raised by the checker yields ``{"valid": False,
    "error": <traceback>}`` instead of propagating.  So does a return
    value that is not a mapping with a ``"valid"`` entry.
    """
    try:
        report = checker.check(test, model, history)
        if not isinstance(report, Mapping) or "valid" not in report:
            raise TypeError(
                f"{checker!r} returned {report!r}, not a report with a 'valid' entry"
            )
        return report
    except Exception as exc:
        if logger is not None:
            logger.error(f"{checker!r} crashed: {exc}")
        return {
            "valid": False,
            "error": "".join(
                traceback.format_exception(type(exc), exc, exc.__traceback__)
            ),
        }


def fraction(a: int, b: int) -> float:
    """``a / b``, but 1 when *b* is zero."""
    if b == 0:
        return 1
    return a / b


class UnbridledOptimism(Checker):
    """Everything is awesome: every history is valid."""

    def check(self, test: Any, model: Optional[Model], history: History) -> Report:
        return {"valid": True}


class LinearizabilityOracle(ABC):
    """
    External linearizability analysis.

    ``analyze`` must return a report whose ``"valid"`` entry is True iff
    some linearization of the concurrent history is consistent with
    sequential application of ``model.step``.
    """

    @abstractmethod
    def analyze(self, model: Model, history: History) -> Report:
        """Search for a linearization of *history* under *model*."""


class Linearizable(Checker):
    """
    Validates linearizability by delegating to an external oracle.

    The oracle's report, including any diagnostics such as a minimal
    failing prefix, is returned unchanged.
    """

    def __init__(
        self,
        oracle: LinearizabilityOracle,
        logger: Optional[CheckLogger] = None,
    ) -> None:
        super().__init__(logger)
        self.oracle = oracle

    def check(self, test: Any, model: Optional[Model], history: History) -> Report:
        if model is None:
            raise ValueError("Linearizability analysis requires a model")
        self.logger.debug(
            f"Analyzing {len(history)} operations", oracle=repr(self.oracle)
        )
        report = self.oracle.analyze(model, history)
        if "valid" not in report:
            raise ValueError(f"Oracle report has no 'valid' entry: {report!r}")
        return dict(report)


class Compose(Checker):
    """
    Runs several named checkers in parallel over the same history.

    The report maps each name to that checker's report, plus a top-level
    ``"valid"`` which is True iff every checker found the history valid.
    Each checker runs through :func:`check_safe`, so one crashing checker
    shows up as an error entry without affecting the others.

    Attributes:
        checkers: Mapping from name to checker.
        max_workers: Worker pool size (None for the executor default).
    """

    def __init__(
        self,
        checkers: Mapping[str, Checker],
        max_workers: Optional[int] = None,
        logger: Optional[CheckLogger] = None,
    ) -> None:
        super().__init__(logger)
        if "valid" in checkers:
            raise ValueError("'valid' is reserved and cannot name a checker")
        self.checkers: Dict[str, Checker] = dict(checkers)
        self.max_workers = max_workers

    def check(self, test: Any, model: Optional[Model], history: History) -> Report:
        if not self.checkers:
            return {"valid": True}

        self.logger.info(
            f"Running {len(self.checkers)} checkers: {', '.join(self.checkers)}"
        )
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = {
                name: pool.submit(
                    check_safe, checker, test, model, history, self.logger
                )
                for name, checker in self.checkers.items()
            }
            results: Report = {name: f.result() for name, f in futures.items()}

        for name in self.checkers:
            self.logger.verdict(name, bool(results[name].get("valid")))
        valid = all(r.get("valid") for r in results.values())
        results["valid"] = valid
        return results

    def __repr__(self) -> str:
        return f"Compose({list(self.checkers)})"
