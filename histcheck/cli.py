"""
Command-line interface for histcheck.

Provides argument parsing and orchestration for checking a recorded
history file with one or more checkers.
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

import histcheck
from histcheck.core import history as h
from histcheck.core.checker import Checker, Compose, UnbridledOptimism
from histcheck.core.counter import CounterChecker
from histcheck.core.model import CASRegister, FIFOQueue, Model, Register, UnorderedQueue
from histcheck.core.queue import QueueChecker, TotalQueueChecker
from histcheck.core.set_checker import SetChecker
from histcheck.utils.history_reader import HistoryReader
from histcheck.utils.logger import CheckLogger, LogLevel
from histcheck.utils.report import format_report

CHECKERS: Dict[str, Callable[[CheckLogger], Checker]] = {
    "total-queue": lambda logger: TotalQueueChecker(logger),
    "queue": lambda logger: QueueChecker(logger),
    "set": lambda logger: SetChecker(logger),
    "counter": lambda logger: CounterChecker(logger),
    "unbridled-optimism": lambda logger: UnbridledOptimism(logger),
}

MODELS: Dict[str, Callable[[], Model]] = {
    "unordered-queue": UnorderedQueue,
    "fifo-queue": FIFOQueue,
    "register": Register,
    "cas-register": CASRegister,
}


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the histcheck CLI."""
    parser = argparse.ArgumentParser(
        prog="histcheck",
        description=(
            "histcheck: validate a recorded history of client operations "
            "against queue, set and counter semantics"
        ),
    )

    required = parser.add_argument_group("required arguments")
    required.add_argument(
        "-H",
        "--history",
        type=Path,
        required=True,
        help="Path to history file (one EDN operation map per line)",
    )

    parser.add_argument(
        "-c",
        "--checker",
        action="append",
        choices=sorted(CHECKERS),
        default=None,
        help="Checker to run; repeat for several (default: file directive)",
    )
    parser.add_argument(
        "-m",
        "--model",
        choices=sorted(MODELS),
        default=None,
        help="Model for model-driven checkers (default: file directive)",
    )
    parser.add_argument(
        "-o",
        "--output",
        choices=["silent", "normal", "verbose"],
        default="normal",
        help="Output level (default: normal)",
    )
    parser.add_argument(
        "-d",
        "--debug",
        type=int,
        choices=[0, 1, 2, 3],
        default=0,
        help="Debug level 0-3 (default: 0)",
    )
    parser.add_argument(
        "-w",
        "--workers",
        type=int,
        default=None,
        help="Maximum number of checkers run in parallel",
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Print per-operation latency statistics after checking",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"histcheck {histcheck.__version__}",
    )

    return parser


def _resolve_log_level(output: str, debug: int) -> LogLevel:
    """Determine the effective log level from output and debug settings."""
    if debug >= 3:
        return LogLevel.DEBUG
    if debug >= 2:
        return LogLevel.VERBOSE
    if output == "verbose" or debug >= 1:
        return LogLevel.VERBOSE
    if output == "silent":
        return LogLevel.SILENT
    return LogLevel.NORMAL


def _resolve_checkers(requested: Optional[List[str]], directive: tuple) -> List[str]:
    """Checker names from the command line, else from the file directive."""
    names = list(requested or directive)
    if not names:
        raise ValueError(
            "No checkers selected; use -c or a '# checkers:' directive"
        )
    unknown = [n for n in names if n not in CHECKERS]
    if unknown:
        raise ValueError(f"Unknown checkers: {unknown}")
    return names


def _resolve_model(requested: Optional[str], directive: Optional[str]) -> Optional[Model]:
    """Model from the command line, else from the file directive."""
    name = requested or directive
    if name is None:
        return None
    if name not in MODELS:
        raise ValueError(f"Unknown model: {name!r}")
    return MODELS[name]()


def main() -> None:
    """Entry point for the ``histcheck`` CLI command."""
    parser = _build_parser()
    args = parser.parse_args()

    try:
        _run(args)
    except SystemExit:
        raise
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)


def _run(args: argparse.Namespace) -> None:
    """Execute the checking pipeline."""
    if not args.history.exists():
        print(f"Error: History file not found: {args.history}", file=sys.stderr)
        sys.exit(2)

    log_level = _resolve_log_level(args.output, args.debug)
    stream = sys.stdout if args.output != "silent" else open(os.devnull, "w")
    logger = CheckLogger(level=log_level, stream=stream)

    data = HistoryReader(args.history).read_all()
    names = _resolve_checkers(args.checker, data.metadata.checkers)
    model = _resolve_model(args.model, data.metadata.model)

    logger.info(
        f"Loaded {data.metadata.operation_count} operations "
        f"from {len(data.metadata.processes)} processes"
    )
    logger.info(f"Model: {model!r}")

    checker = Compose(
        {name: CHECKERS[name](logger) for name in names},
        max_workers=args.workers,
        logger=logger,
    )
    report = checker.check(None, model, data.operations)

    if log_level.value >= LogLevel.NORMAL.value:
        logger.stream.write(format_report(report) + "\n")

    if args.stats:
        for f, stats in h.latency_statistics(data.operations).items():
            logger.statistics(stats, title=f)

    if report["valid"]:
        sys.exit(0)
    else:
        sys.exit(1)
