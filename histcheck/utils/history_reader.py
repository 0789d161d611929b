"""
History file reader.

Reads recorded histories stored one EDN operation map per line,
together with optional directives naming the model and checkers the
history should be validated with.

All operations are loaded upfront: checkers need the whole history.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, FrozenSet, Hashable, List, Optional, Tuple

from histcheck.core import history as h
from histcheck.core.operation import Operation
from histcheck.parser.edn import parse_operation
from histcheck.parser.grammar import ParseError
from histcheck.parser.lexer import LexerError


@dataclass
class HistoryMetadata:
    """
    Metadata extracted from a history file.

    Attributes:
        processes: Set of all process IDs.
        operation_count: Total number of operations.
        model: Model name from the ``model`` directive, if any.
        checkers: Checker names from the ``checkers`` directive.
    """

    processes: FrozenSet[Hashable]
    operation_count: int
    model: Optional[str] = None
    checkers: Tuple[str, ...] = ()


@dataclass
class HistoryData:
    """
    Complete history loaded from a file.

    Attributes:
        operations: All operations in file order.
        metadata: History metadata.
    """

    operations: List[Operation]
    metadata: HistoryMetadata


class HistoryReader:
    """
    Parses history files into Operation objects.

    Expected format::

        # Optional: model directive
        # model: unordered-queue

        # Optional: checkers directive
        # checkers: total-queue|counter

        {:process 0, :type :invoke, :f :enqueue, :value 1, :time 1000}
        {:process 0, :type :ok, :f :enqueue, :value 1, :time 2000}

    Attributes:
        filepath: Path to the history file.
    """

    def __init__(self, filepath: Path) -> None:
        """
        Initialize reader with file path.

        Args:
            filepath: Path to the history file.
        """
        self.filepath: Path = Path(filepath)

    def read_all(self) -> HistoryData:
        """
        Read all operations and directives.

        Returns:
            HistoryData with all operations and metadata.
        """
        directives = self._parse_directives()
        operations = self.read_operations()

        metadata = HistoryMetadata(
            processes=frozenset(op.process for op in operations),
            operation_count=len(operations),
            model=directives.get("model"),
            checkers=directives.get("checkers", ()),
        )
        return HistoryData(operations=operations, metadata=metadata)

    def read_metadata(self) -> HistoryMetadata:
        """
        Read directives and summary counts.

        Returns:
            HistoryMetadata with processes, operation count and directives.
        """
        return self.read_all().metadata

    def read_operations(self) -> List[Operation]:
        """
        Read all operations from the file.

        Returns:
            List of Operation objects in file order.

        Raises:
            FileNotFoundError: If the history file does not exist.
            ParseError: If a line is not a valid EDN operation map.
        """
        if not self.filepath.exists():
            raise FileNotFoundError(f"History file not found: {self.filepath}")

        operations: List[Operation] = []
        for lineno, line in self._read_data_lines():
            try:
                operations.append(parse_operation(line))
            except (LexerError, ParseError, ValueError) as exc:
                raise ParseError(f"{self.filepath}:{lineno}: {exc}") from exc
        return operations

    def validate(self) -> List[str]:
        """
        Validate the history file and return a list of error strings.

        Validates:
        - Every data line is an EDN operation map
        - Processes run at most one operation at a time

        Returns:
            List of error messages (empty if valid).
        """
        errors: List[str] = []

        if not self.filepath.exists():
            errors.append(f"File not found: {self.filepath}")
            return errors

        operations: List[Operation] = []
        for lineno, line in self._read_data_lines():
            try:
                operations.append(parse_operation(line))
            except (LexerError, ParseError, ValueError) as exc:
                errors.append(f"line {lineno}: {exc}")

        if not errors:
            try:
                h.validate(operations)
            except h.HistoryError as exc:
                errors.append(str(exc))

        return errors

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _parse_directives(self) -> Dict[str, object]:
        """Extract directives from comment lines in the file."""
        directives: Dict[str, object] = {}
        if not self.filepath.exists():
            return directives

        with open(self.filepath) as f:
            for line in f:
                line = line.strip()
                if not line.startswith("#") or line.startswith("#{"):
                    continue
                content = line.lstrip("#").strip()
                if content.startswith("model:"):
                    directives["model"] = content.split(":", 1)[1].strip()
                elif content.startswith("checkers:"):
                    val = content.split(":", 1)[1].strip()
                    directives["checkers"] = tuple(
                        c.strip() for c in val.split("|") if c.strip()
                    )

        return directives

    def _read_data_lines(self) -> List[Tuple[int, str]]:
        """Read non-comment, non-empty lines with their line numbers."""
        lines: List[Tuple[int, str]] = []
        with open(self.filepath) as f:
            for lineno, line in enumerate(f, start=1):
                stripped = line.strip()
                if not stripped or stripped.startswith(";"):
                    continue
                if stripped.startswith("#") and not stripped.startswith("#{"):
                    continue
                lines.append((lineno, stripped))
        return lines
