"""
Tests for the history file reader.

Tests cover directive parsing, operation loading, comment handling,
metadata extraction, validation and error reporting with line numbers.
"""

from pathlib import Path

import pytest

from histcheck.core.operation import Operation
from histcheck.parser.grammar import ParseError
from histcheck.utils.history_reader import HistoryReader


def _write(path: Path, text: str) -> Path:
    path.write_text(text)
    return path


SIMPLE = """\
# model: fifo-queue
# checkers: total-queue|queue
{:process 0, :type :invoke, :f :enqueue, :value 1, :time 10}
; EDN comment
{:process 0, :type :ok, :f :enqueue, :value 1, :time 20}

{:process 1, :type :invoke, :f :dequeue, :value nil, :time 30}
"""


class TestReadOperations:
    """Test loading operations."""

    def test_reads_in_file_order(self, tmp_history_file: Path) -> None:
        reader = HistoryReader(_write(tmp_history_file, SIMPLE))
        ops = reader.read_operations()
        assert ops == [
            Operation(0, "invoke", "enqueue", 1, 10),
            Operation(0, "ok", "enqueue", 1, 20),
            Operation(1, "invoke", "dequeue", None, 30),
        ]

    def test_empty_file(self, tmp_history_file: Path) -> None:
        reader = HistoryReader(_write(tmp_history_file, ""))
        assert reader.read_operations() == []

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            HistoryReader(tmp_path / "absent.edn").read_operations()

    def test_syntax_error_names_line(self, tmp_history_file: Path) -> None:
        text = "{:process 0, :type :invoke, :f :read}\n{:process 0\n"
        reader = HistoryReader(_write(tmp_history_file, text))
        with pytest.raises(ParseError, match=":2:"):
            reader.read_operations()

    def test_invalid_operation_names_line(self, tmp_history_file: Path) -> None:
        reader = HistoryReader(_write(tmp_history_file, "{:type :ok, :f :read}\n"))
        with pytest.raises(ParseError, match=":1:.*missing required keys"):
            reader.read_operations()


class TestDirectives:
    """Test directive parsing and metadata."""

    def test_read_all(self, tmp_history_file: Path) -> None:
        data = HistoryReader(_write(tmp_history_file, SIMPLE)).read_all()
        assert data.metadata.model == "fifo-queue"
        assert data.metadata.checkers == ("total-queue", "queue")
        assert data.metadata.processes == frozenset({0, 1})
        assert data.metadata.operation_count == 3
        assert len(data.operations) == 3

    def test_no_directives(self, tmp_history_file: Path) -> None:
        text = "{:process 0, :type :invoke, :f :read}\n"
        meta = HistoryReader(_write(tmp_history_file, text)).read_metadata()
        assert meta.model is None
        assert meta.checkers == ()

    def test_fixture_directives(self, histories_dir: Path) -> None:
        meta = HistoryReader(histories_dir / "queue_recovered.edn").read_metadata()
        assert meta.model == "unordered-queue"
        assert meta.checkers == ("total-queue", "queue")
        assert meta.operation_count == 8


class TestValidate:
    """Test the non-raising validation pass."""

    def test_valid(self, tmp_history_file: Path) -> None:
        assert HistoryReader(_write(tmp_history_file, SIMPLE)).validate() == []

    def test_missing_file(self, tmp_path: Path) -> None:
        errors = HistoryReader(tmp_path / "absent.edn").validate()
        assert errors and "not found" in errors[0]

    def test_reports_every_bad_line(self, tmp_history_file: Path) -> None:
        text = "[1]\n{:process 0, :type :invoke, :f :read}\n{:x\n"
        errors = HistoryReader(_write(tmp_history_file, text)).validate()
        assert len(errors) == 2
        assert errors[0].startswith("line 1:")
        assert errors[1].startswith("line 3:")

    def test_reports_invariant_violation(self, histories_dir: Path) -> None:
        errors = HistoryReader(histories_dir / "overlapping.edn").validate()
        assert len(errors) == 1
        assert "already running" in errors[0]
