"""
Tests for the counter checker.

Tests cover bound tracking for concurrent adds and reads, the
treatment of failed and indeterminate adds, error reporting, and the
rejection of negative increments.
"""

import pytest

from histcheck.core.counter import CounterChecker
from histcheck.core.operation import Operation


def _op(process, type_, f, value=None) -> Operation:
    return Operation(process=process, type=type_, f=f, value=value)


class TestCounterBounds:
    """Test read bound tracking."""

    def test_empty_history(self) -> None:
        report = CounterChecker().check(None, None, [])
        assert report == {"valid": True, "reads": [], "errors": []}

    def test_sequential_add_then_read(self) -> None:
        history = [
            _op(0, "invoke", "add", 5),
            _op(0, "ok", "add", 5),
            _op(1, "invoke", "read"),
            _op(1, "ok", "read", 5),
        ]
        report = CounterChecker().check(None, None, history)
        assert report["reads"] == [[5, 5, 5]]
        assert report["valid"] is True

    def test_concurrent_add_and_read(self) -> None:
        history = [
            _op(0, "invoke", "add", 5),
            _op(1, "invoke", "read"),
            _op(1, "ok", "read", 0),
            _op(0, "ok", "add", 5),
        ]
        report = CounterChecker().check(None, None, history)
        assert report["reads"] == [[0, 0, 5]]
        assert report["valid"] is True

    def test_read_above_upper_bound(self) -> None:
        history = [
            _op(0, "invoke", "add", 5),
            _op(1, "invoke", "read"),
            _op(1, "ok", "read", 7),
            _op(0, "ok", "add", 5),
        ]
        report = CounterChecker().check(None, None, history)
        assert report["valid"] is False
        assert report["errors"] == [[0, 7, 5]]

    def test_read_below_lower_bound(self) -> None:
        history = [
            _op(0, "invoke", "add", 3),
            _op(0, "ok", "add", 3),
            _op(1, "invoke", "read"),
            _op(1, "ok", "read", 2),
        ]
        report = CounterChecker().check(None, None, history)
        assert report["errors"] == [[3, 2, 3]]

    def test_upper_bound_taken_at_completion(self) -> None:
        """Adds invoked while the read is outstanding widen its upper bound."""
        history = [
            _op(1, "invoke", "read"),
            _op(0, "invoke", "add", 4),
            _op(1, "ok", "read", 4),
        ]
        report = CounterChecker().check(None, None, history)
        assert report["reads"] == [[0, 4, 4]]
        assert report["valid"] is True

    def test_lower_bound_taken_at_invoke(self) -> None:
        """Adds acknowledged while the read is outstanding do not raise its floor."""
        history = [
            _op(0, "invoke", "add", 4),
            _op(1, "invoke", "read"),
            _op(0, "ok", "add", 4),
            _op(1, "ok", "read", 0),
        ]
        report = CounterChecker().check(None, None, history)
        assert report["reads"] == [[0, 0, 4]]

    def test_failed_add_still_widens_upper(self) -> None:
        history = [
            _op(0, "invoke", "add", 2),
            _op(0, "fail", "add", 2),
            _op(1, "invoke", "read"),
            _op(1, "ok", "read", 0),
        ]
        report = CounterChecker().check(None, None, history)
        assert report["reads"] == [[0, 0, 2]]

    def test_info_add_never_raises_lower(self) -> None:
        history = [
            _op(0, "invoke", "add", 2),
            _op(0, "info", "add", 2),
            _op(1, "invoke", "read"),
            _op(1, "ok", "read", 2),
            _op(1, "invoke", "read"),
            _op(1, "ok", "read", 0),
        ]
        report = CounterChecker().check(None, None, history)
        assert report["reads"] == [[0, 2, 2], [0, 0, 2]]
        assert report["valid"] is True

    def test_read_uses_returned_value(self) -> None:
        """A value on the read invocation does not mask what the read returned."""
        history = [
            _op(0, "invoke", "add", 10),
            _op(0, "ok", "add", 10),
            _op(1, "invoke", "read", 0),
            _op(1, "ok", "read", 10),
        ]
        report = CounterChecker().check(None, None, history)
        assert report["reads"] == [[10, 10, 10]]
        assert report["valid"] is True

    def test_add_amount_taken_from_invocation(self) -> None:
        history = [
            _op(0, "invoke", "add", 3),
            _op(0, "ok", "add"),
            _op(1, "invoke", "read"),
            _op(1, "ok", "read", 3),
        ]
        report = CounterChecker().check(None, None, history)
        assert report["reads"] == [[3, 3, 3]]

    def test_unfinished_read_not_recorded(self) -> None:
        history = [_op(1, "invoke", "read"), _op(0, "invoke", "add", 1)]
        report = CounterChecker().check(None, None, history)
        assert report["reads"] == []

    def test_failed_read_not_recorded(self) -> None:
        history = [_op(1, "invoke", "read"), _op(1, "fail", "read")]
        assert CounterChecker().check(None, None, history)["reads"] == []

    def test_errors_subset_of_reads(self) -> None:
        history = [
            _op(0, "invoke", "add", 1),
            _op(0, "ok", "add", 1),
            _op(1, "invoke", "read"),
            _op(1, "ok", "read", 1),
            _op(1, "invoke", "read"),
            _op(1, "ok", "read", 9),
        ]
        report = CounterChecker().check(None, None, history)
        assert report["reads"] == [[1, 1, 1], [1, 9, 1]]
        assert report["errors"] == [[1, 9, 1]]


class TestCounterInputs:
    """Test unsupported inputs."""

    def test_negative_increment_raises(self) -> None:
        history = [_op(0, "invoke", "add", -1), _op(0, "ok", "add", -1)]
        with pytest.raises(ValueError, match="non-negative"):
            CounterChecker().check(None, None, history)

    def test_history_not_modified(self) -> None:
        history = [_op(1, "invoke", "read"), _op(1, "ok", "read", 0)]
        CounterChecker().check(None, None, history)
        assert history[0].value is None
