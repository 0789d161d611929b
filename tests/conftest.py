"""
Shared pytest fixtures for the histcheck test suite.

Provides reusable fixtures for process identifiers and the file paths
used across unit and integration tests.
"""

from pathlib import Path

import pytest


@pytest.fixture
def two_processes() -> tuple[int, int]:
    """A standard pair of client process identifiers."""
    return (0, 1)


@pytest.fixture
def tmp_history_file(tmp_path: Path) -> Path:
    """Path for a temporary history file."""
    return tmp_path / "history.edn"


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def histories_dir(fixtures_dir: Path) -> Path:
    """Path to the test history fixtures directory."""
    return fixtures_dir / "histories"
