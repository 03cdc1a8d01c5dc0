"""Shared fixtures and helpers for tests."""

from collections.abc import Callable, Iterable
from pathlib import Path

import pytest

from sas_log_diagnostics.models import LogLine, LogLineType

_REPO_ROOT = Path(__file__).parent.parent

LogBuilder = Callable[[Iterable[tuple[str, str]]], list[LogLine]]


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Shared fixtures
# ---------------------------------------------------------------------------


def build_log(entries: Iterable[tuple[str, str]]) -> list[LogLine]:
    """Build classified log lines from ``(type, text)`` pairs."""
    return [LogLine(type=LogLineType(kind), line=text) for kind, text in entries]


@pytest.fixture
def make_log() -> LogBuilder:
    """Return a builder turning ``(type, text)`` pairs into log lines."""
    return build_log


@pytest.fixture
def symputx_log() -> list[LogLine]:
    """A log with two numbered errors underlined on one echoed source line.

    Code starts at column 11 of every echoed line.
    """
    return build_log(
        [
            ("normal", "NOTE: Log from a previous submission."),
            ("source", "1" + " " * 10 + "data a;"),
            ("source", "2" + " " * 12 + "call symputx('mac', x);"),
            ("error", " " * 18 + "-" * 7 + " " * 10 + "-"),
            ("error", " " * 18 + "22" + " " * 15 + "79"),
            ("error", "ERROR 22-322: Syntax error, expecting one of the following: (, ;."),
            ("error", "ERROR 79-322: Expecting a )."),
            ("source", "3" + " " * 10 + "run;"),
            ("note", "NOTE: The SAS System stopped processing this step because of errors."),
        ]
    )
