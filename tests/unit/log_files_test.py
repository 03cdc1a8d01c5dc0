"""Unit tests for reading recorded logs and selection arguments."""

import json
from pathlib import Path

import pytest

from sas_log_diagnostics.core.log_files import load_log_lines, parse_selection
from sas_log_diagnostics.models import LogLine, LogLineType, Position


def test_load_log_lines(tmp_path: Path) -> None:
    log_file = tmp_path / "run.log.jsonl"
    log_file.write_text(
        json.dumps({"type": "source", "line": "1    data a;"})
        + "\n\n"
        + json.dumps({"type": "error", "line": "ERROR: x."})
        + "\n",
        encoding="utf-8",
    )

    assert load_log_lines(log_file) == [
        LogLine(type=LogLineType.SOURCE, line="1    data a;"),
        LogLine(type=LogLineType.ERROR, line="ERROR: x."),
    ]


def test_missing_log_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="Log file not found"):
        load_log_lines(tmp_path / "missing.jsonl")


@pytest.mark.parametrize("content", ["not json", '{"type": "debug", "line": "x"}', '{"line": "x"}'])
def test_invalid_log_line_reports_position(tmp_path: Path, content: str) -> None:
    log_file = tmp_path / "bad.jsonl"
    log_file.write_text(json.dumps({"type": "note", "line": "NOTE: ok."}) + "\n" + content + "\n", encoding="utf-8")

    with pytest.raises(ValueError, match=r"bad\.jsonl:2: invalid log line"):
        load_log_lines(log_file)


def test_parse_selection() -> None:
    selection = parse_selection("2:4-3:5")
    assert selection.start == Position(line=2, character=4)
    assert selection.end == Position(line=3, character=5)


@pytest.mark.parametrize("value", ["2:4", "a:b-c:d", "1:2:3-4:5", "1-2"])
def test_parse_selection_rejects_bad_format(value: str) -> None:
    with pytest.raises(ValueError, match="Invalid selection"):
        parse_selection(value)
