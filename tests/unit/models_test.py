"""Unit tests for Pydantic models."""

import pytest
from pydantic import ValidationError

from sas_log_diagnostics.models import LogLine, LogLineType, Position, Problem, Selection


class TestLogLineModel:
    """Tests for the LogLine model."""

    def test_parses_type_from_string(self) -> None:
        """Test that the type is read from its wire value."""
        log_line = LogLine.model_validate({"type": "source", "line": "1    data a;"})
        assert log_line.type is LogLineType.SOURCE

    def test_rejects_unknown_type(self) -> None:
        """Test that an unknown line type fails validation."""
        with pytest.raises(ValidationError):
            LogLine.model_validate({"type": "debug", "line": "x"})

    def test_is_frozen(self) -> None:
        """Test that log lines cannot be modified."""
        log_line = LogLine(type=LogLineType.NOTE, line="NOTE: ok.")
        with pytest.raises(ValidationError):
            log_line.line = "changed"  # type: ignore[misc]


class TestProblemModel:
    """Tests for the Problem model."""

    def test_valid_location(self) -> None:
        problem = Problem(line_number=0, start_column=0, end_column=3, message="ERROR: x.", type="error")
        assert problem.has_valid_location()

    def test_negative_coordinate_is_invalid(self) -> None:
        problem = Problem(line_number=-1, start_column=-1, end_column=-1, message="ERROR: x.", type="error")
        assert not problem.has_valid_location()

    def test_rejects_other_types(self) -> None:
        with pytest.raises(ValidationError):
            Problem.model_validate(
                {"line_number": 0, "start_column": 0, "end_column": 1, "message": "NOTE: x.", "type": "note"}
            )


class TestSelectionModel:
    """Tests for the Position and Selection models."""

    def test_position_rejects_negative_values(self) -> None:
        with pytest.raises(ValidationError):
            Position(line=-1, character=0)

    def test_empty_selection(self) -> None:
        cursor = Position(line=2, character=4)
        assert Selection(start=cursor, end=cursor).is_empty
        assert not Selection(start=cursor, end=Position(line=2, character=5)).is_empty
