import json
from pathlib import Path

from pydantic import ValidationError

from sas_log_diagnostics.models import LogLine, Position, Selection


def load_log_lines(path: str | Path) -> list[LogLine]:
    """Read a recorded log: one ``{"type": ..., "line": ...}`` JSON object per line."""
    log_path = Path(path)
    try:
        text = log_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise FileNotFoundError(f"Log file not found: {path}") from None

    logs: list[LogLine] = []
    for number, raw in enumerate(text.splitlines(), start=1):
        if not raw.strip():
            continue
        try:
            logs.append(LogLine.model_validate(json.loads(raw)))
        except (json.JSONDecodeError, ValidationError) as exc:
            raise ValueError(f"{log_path.name}:{number}: invalid log line") from exc
    return logs


def parse_selection(value: str) -> Selection:
    """Parse ``"line:character-line:character"`` (zero-based) into a selection."""
    try:
        start, end = value.split("-")
        start_line, start_character = (int(part) for part in start.split(":"))
        end_line, end_character = (int(part) for part in end.split(":"))
    except ValueError:
        raise ValueError(f"Invalid selection '{value}', expected 'line:character-line:character'") from None
    return Selection(
        start=Position(line=start_line, character=start_character),
        end=Position(line=end_line, character=end_character),
    )
