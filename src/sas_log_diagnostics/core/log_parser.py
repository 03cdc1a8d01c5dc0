import logging
import re
from collections.abc import Sequence

from pydantic import BaseModel

from sas_log_diagnostics.core.problem_processor import (
    ProblemProcessor,
    decompose_code_log_line,
    is_source_code_line_after_line_wrapping,
)
from sas_log_diagnostics.models import LocationOffset, LogLine, LogLineType, Problem

logger = logging.getLogger(__name__)

# "ERROR 22-322: Syntax error, expecting one of the following: ;, CANCEL, "
# "WARNING: Variable POP_100 not found in data set WORK.UNIVOUT."
_PROBLEM_BEGINNING_RE = re.compile(r"^(?:error|warning)(?:\s*\d+-\d+)?:\s", re.IGNORECASE)
# "            -------                            -"
_LOCATION_INDICATOR_RE = re.compile(r"^\s*[-_]+[-_\s]*$")
# "            22                                 79"
_PROBLEM_NUMBER_LINE_RE = re.compile(r"^\s*\d+[\d\s]*$")
_EMPTY_CODE_LOG_LINE_RE = re.compile(r"^\d+\s*$")
# Keeps the spacing between the line number and the code, which the column offset is measured over.
_ECHOED_CODE_RE = re.compile(r"^(?P<line_num>\d+)!?(?P<code>\s*.*)")
_WORD_RE = re.compile(r"\w")

_PROBLEM_RELATED_TYPES = frozenset({LogLineType.ERROR, LogLineType.WARNING, LogLineType.SOURCE})


class LogParseReport(BaseModel):
    """Problems found in a log plus whether the start of the run could be located at all."""

    problems: list[Problem]
    marker_found: bool
    batches: int = 0


def _echoed_code(log_line: str) -> tuple[int, str] | None:
    match = _ECHOED_CODE_RE.match(log_line)
    if match is None:
        return None
    return int(match.group("line_num")), match.group("code")


def _filter_latest_logs(logs: Sequence[LogLine], first_code_line: str) -> list[LogLine]:
    """Drop everything logged before the last echo of the first submitted line."""
    marker = first_code_line.strip()
    beginning_index = -1
    for index, log_line in enumerate(logs):
        if log_line.type != LogLineType.SOURCE:
            continue
        decomposed = decompose_code_log_line(log_line.line)
        if decomposed is not None and decomposed[1].strip() == marker:
            beginning_index = index
    return [] if beginning_index == -1 else list(logs[beginning_index:])


def calculate_location_offset(code_log_line: str, first_code_line: str) -> LocationOffset:
    """Derive the log-to-wrapped-code offset from the echo of the first submitted line."""
    echoed = _echoed_code(code_log_line)
    if echoed is None:
        return LocationOffset(line_offset=0, column_offset=0)
    line_number, code = echoed

    first_in_code = _WORD_RE.search(first_code_line)
    first_in_log = _WORD_RE.search(code)
    column_offset = (
        (first_in_log.start() if first_in_log else -1)
        - (first_in_code.start() if first_in_code else -1)
        + len(str(line_number))
    )
    return LocationOffset(line_offset=line_number, column_offset=column_offset)


def is_problem_beginning_log_line(line: str) -> bool:
    return _PROBLEM_BEGINNING_RE.match(line) is not None


def is_location_indicator_log_line(line: str) -> bool:
    return _LOCATION_INDICATOR_RE.match(line) is not None


def is_problem_number_log_line(line: str) -> bool:
    return _PROBLEM_NUMBER_LINE_RE.match(line) is not None


def is_empty_code_log_line(line: str) -> bool:
    return _EMPTY_CODE_LOG_LINE_RE.match(line) is not None


def parse_log_report(logs: Sequence[LogLine], first_code_line: str) -> LogParseReport:
    """Extract problems from the log of one completed execution.

    Coordinates of the returned problems are relative to the submitted code:
    line 0 is ``first_code_line`` and column 0 is its first column.
    """
    if not logs or first_code_line.strip() == "":
        return LogParseReport(problems=[], marker_found=False)

    latest_logs = _filter_latest_logs(logs, first_code_line)
    if not latest_logs:
        logger.info("Start of submitted code not found in %d log line(s)", len(logs))
        return LogParseReport(problems=[], marker_found=False)

    offset = calculate_location_offset(latest_logs[0].line, first_code_line)
    problem_related_logs = [log_line for log_line in latest_logs if log_line.type in _PROBLEM_RELATED_TYPES]

    problems: list[Problem] = []
    processor = ProblemProcessor()
    previous_source_code_line = ""
    batches = 0

    for log_line in problem_related_logs:
        line = log_line.line
        if log_line.type == LogLineType.SOURCE:
            if is_empty_code_log_line(line):
                continue
            if processor.is_ready() and line.strip() != previous_source_code_line.strip():
                problems.extend(processor.process_problems(offset))
                batches += 1
                carried_lines = processor.source_code_lines if is_source_code_line_after_line_wrapping(line) else None
                processor = ProblemProcessor(carried_lines, processor.unclaimed_locations)
            processor.set_source_code_line(line)
            previous_source_code_line = line
        elif is_problem_beginning_log_line(line):
            processor.add_problem_log_line(log_line)
        elif is_location_indicator_log_line(line):
            processor.add_location_indicator_log_line(log_line)
        elif is_problem_number_log_line(line):
            processor.add_problem_number_log_line(log_line)
        else:
            processor.append_problem_log_line(log_line)

    if processor.is_ready():
        problems.extend(processor.process_problems(offset))
        batches += 1

    logger.debug("Parsed %d problem(s) in %d batch(es)", len(problems), batches)
    return LogParseReport(problems=problems, marker_found=True, batches=batches)


def parse_log(logs: Sequence[LogLine], first_code_line: str) -> list[Problem]:
    return parse_log_report(logs, first_code_line).problems
