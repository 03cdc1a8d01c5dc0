"""Accumulate problems and location annotations for one batch of log lines.

A batch is one or more consecutive problems together with the source echoes and
location lines that precede them. For example, the log snippet::

    65       call call symputx('mac', quote(strip(emple)));
                       -------                            -
                       22                                 79
                       68
                  ----
                  251
    ERROR 22-322: Syntax error, expecting one of the following: (, ;.
    ERROR 79-322: Expecting a ).
    ERROR 68-185: The function SYMPUTX is unknown, or cannot be accessed.
    ERROR 251-185: The subroutine CALL is unknown, or cannot be accessed.

holds one source line, two location groups (an indicator line plus the
problem-number lines beneath it) and four raw problems.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from sas_log_diagnostics.models import LocationOffset, LogLine, LogLineType, Problem, ProblemLocation, ProblemType

logger = logging.getLogger(__name__)

# "229  \ttitle 'Output Dataset From PROC UNIVARIATE';" or "232!      quit;ods html5 close;"
_CODE_LOG_LINE_RE = re.compile(r"^(?P<line_num>\d+)\s*!?(?P<code>\s*.*)")
# "8 !      ..." or "8!      ...", the engine's echo of a line that was too long for the log
_WRAPPED_CODE_LOG_LINE_RE = re.compile(r"^\d+\s*!\s")
_FIRST_CODE_CHAR_RE = re.compile(r"^\d+\s*!?\s*(?=[^\s!])")
_PROBLEM_NUMBER_RE = re.compile(r"^(?:error|warning)\s*(?P<number>\d+)-\d+:\s", re.IGNORECASE)
_INDICATOR_RE = re.compile(r"[-_]+")
_REVISED_INDICATOR_RE = re.compile(r"=[-_]*")
_NUMBER_RE = re.compile(r"\d+")


@dataclass
class RawProblem:
    type: ProblemType
    lines: list[str]
    problem_number: str | None = None

    @property
    def message(self) -> str:
        return " ".join(line.strip() for line in self.lines)


@dataclass
class RawLocationGroup:
    """An indicator line and the problem-number lines printed beneath it."""

    indicator_line: str
    problem_number_lines: list[str] = field(default_factory=list)


@dataclass
class RawLocationDesc:
    """All location groups printed under one (possibly wrapped) source line."""

    source_code_lines: list[str]
    raw_location_groups: list[RawLocationGroup] = field(default_factory=list)


@dataclass
class _MatchResult:
    problems: list[Problem]
    unprocessed_raw_problems: list[RawProblem]
    unclaimed_locations: list[ProblemLocation]


def decompose_code_log_line(code_line: str) -> tuple[int, str] | None:
    """Split an echoed source line into its log line number and code text."""
    match = _CODE_LOG_LINE_RE.match(code_line)
    if match is None:
        return None
    return int(match.group("line_num")), match.group("code")


def is_source_code_line_after_line_wrapping(log_line: str) -> bool:
    return _WRAPPED_CODE_LOG_LINE_RE.match(log_line) is not None


def problem_number_of(log_line: str) -> str | None:
    """Return ``"22"`` for ``"ERROR 22-322: ..."``, None for ``"WARNING: ..."``."""
    match = _PROBLEM_NUMBER_RE.match(log_line)
    return match.group("number") if match else None


class ProblemProcessor:
    """Single-owner accumulator for one batch of problems.

    ``legacy_locations`` are the locations a previous batch could not claim;
    they get a second chance against the problems of this batch.
    """

    def __init__(
        self,
        source_code_lines: list[str] | None = None,
        legacy_locations: list[ProblemLocation] | None = None,
    ) -> None:
        self._current_source_code_lines: list[str] = list(source_code_lines or [])
        self._legacy_locations: list[ProblemLocation] = list(legacy_locations or [])
        self._raw_location_descs: list[RawLocationDesc] = []
        self._raw_problems: list[RawProblem] = []
        self._unclaimed_locations: list[ProblemLocation] = []

    @property
    def source_code_lines(self) -> list[str]:
        return list(self._current_source_code_lines)

    @property
    def unclaimed_locations(self) -> list[ProblemLocation]:
        return list(self._unclaimed_locations)

    def is_ready(self) -> bool:
        return len(self._raw_problems) > 0

    def add_problem_log_line(self, log_line: LogLine) -> None:
        self._raw_problems.append(
            RawProblem(
                type="error" if log_line.type == LogLineType.ERROR else "warning",
                lines=[log_line.line],
                problem_number=problem_number_of(log_line.line),
            )
        )

    def append_problem_log_line(self, log_line: LogLine) -> None:
        if self._raw_problems:
            self._raw_problems[-1].lines.append(log_line.line)

    def add_location_indicator_log_line(self, log_line: LogLine) -> None:
        group = RawLocationGroup(indicator_line=log_line.line)
        last = self._raw_location_descs[-1] if self._raw_location_descs else None
        if last is not None and last.source_code_lines == self._current_source_code_lines:
            last.raw_location_groups.append(group)
            return
        self._raw_location_descs.append(
            RawLocationDesc(source_code_lines=list(self._current_source_code_lines), raw_location_groups=[group])
        )

    def add_problem_number_log_line(self, log_line: LogLine) -> None:
        if not self._raw_location_descs or not self._raw_location_descs[-1].raw_location_groups:
            return
        self._raw_location_descs[-1].raw_location_groups[-1].problem_number_lines.append(log_line.line)

    def set_source_code_line(self, new_source_code_line: str) -> None:
        """Record a source echo, merging it with the previous one when the log wrapped it."""
        if not self._current_source_code_lines:
            self._current_source_code_lines = [new_source_code_line]
            return

        last_source_code_line = self._current_source_code_lines[-1]
        if new_source_code_line.strip() == last_source_code_line.strip():
            return

        if not is_source_code_line_after_line_wrapping(new_source_code_line):
            self._current_source_code_lines = [new_source_code_line]
            return

        last_info = decompose_code_log_line(last_source_code_line)
        new_info = decompose_code_log_line(new_source_code_line)
        if last_info is None or new_info is None or last_info[0] != new_info[0]:
            self._current_source_code_lines = [new_source_code_line]
            return

        last_code = last_info[1].strip()
        new_code = new_info[1].strip()
        if not new_code:
            return

        if new_code in last_code or last_code in new_code:
            code_start = len(last_source_code_line) - len(last_info[1])
            begin_index = max(last_source_code_line.find(new_code[0], code_start), 0)
            self._current_source_code_lines[-1] = last_source_code_line[:begin_index] + new_code
        else:
            self._current_source_code_lines.append(new_source_code_line)

    def process_problems(self, offset: LocationOffset) -> list[Problem]:
        """Turn every accumulated raw problem into exactly one located problem."""
        general_raw_problems = [raw for raw in self._raw_problems if raw.problem_number is None]
        typed_raw_problems = [raw for raw in self._raw_problems if raw.problem_number is not None]

        problems = self._general_problems(general_raw_problems, offset)

        unprocessed: list[RawProblem] = []
        if self._raw_location_descs and typed_raw_problems:
            locations = _process_raw_location_descs(self._raw_location_descs, offset)
            result = _match_problems(locations, typed_raw_problems)
            problems.extend(result.problems)
            unprocessed = result.unprocessed_raw_problems
            self._unclaimed_locations.extend(result.unclaimed_locations)
        elif self._raw_location_descs:
            self._unclaimed_locations.extend(_process_raw_location_descs(self._raw_location_descs, offset))
        else:
            unprocessed = typed_raw_problems

        if unprocessed and self._legacy_locations:
            result = _match_problems(self._legacy_locations, unprocessed)
            problems.extend(result.problems)
            unprocessed = result.unprocessed_raw_problems

        if unprocessed:
            problems.extend(self._general_problems(unprocessed, offset))

        logger.debug(
            "Processed batch: %d problem(s), %d unclaimed location(s)",
            len(problems),
            len(self._unclaimed_locations),
        )
        return problems

    def _general_problems(self, raw_problems: list[RawProblem], offset: LocationOffset) -> list[Problem]:
        if not raw_problems:
            return []
        location = general_location(self._current_source_code_lines, offset)
        return [_to_problem(location, raw) for raw in raw_problems]


def _to_problem(location: ProblemLocation, raw_problem: RawProblem) -> Problem:
    return Problem(
        line_number=location.line_number,
        start_column=location.start_column,
        end_column=location.end_column,
        message=raw_problem.message,
        type=raw_problem.type,
    )


def _match_problems(locations: list[ProblemLocation], raw_problems: list[RawProblem]) -> _MatchResult:
    """Associate problem messages with locations.

    Locations are visited in row order. For each one, the search starts right
    after the raw problem last claimed for the same problem number and wraps
    around at the end, so one message can serve several locations.
    """
    problems: list[Problem] = []
    claimed: set[int] = set()
    last_found: dict[str, int] = {}
    unclaimed: list[ProblemLocation] = []
    count = len(raw_problems)

    for location in locations:
        number = location.problem_number
        found: int | None = None
        if number is not None and count:
            start = (last_found[number] + 1) % count if number in last_found else 0
            for step in range(count):
                index = (start + step) % count
                if raw_problems[index].problem_number == number:
                    found = index
                    break

        if found is None or number is None:
            unclaimed.append(location)
            continue

        last_found[number] = found
        claimed.add(found)
        problems.append(_to_problem(location, raw_problems[found]))

    unprocessed = [raw for index, raw in enumerate(raw_problems) if index not in claimed]
    return _MatchResult(problems=problems, unprocessed_raw_problems=unprocessed, unclaimed_locations=unclaimed)


def _locations_from_indicator_line(indicator_line: str) -> list[ProblemLocation]:
    # "    ----     ---      --"
    return [
        ProblemLocation(start_column=match.start(), end_column=match.end())
        for match in _INDICATOR_RE.finditer(indicator_line)
    ]


def _locations_from_problem_number_line(problem_number_line: str) -> list[ProblemLocation]:
    # "          22                                 79"
    return [
        ProblemLocation(start_column=match.start(), problem_number=match.group())
        for match in _NUMBER_RE.finditer(problem_number_line)
    ]


def _revise_locations_from_indicator_line(
    indicator_line: str, number_locations: list[ProblemLocation]
) -> list[ProblemLocation]:
    """Split one underline at every label column.

    Handles a single underline shared by several labels::

        _____
        1   22
    """
    chars = list(indicator_line)
    for location in number_locations:
        column = location.start_column or 0
        if column >= len(chars):
            chars.extend(" " * (column - len(chars) + 1))
        chars[column] = "="

    return [
        ProblemLocation(start_column=match.start(), end_column=match.end())
        for match in _REVISED_INDICATOR_RE.finditer("".join(chars))
    ]


def _adjust_appearance_order(locations: list[ProblemLocation]) -> list[ProblemLocation]:
    """Make locations sharing a start column and problem number contiguous.

    Two stacked label rows under the same columns::

        88            infile datalines dlm=#' dlm=#' dlm=#;
                                   _             _
                                   24            24
                                   24            24
    """
    ordered: list[ProblemLocation] = []
    taken = [False] * len(locations)
    for index, location in enumerate(locations):
        if taken[index]:
            continue
        for other in range(index, len(locations)):
            candidate = locations[other]
            if (
                not taken[other]
                and candidate.start_column == location.start_column
                and candidate.problem_number == location.problem_number
            ):
                taken[other] = True
                ordered.append(candidate)
    return ordered


def _process_raw_location_group(group: RawLocationGroup) -> list[ProblemLocation]:
    if not group.indicator_line or not group.problem_number_lines:
        return []

    indicator_locations = _locations_from_indicator_line(group.indicator_line)
    if not indicator_locations:
        return []

    number_locations = _locations_from_problem_number_line(group.problem_number_lines[0])
    if len(number_locations) > len(indicator_locations):
        indicator_locations = _revise_locations_from_indicator_line(group.indicator_line, number_locations)

    locations: list[ProblemLocation] = []
    for line in group.problem_number_lines:
        for number_location in _locations_from_problem_number_line(line):
            found = next(
                (span for span in indicator_locations if span.start_column == number_location.start_column),
                None,
            )
            if found is not None:
                locations.append(
                    ProblemLocation(
                        start_column=found.start_column,
                        end_column=found.end_column,
                        problem_number=number_location.problem_number,
                    )
                )

    return _adjust_appearance_order(locations)


def _source_code_position(source_code_lines: list[str], column_offset: int) -> tuple[int, int] | None:
    """Return the log line number and column correction of a (wrapped) source echo.

    When the echo spans several log lines and the problem sits on a later one,
    the lengths of the leading lines shift its columns.
    """
    if not source_code_lines:
        return None
    info = decompose_code_log_line(source_code_lines[0])
    if info is None:
        return None
    column_correction = sum(len(line) - column_offset + 1 for line in source_code_lines[:-1])
    return info[0], column_correction


def _process_raw_location_desc(desc: RawLocationDesc, offset: LocationOffset) -> list[ProblemLocation]:
    position = _source_code_position(desc.source_code_lines, offset.column_offset)
    if position is None:
        return []
    line_number, column_correction = position

    locations: list[ProblemLocation] = []
    for group in desc.raw_location_groups:
        for location in _process_raw_location_group(group):
            locations.append(
                location.model_copy(
                    update={
                        "line_number": line_number - offset.line_offset,
                        "start_column": (location.start_column or 0) - offset.column_offset + column_correction,
                        "end_column": (location.end_column or 0) - offset.column_offset + column_correction,
                    }
                )
            )
    return locations


def _process_raw_location_descs(descs: list[RawLocationDesc], offset: LocationOffset) -> list[ProblemLocation]:
    locations: list[ProblemLocation] = []
    for desc in descs:
        locations.extend(_process_raw_location_desc(desc, offset))
    return locations


def _first_code_character_index(log_line: str) -> int:
    # "8  ...", "8 !      ..." and "12!      ..."
    match = _FIRST_CODE_CHAR_RE.match(log_line)
    return -1 if match is None else match.end()


def general_location(source_code_lines: list[str], offset: LocationOffset) -> ProblemLocation:
    """Locate a problem without indicator annotations on the whole current source line."""
    info = decompose_code_log_line(source_code_lines[0]) if source_code_lines else None
    if info is None:
        return ProblemLocation(line_number=-1, start_column=-1, end_column=-1)

    line_number = info[0] - offset.line_offset
    whole_line = source_code_lines[0] + "".join(line[offset.column_offset :] for line in source_code_lines[1:])
    first_index = _first_code_character_index(whole_line)
    if first_index < 0:
        return ProblemLocation(line_number=line_number, start_column=0, end_column=0)

    start_column = first_index - offset.column_offset
    end_column = start_column + len(whole_line[first_index:].strip())
    return ProblemLocation(line_number=line_number, start_column=start_column, end_column=end_column)
