"""Map positions in the submitted (wrapped) code back to the user's document.

The code sent to the engine is not what the user sees: selections are
concatenated and boilerplate is added around them. ``CodeDocument`` keeps the
submission parameters and answers where a wrapped-code line came from.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sas_log_diagnostics.core.code_wrapping import wrap_code
from sas_log_diagnostics.core.ports.wrapper import CodeWrapper
from sas_log_diagnostics.models import (
    CodeMetadata,
    LocationOffset,
    Position,
    Problem,
    ProblemLocation,
    Selection,
    WrapOptions,
)

logger = logging.getLogger(__name__)

FRONT_LOCATOR = "LOCATOR-TO-MARK-THE-BEGIN-OF-USER-CODE"


def text_in_selection(code: str, selection: Selection) -> str:
    lines = code.split("\n")
    start, end = selection.start, selection.end
    if start.line == end.line:
        return lines[start.line][start.character : end.character]
    parts = [lines[start.line][start.character :], *lines[start.line + 1 : end.line], lines[end.line][: end.character]]
    return "\n".join(parts)


def whole_document_selection(code: str) -> Selection:
    lines = code.split("\n")
    return Selection(start=Position(line=0, character=0), end=Position(line=len(lines) - 1, character=len(lines[-1])))


class CodeDocument:
    def __init__(
        self,
        metadata: CodeMetadata,
        options: WrapOptions | None = None,
        wrapper: CodeWrapper | None = None,
    ) -> None:
        self._metadata = metadata
        self._options = options or WrapOptions()
        self._wrapper = wrapper or (lambda code: wrap_code(code, self._metadata, self._options))
        self._offset_map: dict[int, LocationOffset] | None = None

        selections = [selection for selection in self._options.selections if not selection.is_empty]
        selected_code = "\n".join(text_in_selection(metadata.code, selection) for selection in selections)
        if selected_code.strip() == "":
            self._selections = [whole_document_selection(metadata.code)]
            self._raw_code = metadata.code
        else:
            self._selections = selections
            self._raw_code = selected_code

    @property
    def uri(self) -> str | None:
        return self._metadata.uri

    @property
    def raw_code(self) -> str:
        """The selected code, or the whole document when nothing is selected."""
        return self._raw_code

    @property
    def selections(self) -> list[Selection]:
        return list(self._selections)

    def wrapped_code(self) -> str:
        return "" if self._raw_code.strip() == "" else self._wrapper(self._raw_code)

    def wrapped_code_line_at(self, line_number: int) -> str:
        lines = self.wrapped_code().split("\n")
        return lines[line_number] if 0 <= line_number < len(lines) else ""

    def raw_code_begin_line_number(self) -> int:
        """Return the wrapped-code line on which the user's code starts."""
        wrapped = self._wrapper(FRONT_LOCATOR + self._raw_code)
        for index, line in enumerate(wrapped.split("\n")):
            if FRONT_LOCATOR in line:
                return index
        return -1

    def offset_map(self) -> dict[int, LocationOffset]:
        if self._offset_map is None:
            self._offset_map = self._construct_offset_map()
        return self._offset_map

    def raw_code_offset_for(self, line_number_in_wrapped_code: int) -> LocationOffset | None:
        return self.offset_map().get(line_number_in_wrapped_code)

    def location_in_raw_code(self, line_number: int, start_column: int, end_column: int) -> ProblemLocation:
        """Translate a wrapped-code span into the document, clamping spans outside the user's code."""
        offset_map = self.offset_map()
        offset = offset_map.get(line_number)
        if offset is not None:
            return ProblemLocation(
                line_number=line_number + offset.line_offset,
                start_column=start_column + offset.column_offset,
                end_column=end_column + offset.column_offset,
            )

        if not offset_map or line_number < min(offset_map):
            logger.debug("Clamping wrapped line %d to the start of the document", line_number)
            return ProblemLocation(line_number=0, start_column=0, end_column=1)

        last_wrapped_line = max(offset_map)
        last_offset = offset_map[last_wrapped_line]
        last_line = last_wrapped_line + last_offset.line_offset
        if len(self._selections) == 1:
            last_column = self._selections[0].end.character
        else:
            last_column = last_offset.column_offset + len(self._raw_code.split("\n")[-1])
        logger.debug("Clamping wrapped line %d to the end of raw line %d", line_number, last_line)
        return ProblemLocation(line_number=last_line, start_column=max(last_column - 1, 0), end_column=last_column)

    def reconcile(self, problems: Iterable[Problem]) -> list[Problem]:
        """Rewrite problem coordinates in place from wrapped code to the document."""
        reconciled = []
        for problem in problems:
            location = self.location_in_raw_code(problem.line_number, problem.start_column, problem.end_column)
            problem.line_number = location.line_number or 0
            problem.start_column = location.start_column or 0
            problem.end_column = location.end_column or 0
            reconciled.append(problem)
        return reconciled

    def _construct_offset_map(self) -> dict[int, LocationOffset]:
        line_number_in_code_to_run = self.raw_code_begin_line_number()
        offset_map: dict[int, LocationOffset] = {}
        for selection in self._selections:
            start, end = selection.start, selection.end
            for raw_line in range(start.line, end.line + 1):
                offset_map[line_number_in_code_to_run] = LocationOffset(
                    line_offset=raw_line - line_number_in_code_to_run,
                    column_offset=start.character if raw_line == start.line else 0,
                )
                line_number_in_code_to_run += 1
        return offset_map
