from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ProblemType = Literal["error", "warning"]


class LogLineType(StrEnum):
    NORMAL = "normal"
    HILIGHTED = "hilighted"
    SOURCE = "source"
    TITLE = "title"
    BYLINE = "byline"
    FOOTNOTE = "footnote"
    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"
    MESSAGE = "message"


class LogLine(BaseModel):
    """One classified line of execution log, as delivered by the session layer."""

    model_config = ConfigDict(frozen=True)

    type: LogLineType
    line: str


class LocationOffset(BaseModel):
    """Difference between log (or wrapped-code) numbering and document numbering.

    The column offset covers the echoed line-number prefix and any tab
    expansion the engine applied; the line offset covers re-numbering.
    """

    model_config = ConfigDict(frozen=True)

    line_offset: int
    column_offset: int


class ProblemLocation(BaseModel):
    line_number: int | None = None
    start_column: int | None = None
    end_column: int | None = None
    problem_number: str | None = None


class Problem(BaseModel):
    line_number: int
    start_column: int
    end_column: int
    message: str
    type: ProblemType

    def has_valid_location(self) -> bool:
        return min(self.line_number, self.start_column, self.end_column) >= 0


class Position(BaseModel):
    model_config = ConfigDict(frozen=True)

    line: int = Field(ge=0)
    character: int = Field(ge=0)


class Selection(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: Position
    end: Position

    @property
    def is_empty(self) -> bool:
        return self.start == self.end


class CodeMetadata(BaseModel):
    language_id: str = "sas"
    code: str
    uri: str | None = None
    file_name: str | None = None


class WrapOptions(BaseModel):
    selections: list[Selection] = Field(default_factory=list)
    preamble: str | None = None
    postamble: str | None = None
    output_html: bool = False
    html_style: str = ""
    uuid: str | None = None


class Diagnostic(BaseModel):
    start: Position
    end: Position
    message: str
    severity: ProblemType
    source: str = "sas log"
