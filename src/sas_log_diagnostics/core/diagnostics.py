import logging
from collections.abc import Iterable, Sequence

from sas_log_diagnostics.core.code_document import CodeDocument
from sas_log_diagnostics.core.log_parser import LogParseReport, parse_log_report
from sas_log_diagnostics.models import Diagnostic, LogLine, Position, Problem

logger = logging.getLogger(__name__)


def collect_problems_report(logs: Sequence[LogLine], document: CodeDocument) -> LogParseReport:
    """Run the whole pipeline: extract problems from the log and move them into the document.

    Problems that still have a negative coordinate after reconciliation are dropped.
    """
    report = parse_log_report(logs, document.wrapped_code_line_at(0))
    if not report.problems:
        return report

    document.reconcile(report.problems)
    valid = [problem for problem in report.problems if problem.has_valid_location()]
    if len(valid) < len(report.problems):
        logger.debug("Dropped %d problem(s) without a valid location", len(report.problems) - len(valid))
    return report.model_copy(update={"problems": valid})


def collect_problems(logs: Sequence[LogLine], document: CodeDocument) -> list[Problem]:
    return collect_problems_report(logs, document).problems


def to_diagnostics(problems: Iterable[Problem]) -> list[Diagnostic]:
    return [
        Diagnostic(
            start=Position(line=problem.line_number, character=problem.start_column),
            end=Position(line=problem.line_number, character=problem.end_column),
            message=problem.message,
            severity=problem.type,
        )
        for problem in problems
    ]


class LogCollector:
    """Buffer the log chunks of one execution and diagnose them once it finishes.

    ``on_log`` has the shape of the session layer's log callback, so it can be
    chained after the callback that writes the log to the output channel.
    """

    def __init__(self, document: CodeDocument) -> None:
        self._document = document
        self._received: list[LogLine] = []
        self._finished = False

    @property
    def received(self) -> list[LogLine]:
        return list(self._received)

    def on_log(self, logs: Iterable[LogLine]) -> None:
        if self._finished:
            logger.debug("Ignoring log lines received after the execution finished")
            return
        self._received.extend(logs)

    def finish(self) -> list[Diagnostic]:
        self._finished = True
        return to_diagnostics(collect_problems(self._received, self._document))
