import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from sas_log_diagnostics.cli.options import (
    CodeOption,
    LanguageOption,
    OutputHtmlOption,
    PostambleOption,
    PreambleOption,
    ProgramFileOption,
    SelectionOption,
    UuidOption,
    build_document,
)
from sas_log_diagnostics.config import configure_logging
from sas_log_diagnostics.core.diagnostics import collect_problems_report, to_diagnostics
from sas_log_diagnostics.core.log_files import load_log_lines
from sas_log_diagnostics.models import Diagnostic

console = Console()
err_console = Console(stderr=True)
logger = logging.getLogger(__name__)


def _render_table(diagnostics: list[Diagnostic]) -> None:
    table = Table(show_lines=False)
    for header in ("line", "start", "end", "severity", "message"):
        table.add_column(header)
    for diagnostic in diagnostics:
        color = "red" if diagnostic.severity == "error" else "yellow"
        table.add_row(
            str(diagnostic.start.line),
            str(diagnostic.start.character),
            str(diagnostic.end.character),
            f"[{color}]{diagnostic.severity}[/{color}]",
            diagnostic.message,
        )
    console.print(table)
    console.print(f"({len(diagnostics)} diagnostics)")


def parse(
    log_file: Annotated[Path, typer.Argument(help="Recorded log, one JSON object {type, line} per line.")],
    code: CodeOption,
    language: LanguageOption = None,
    selection: SelectionOption = None,
    preamble: PreambleOption = None,
    postamble: PostambleOption = None,
    program_file: ProgramFileOption = None,
    output_html: OutputHtmlOption = False,
    uuid: UuidOption = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print diagnostics as JSON.")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
) -> None:
    """Diagnose a recorded execution log against the code that produced it."""
    configure_logging("DEBUG" if verbose else None)
    try:
        logs = load_log_lines(log_file)
        document = build_document(code, language, selection, preamble, postamble, program_file, output_html, uuid)
    except (OSError, ValueError) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from None

    report = collect_problems_report(logs, document)
    if not report.marker_found:
        logger.info("Marker line %r not found in %s", document.wrapped_code_line_at(0), log_file)
        err_console.print("[yellow]Start of the submitted code was not found in the log.[/yellow]")

    diagnostics = to_diagnostics(report.problems)
    if as_json:
        typer.echo(json.dumps([diagnostic.model_dump() for diagnostic in diagnostics], indent=2))
    else:
        _render_table(diagnostics)
