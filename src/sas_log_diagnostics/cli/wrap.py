import typer
from rich.console import Console

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

console = Console()
err_console = Console(stderr=True)


def wrap(
    code: CodeOption,
    language: LanguageOption = None,
    selection: SelectionOption = None,
    preamble: PreambleOption = None,
    postamble: PostambleOption = None,
    program_file: ProgramFileOption = None,
    output_html: OutputHtmlOption = False,
    uuid: UuidOption = None,
) -> None:
    """Print the code as it would be submitted, with its offset map."""
    try:
        document = build_document(code, language, selection, preamble, postamble, program_file, output_html, uuid)
    except (OSError, ValueError) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from None

    typer.echo(document.wrapped_code())
    for wrapped_line, offset in sorted(document.offset_map().items()):
        err_console.print(
            f"[dim]wrapped {wrapped_line} -> raw {wrapped_line + offset.line_offset} "
            f"(column +{offset.column_offset})[/dim]",
        )

