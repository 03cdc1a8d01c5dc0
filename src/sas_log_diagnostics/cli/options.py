"""Options shared by the commands that rebuild a submission."""

from pathlib import Path
from typing import Annotated

import typer

from sas_log_diagnostics.config import get_settings
from sas_log_diagnostics.core.code_document import CodeDocument
from sas_log_diagnostics.core.languages import resolve_language
from sas_log_diagnostics.core.log_files import parse_selection
from sas_log_diagnostics.models import CodeMetadata, WrapOptions

CodeOption = Annotated[Path, typer.Option("--code", help="Source file that was submitted.")]
LanguageOption = Annotated[
    str | None, typer.Option(help="Language of the source (sas, sql, python). Detected from the file by default.")
]
SelectionOption = Annotated[
    list[str] | None,
    typer.Option("--selection", help="Submitted selection as 'line:char-line:char', zero-based. Repeatable."),
]
PreambleOption = Annotated[str | None, typer.Option(help="Code submitted before the user's code.")]
PostambleOption = Annotated[str | None, typer.Option(help="Code submitted after the user's code.")]
ProgramFileOption = Annotated[
    str | None, typer.Option("--program-file", help="Value assigned to _SASPROGRAMFILE, if it was set.")
]
OutputHtmlOption = Annotated[
    bool,
    typer.Option("--output-html", help="ODS HTML5 output wrapping was enabled (also SAS_LOG_DIAGNOSTICS_OUTPUT_HTML)."),
]
UuidOption = Annotated[str | None, typer.Option(help="Result file id used in the ODS HTML5 body= option.")]


def build_document(
    code: Path,
    language: str | None,
    selections: list[str] | None,
    preamble: str | None,
    postamble: str | None,
    program_file: str | None,
    output_html: bool,
    uuid: str | None,
) -> CodeDocument:
    settings = get_settings()
    source = code.read_text(encoding="utf-8")
    line_count = len(source.split("\n"))
    parsed_selections = []
    for value in selections or []:
        selection = parse_selection(value)
        if max(selection.start.line, selection.end.line) >= line_count:
            raise ValueError(f"Selection '{value}' is outside the document ({line_count} lines)")
        parsed_selections.append(selection)

    metadata = CodeMetadata(
        language_id=resolve_language(language, code),
        code=source,
        uri=code.resolve().as_uri(),
        file_name=program_file,
    )
    options = WrapOptions(
        selections=parsed_selections,
        preamble=preamble,
        postamble=postamble,
        output_html=output_html or settings.output_html,
        html_style=settings.html_style,
        uuid=uuid,
    )
    return CodeDocument(metadata, options)
