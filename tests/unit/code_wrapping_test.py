"""Unit tests for the code wrappers applied at submission time."""

from __future__ import annotations

import pytest

from sas_log_diagnostics.core.code_wrapping import (
    extract_output_html_file_name,
    wrap_code,
    wrap_with_preamble_and_postamble,
    wrap_with_program_file_name,
)
from sas_log_diagnostics.models import CodeMetadata, WrapOptions

UUID = "519058ad-d33b-4b5c-9d23-4cc8d6ffb163"
HTML_HEADER = (
    "title;footnote;ods _all_ close;\n"
    "ods graphics on;\n"
    "ods html5 style=Illuminate options(bitmap_mode='inline' svg_mode='inline') "
    f'body="{UUID}.htm";\n'
)
HTML_FOOTER = ";*';*\";*/;run;quit;ods html5 close;"


@pytest.fixture
def html_options() -> WrapOptions:
    return WrapOptions(output_html=True, html_style="Illuminate", uuid=UUID)


def test_wrap_python_code(html_options: WrapOptions) -> None:
    code = "python code\nselected python code"
    wrapped = wrap_code(code, CodeMetadata(language_id="python", code=code), html_options)
    assert wrapped == HTML_HEADER + f"proc python;\nsubmit;\n{code}\nendsubmit;\nrun;\n" + HTML_FOOTER


def test_wrap_sql_code(html_options: WrapOptions) -> None:
    code = "SELECT * FROM issues WHERE issue.developer = 'scnjdl'"
    wrapped = wrap_code(code, CodeMetadata(language_id="sql", code=code), html_options)
    assert wrapped == HTML_HEADER + f"proc sql;\n{code}\n;quit;\n" + HTML_FOOTER


def test_wrap_sas_code_with_program_file(html_options: WrapOptions) -> None:
    code = "proc sgplot data=sashelp.class;\n  histogram age;\nrun;"
    metadata = CodeMetadata(code=code, file_name="c:\\SAS\\TestData\\run.sas")
    wrapped = wrap_code(code, metadata, html_options)
    assert wrapped == (
        HTML_HEADER
        + "%let _SASPROGRAMFILE = %nrquote(%nrstr(c:\\SAS\\TestData\\run.sas));\n"
        + code
        + "\n"
        + HTML_FOOTER
    )


@pytest.mark.parametrize(
    ("file_name", "escaped"),
    [
        (
            "c:\\temp\\My Test\\R&D\\mean(95%CI)\\Parkinson's Disease example.sas",
            "c:\\temp\\My Test\\R&D\\mean%(95%CI%)\\Parkinson%'s Disease example.sas",
        ),
        (
            "/tmp/My Test/R&D/mean(95%CI)/Parkinson's Disease example.sas",
            "/tmp/My Test/R&D/mean%(95%CI%)/Parkinson%'s Disease example.sas",
        ),
        ('/tmp/say "hi".sas', '/tmp/say %"hi%".sas'),
    ],
    ids=["windows", "unix", "double-quote"],
)
def test_program_file_name_is_escaped(file_name: str, escaped: str) -> None:
    wrapped = wrap_with_program_file_name("%put &=_SASPROGRAMFILE;", file_name)
    assert wrapped == f"%let _SASPROGRAMFILE = %nrquote(%nrstr({escaped}));\n%put &=_SASPROGRAMFILE;"


def test_program_file_name_absent() -> None:
    assert wrap_with_program_file_name("data a; run;", None) == "data a; run;"


def test_preamble_and_postamble() -> None:
    assert wrap_with_preamble_and_postamble("data a;", "options nodate;", "run;") == "options nodate;\ndata a;\nrun;"
    assert wrap_with_preamble_and_postamble("data a;", "", None) == "data a;"


def test_plain_sas_code_is_unchanged() -> None:
    code = "data a;\nrun;"
    assert wrap_code(code, CodeMetadata(code=code), WrapOptions()) == code


def test_html_without_style_or_uuid() -> None:
    wrapped = wrap_code("data a;", CodeMetadata(code="data a;"), WrapOptions(output_html=True, html_style="  "))
    assert wrapped.split("\n")[2] == "ods html5 options(bitmap_mode='inline' svg_mode='inline');"


def test_preamble_sits_inside_html_wrapper(html_options: WrapOptions) -> None:
    options = html_options.model_copy(update={"preamble": "options nodate;"})
    lines = wrap_code("data a;", CodeMetadata(code="data a;"), options).split("\n")
    assert lines[3:5] == ["options nodate;", "data a;"]


def test_extract_output_html_file_name() -> None:
    assert extract_output_html_file_name(HTML_HEADER.split("\n")[2], "fallback") == UUID
    assert extract_output_html_file_name("ods html5;", "fallback") == "fallback"
