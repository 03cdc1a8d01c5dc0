import re

from sas_log_diagnostics.models import CodeMetadata, WrapOptions

_PROGRAM_FILE_SPECIAL_CHARS_RE = re.compile(r"""[('")]""")
_OUTPUT_HTML_FILE_NAME_RE = re.compile(r'body="(.{8}-.{4}-.{4}-.{4}-.{12})\.htm"')


def wrap_sql(code: str) -> str:
    return f"proc sql;\n{code}\n;quit;"


def wrap_python(code: str) -> str:
    return f"proc python;\nsubmit;\n{code}\nendsubmit;\nrun;"


def wrap_with_program_file_name(code: str, file_name: str | None) -> str:
    if file_name is None:
        return code
    escaped = _PROGRAM_FILE_SPECIAL_CHARS_RE.sub(lambda match: "%" + match.group(), file_name)
    return f"%let _SASPROGRAMFILE = %nrquote(%nrstr({escaped}));\n{code}"


def wrap_with_preamble_and_postamble(code: str, preamble: str | None = None, postamble: str | None = None) -> str:
    return (f"{preamble}\n" if preamble else "") + code + (f"\n{postamble}" if postamble else "")


def wrap_with_output_html(code: str, options: WrapOptions) -> str:
    if not options.output_html:
        return code

    html_style = options.html_style.strip()
    style_option = f" style={html_style}" if html_style else ""
    destination = f' body="{options.uuid}.htm"' if options.uuid else ""
    return (
        "title;footnote;ods _all_ close;\n"
        "ods graphics on;\n"
        f"ods html5{style_option} options(bitmap_mode='inline' svg_mode='inline'){destination};\n"
        f"{code}\n"
        ";*';*\";*/;run;quit;ods html5 close;"
    )


def wrap_code(code: str, metadata: CodeMetadata, options: WrapOptions) -> str:
    """Apply every wrapper used at submission time, innermost first."""
    wrapped = code
    if metadata.language_id == "sql":
        wrapped = wrap_sql(wrapped)
    elif metadata.language_id == "python":
        wrapped = wrap_python(wrapped)

    wrapped = wrap_with_program_file_name(wrapped, metadata.file_name)
    wrapped = wrap_with_preamble_and_postamble(wrapped, options.preamble, options.postamble)
    return wrap_with_output_html(wrapped, options)


def extract_output_html_file_name(line: str, default: str) -> str:
    match = _OUTPUT_HTML_FILE_NAME_RE.search(line)
    return match.group(1) if match else default
