import typer

from sas_log_diagnostics.cli.parse import parse
from sas_log_diagnostics.cli.wrap import wrap

app = typer.Typer(
    name="sas-log-diagnostics",
    help="Turn SAS execution logs into editor diagnostics.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.command("parse")(parse)
app.command("wrap")(wrap)


def main() -> None:
    app()
