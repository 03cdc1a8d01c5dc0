import logging
import os

from pydantic import BaseModel

_TRUTHY = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    log_level: str = "WARNING"
    html_style: str = ""
    output_html: bool = False


def get_settings() -> Settings:
    return Settings(
        log_level=os.getenv("SAS_LOG_DIAGNOSTICS_LOG_LEVEL", "WARNING").upper(),
        html_style=os.getenv("SAS_LOG_DIAGNOSTICS_HTML_STYLE", ""),
        output_html=os.getenv("SAS_LOG_DIAGNOSTICS_OUTPUT_HTML", "").strip().lower() in _TRUTHY,
    )


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=level or get_settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
