from pathlib import Path

DEFAULT_LANGUAGE = "sas"

# Editor language ids and the short names accepted on the command line.
_LANGUAGE_ALIASES = {
    "sas": "sas",
    "sql": "sql",
    "proc sql": "sql",
    "python": "python",
    "py": "python",
}

_EXTENSION_LANGUAGE_MAP = {
    ".sas": "sas",
    ".sql": "sql",
    ".py": "python",
}


def normalize_language(language: str) -> str:
    """Map a language id or alias to the id the code wrapper switches on."""
    try:
        return _LANGUAGE_ALIASES[language.strip().lower()]
    except KeyError:
        raise ValueError(f"Unsupported language '{language}'. Choose one of: sas, sql, python") from None


def detect_language_from_path(file_path: Path) -> str:
    """Anything that is not a known SQL or Python file is submitted as SAS code."""
    return _EXTENSION_LANGUAGE_MAP.get(file_path.suffix.lower(), DEFAULT_LANGUAGE)


def resolve_language(language: str | None, file_path: Path | None = None) -> str:
    if language:
        return normalize_language(language)
    return detect_language_from_path(file_path) if file_path is not None else DEFAULT_LANGUAGE
