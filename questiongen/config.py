"""Environment-driven settings for template lookup, output folders and fonts.

Values are read once at import time after loading an optional ``.env`` file.
Paths stay relative so they resolve against the working directory of the
process that performs the generation, not the directory it was imported from.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

from .exceptions import ConfigurationError
from .utils.debug import warn

load_dotenv(override=False)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        warn(f"Invalid {name} '{raw}'; falling back to {default}")
        return default


TEMPLATE_DIR = Path(os.getenv("QGEN_TEMPLATE_DIR", "Question"))
MCQ_TEMPLATE_NAME = os.getenv("QGEN_MCQ_TEMPLATE", "McqSample.docx")
SAQ_TEMPLATE_NAME = os.getenv("QGEN_SAQ_TEMPLATE", "SaqSample.docx")

OUTPUT_DIR = Path(os.getenv("QGEN_OUTPUT_DIR", "Generated"))
UPLOAD_DIR = Path(os.getenv("QGEN_UPLOAD_DIR", "Uploads"))
RETENTION_MINUTES = _env_int("QGEN_RETENTION_MINUTES", 5)

LATIN_FONT = os.getenv("QGEN_LATIN_FONT", "Calibri")
LATIN_LANG = os.getenv("QGEN_LATIN_LANG", "en-US")
NATIVE_FONT = os.getenv("QGEN_NATIVE_FONT", "SutonnyMJ")
NATIVE_LANG = os.getenv("QGEN_NATIVE_LANG", "bn-BD")

APPLICATION_NAME = os.getenv("QGEN_APPLICATION_NAME", "Microsoft Office Word")

TEMPLATE_NAMES = {
    "mcq": MCQ_TEMPLATE_NAME,
    "saq": SAQ_TEMPLATE_NAME,
}


def template_path(mode: str) -> Path:
    """Return the sample package for ``mode``, failing if it is absent."""
    try:
        name = TEMPLATE_NAMES[mode]
    except KeyError:
        raise ConfigurationError(f"Unknown generation mode: {mode}") from None
    base = TEMPLATE_DIR if TEMPLATE_DIR.is_absolute() else Path.cwd() / TEMPLATE_DIR
    path = base / name
    if not path.is_file():
        raise ConfigurationError(f"{name} not found at '{path}'")
    return path


def resolve_dir(path: Path) -> Path:
    return path if path.is_absolute() else Path.cwd() / path
