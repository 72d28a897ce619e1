"""Per-user configuration: data directory, API key and system preamble."""

from __future__ import annotations

import os
from importlib import resources
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_DATA_DIR = Path.home() / ".h-data"
API_KEY_ENV = "OPENAI_API_KEY"
API_KEY_FILENAME = "openai_key"
DEFAULT_MODEL = "gpt-4"


def data_dir(environ: Optional[Mapping[str, str]] = None) -> Path:
    environ = os.environ if environ is None else environ
    override = environ.get("H_DATA_DIR")
    return Path(override).expanduser() if override else DEFAULT_DATA_DIR


def ensure_data_dir(path: Path) -> Path:
    """Create the data directory on first run; an existing one is fine."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def resolve_api_key(
    directory: Path, environ: Optional[Mapping[str, str]] = None
) -> Optional[str]:
    """Return the API key from the environment, else from the key file.

    ``None`` means neither source produced a non-empty value.
    """
    environ = os.environ if environ is None else environ
    api_key = (environ.get(API_KEY_ENV) or "").strip()
    if api_key:
        return api_key

    key_path = directory / API_KEY_FILENAME
    if key_path.is_file():
        api_key = key_path.read_text(encoding="utf-8").strip()
    return api_key or None


def load_preamble() -> str:
    """Read the system preamble shipped with the package."""
    return resources.files("h_cli").joinpath("prompt.md").read_text(encoding="utf-8")
