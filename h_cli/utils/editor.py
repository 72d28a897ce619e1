"""Compose a prompt in the user's ``$EDITOR``."""

from __future__ import annotations

import logging
import os
import re
import shlex
import subprocess
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple

from ..core.errors import ConfigurationError

log = logging.getLogger("h.cli")

PLACEHOLDER = "Replace this file with your prompt."

# Characters that are not safe in file names on common filesystems.
_UNSAFE_CHARS = re.compile(r'[/\\?%*:|"<>]')


def sanitize_file_name(text: str) -> str:
    return _UNSAFE_CHARS.sub("#", text).lower()


def prompt_file_path(directory: Path, prompt: str, now: Optional[datetime] = None) -> Path:
    """Return ``prompt_<timestamp>_<first five words>.txt`` inside *directory*."""
    now = now or datetime.now(timezone.utc)
    timestamp = now.strftime("%Y-%m-%dT%H-%M-%S-") + f"{now.microsecond // 1000:03d}Z"
    words = "-".join(sanitize_file_name(w) for w in prompt.split()[:5])
    return directory / f"prompt_{timestamp}_{words}.txt"


def open_editor(directory: Path, environ=None) -> Tuple[str, Path]:
    """Open the editor on a scratch file; return the saved text and its path.

    The file is kept under a name derived from its first words so earlier
    prompts can be found again.
    """
    environ = os.environ if environ is None else environ
    editor = environ.get("EDITOR") or "vi"
    scratch = prompt_file_path(directory, "")
    scratch.write_text(PLACEHOLDER, encoding="utf-8")

    log.debug("Opening %s on %s", editor, scratch)
    try:
        code = subprocess.call([*shlex.split(editor), str(scratch)])
    except OSError as exc:
        raise ConfigurationError(f"Could not start editor '{editor}': {exc}") from exc
    if code != 0:
        raise ConfigurationError(f"Editor exited with code: {code}")

    prompt = scratch.read_text(encoding="utf-8")
    saved = prompt_file_path(directory, prompt)
    scratch.replace(saved)
    return prompt, saved
