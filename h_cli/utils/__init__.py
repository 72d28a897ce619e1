from .ansi import (
    Ansi,
    ASSISTANT_LABEL,
    ERROR_LABEL,
    console,
    err_console,
)
from .editor import open_editor, prompt_file_path, sanitize_file_name
from .logging_setup import setup_file_logging
from .spinner import Spinner

__all__ = [
    "Ansi",
    "ASSISTANT_LABEL",
    "ERROR_LABEL",
    "console",
    "err_console",
    "open_editor",
    "prompt_file_path",
    "sanitize_file_name",
    "setup_file_logging",
    "Spinner",
]
