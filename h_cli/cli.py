"""Command-line entry point: ask a question, print the answer.

The prompt comes from ``--prompt``, from piped stdin, or from ``$EDITOR``.
Every successful exchange is saved as the latest conversation so that
``--continue`` can pick it up on the next run.
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Mapping, Optional, TextIO

import questionary
from rich.markup import escape

from . import __version__
from .core import ConfigurationError, ConversationStore, HError, UnsupportedModelError
from .core.client import ChatClient, SUPPORTED_MODELS
from .core.config import (
    DEFAULT_MODEL,
    data_dir,
    ensure_data_dir,
    load_preamble,
    resolve_api_key,
)
from .utils import (
    ASSISTANT_LABEL,
    ERROR_LABEL,
    Ansi,
    Spinner,
    console,
    err_console,
    open_editor,
    setup_file_logging,
)

log = logging.getLogger("h.cli")

# ``-m`` given without a value asks for the model interactively.
PICK_MODEL = "?"


# ---------------------------------------------------------------------------
# Input helpers
# ---------------------------------------------------------------------------

def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="h",
        description="Query OpenAI chat models from the terminal.",
    )
    parser.add_argument(
        "--model", "-m",
        nargs="?",
        const=PICK_MODEL,
        help="Which GPT model to use (pass -m alone to pick from a list)",
    )
    parser.add_argument("--prompt", "-p", help="The prompt to send GPT")
    parser.add_argument(
        "--continue", "-c",
        dest="continue_",
        action="store_true",
        help="Continue from the last conversation",
    )
    parser.add_argument("--debug", action="store_true", help="Write a debug log to the data directory")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def _pick_model(current: str) -> str:
    selection = questionary.select(
        "Select a model:",
        choices=SUPPORTED_MODELS,
        default=current if current in SUPPORTED_MODELS else None,
    ).ask()
    if not selection:
        raise ConfigurationError("No model selected.")
    return selection


def _resolve_model(requested: Optional[str], environ: Mapping[str, str]) -> str:
    default_model = environ.get("H_MODEL") or DEFAULT_MODEL
    if requested == PICK_MODEL:
        return _pick_model(default_model)
    model = requested or default_model
    if model not in SUPPORTED_MODELS:
        raise UnsupportedModelError(model, SUPPORTED_MODELS)
    return model


def _read_prompt(args: argparse.Namespace, directory, stdin: TextIO, environ: Mapping[str, str]) -> str:
    if args.prompt:
        return args.prompt

    if not stdin.isatty():
        return stdin.read()

    prompt, saved = open_editor(directory, environ)
    console.print(Ansi.style(escape(f"Saving prompt to: {saved}"), Ansi.DIM))
    return prompt


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------

def main(
    argv: Optional[List[str]] = None,
    *,
    stdin: Optional[TextIO] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> int:
    """Run one question/answer cycle and return the process exit status."""
    args = _parse_args(argv)
    stdin = sys.stdin if stdin is None else stdin
    environ = os.environ if environ is None else environ

    try:
        directory = ensure_data_dir(data_dir(environ))
        if args.debug:
            setup_file_logging(directory)

        model = _resolve_model(args.model, environ)

        api_key = resolve_api_key(directory, environ)
        if not api_key:
            raise ConfigurationError(
                "OPENAI_API_KEY is not set.\n"
                f"(Tried reading from the environment and {directory / 'openai_key'})"
            )

        store = ConversationStore.in_dir(directory)
        conversation = store.load() if args.continue_ else None
        if args.continue_ and conversation is None:
            log.info("No previous conversation, starting a new one")

        prompt = _read_prompt(args, directory, stdin, environ)
        if not prompt.strip():
            raise ConfigurationError("No prompt given.")

        client = ChatClient(load_preamble(), base_url=environ.get("OPENAI_BASE_URL"))
        with Spinner(prefix=f"{ASSISTANT_LABEL}> "):
            reply = client.ask(prompt, api_key, model, conversation)

        print(reply.msg)
        store.save(reply.conversation)
    except HError as exc:
        log.debug("Request failed", exc_info=True)
        err_console.print(f"{ERROR_LABEL}: {escape(str(exc))}")
        return 1
    except OSError as exc:
        log.debug("I/O failure", exc_info=True)
        err_console.print(f"{ERROR_LABEL}: {escape(str(exc))}")
        return 1
    except KeyboardInterrupt:
        err_console.print(escape("\n[interrupted]"))
        return 130

    return 0


def run_cli() -> None:  # pragma: no cover
    sys.exit(main())


if __name__ == "__main__":  # pragma: no cover
    run_cli()
