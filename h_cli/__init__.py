"""Query OpenAI chat models from the terminal.

Features
--------
1. One-shot questions: ``h -p "question"``, piped stdin, or a prompt written in ``$EDITOR``.
2. Conversation continuation: every successful exchange is saved to ``~/.h-data/latest.json``
   and ``h -c`` resumes it with the next question.
3. Model selection with ``-m MODEL`` (or ``-m`` alone for an interactive picker).

Run ``h`` or ``python -m h_cli``.
"""
__version__ = "0.3.0"

# Re-export useful symbols for convenience
from .core import (
    Conversation,
    ConversationStore,
    HError,
    load_conversation,
    new_conversation,
    serialize,
)
from .core.client import ChatClient, Reply, SUPPORTED_MODELS
from .cli import main, run_cli

__all__ = [
    "__version__",
    "Conversation",
    "ConversationStore",
    "HError",
    "load_conversation",
    "new_conversation",
    "serialize",
    "ChatClient",
    "Reply",
    "SUPPORTED_MODELS",
    "main",
    "run_cli",
]
