"""Error types raised by the conversation manager and the chat client."""

from __future__ import annotations

import enum
from typing import Any, Optional


class ErrorKind(enum.Enum):
    UNSUPPORTED_MODEL = "unsupported_model"
    MALFORMED_CONVERSATION = "malformed_conversation"
    TRANSPORT = "transport"
    PROTOCOL = "protocol"
    CONFIGURATION = "configuration"
    TURN_ORDER = "turn_order"


class HError(Exception):
    """Base class for every failure the CLI reports to the user."""

    kind: ErrorKind


class UnsupportedModelError(HError):
    """The requested model is not in :data:`SUPPORTED_MODELS`."""

    kind = ErrorKind.UNSUPPORTED_MODEL

    def __init__(self, model: str, supported: Optional[list] = None):
        self.model = model
        message = f"Unsupported model: '{model}'"
        if supported:
            message += f" (choose one of: {', '.join(supported)})"
        super().__init__(message)


class MalformedConversationError(HError):
    """The persisted conversation exists but cannot be parsed.

    The parse failure is chained as ``__cause__`` when there is one.
    """

    kind = ErrorKind.MALFORMED_CONVERSATION


class TransportError(HError):
    """The HTTP exchange failed: connection error or non-2xx status."""

    kind = ErrorKind.TRANSPORT

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        provider_message: Optional[str] = None,
    ):
        self.status = status
        self.provider_message = provider_message
        super().__init__(message)


class ProtocolError(HError):
    """The HTTP call succeeded but the body had no completion content."""

    kind = ErrorKind.PROTOCOL

    def __init__(self, message: str, *, payload: Any = None):
        self.payload = payload
        super().__init__(message)


class ConfigurationError(HError):
    """Missing credential, missing prompt or a failed editor session."""

    kind = ErrorKind.CONFIGURATION


class TurnOrderError(HError, ValueError):
    """Raised when an append would put two same-role turns next to each other."""

    kind = ErrorKind.TURN_ORDER
