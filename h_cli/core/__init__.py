from .conversation import (
    Conversation,
    ConversationStore,
    Message,
    append_assistant_turn,
    append_user_turn,
    load_conversation,
    new_conversation,
    serialize,
)
from .errors import (
    ConfigurationError,
    ErrorKind,
    HError,
    MalformedConversationError,
    ProtocolError,
    TransportError,
    TurnOrderError,
    UnsupportedModelError,
)

__all__ = [
    "Conversation",
    "ConversationStore",
    "Message",
    "append_assistant_turn",
    "append_user_turn",
    "load_conversation",
    "new_conversation",
    "serialize",
    "ConfigurationError",
    "ErrorKind",
    "HError",
    "MalformedConversationError",
    "ProtocolError",
    "TransportError",
    "TurnOrderError",
    "UnsupportedModelError",
]
