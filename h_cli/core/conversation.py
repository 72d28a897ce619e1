"""Conversation state: role-tagged messages and their on-disk form."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .errors import MalformedConversationError, TurnOrderError

log = logging.getLogger("h.store")

SYSTEM = "system"
USER = "user"
ASSISTANT = "assistant"

ROLES = (SYSTEM, USER, ASSISTANT)


@dataclass(frozen=True)
class Message:
    """A single turn in a conversation."""

    role: str
    content: str

    def __post_init__(self) -> None:
        if self.role not in ROLES:
            raise ValueError(f"Invalid role: {self.role!r}")
        if not isinstance(self.content, str):
            raise TypeError(f"Message content must be a string, not {type(self.content).__name__}")

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class Conversation:
    """Ordered, immutable sequence of messages.

    Appending returns a new conversation, so a caller holding an older
    instance never sees turns added after it was handed out.
    """

    messages: Tuple[Message, ...] = ()

    def __len__(self) -> int:
        return len(self.messages)

    def __iter__(self):
        return iter(self.messages)

    def __getitem__(self, index):
        return self.messages[index]

    @property
    def last_role(self) -> Optional[str]:
        return self.messages[-1].role if self.messages else None

    def to_list(self) -> List[Dict[str, str]]:
        return [m.to_dict() for m in self.messages]


def new_conversation(preamble: str) -> Conversation:
    return Conversation((Message(SYSTEM, preamble),))


def _append(conversation: Conversation, role: str, text: str) -> Conversation:
    last = conversation.last_role
    if last == role:
        raise TurnOrderError(f"Cannot append two consecutive '{role}' turns")
    if role == ASSISTANT and last in (None, SYSTEM):
        raise TurnOrderError("An assistant turn must follow a user turn")
    return Conversation(conversation.messages + (Message(role, text),))


def append_user_turn(conversation: Conversation, text: str) -> Conversation:
    return _append(conversation, USER, text)


def append_assistant_turn(conversation: Conversation, text: str) -> Conversation:
    return _append(conversation, ASSISTANT, text)


def serialize(conversation: Conversation) -> str:
    return json.dumps(conversation.to_list(), ensure_ascii=False, indent=2)


def _message_from_obj(index: int, obj: Any) -> Message:
    if not isinstance(obj, dict):
        raise MalformedConversationError(f"Message #{index} is not an object: {obj!r}")
    role = obj.get("role")
    content = obj.get("content")
    if role not in ROLES:
        raise MalformedConversationError(f"Message #{index} has invalid role: {role!r}")
    if not isinstance(content, str):
        raise MalformedConversationError(f"Message #{index} has no text content")
    return Message(role, content)


def _check_order(messages: List[Message]) -> None:
    turns = messages[1:] if messages[0].role == SYSTEM else messages
    for index, message in enumerate(turns):
        expected = USER if index % 2 == 0 else ASSISTANT
        if message.role != expected:
            raise TurnOrderError(
                f"Expected a '{expected}' turn at position {index}, found '{message.role}'"
            )
    if turns and turns[-1].role == USER:
        raise TurnOrderError("The last user turn has no assistant reply")


def load_conversation(raw: Optional[str]) -> Optional[Conversation]:
    """Parse persisted text back into a :class:`Conversation`.

    Returns ``None`` when there is nothing to resume: no text, blank text or
    an empty array. Anything else that is not a well-formed message array
    raises :class:`MalformedConversationError`.
    """
    if raw is None or not raw.strip():
        return None

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise MalformedConversationError(f"Conversation is not valid JSON: {exc}") from exc

    if not isinstance(data, list):
        raise MalformedConversationError(
            f"Conversation must be a JSON array, found {type(data).__name__}"
        )
    if not data:
        return None

    messages = [_message_from_obj(i, obj) for i, obj in enumerate(data)]
    try:
        _check_order(messages)
    except TurnOrderError as exc:
        raise MalformedConversationError(f"Conversation turns are out of order: {exc}") from exc
    return Conversation(tuple(messages))


class ConversationStore:
    """The single "latest conversation" record kept on disk."""

    FILENAME = "latest.json"

    def __init__(self, path: Path) -> None:
        self.path = path

    @classmethod
    def in_dir(cls, data_dir: Path) -> "ConversationStore":
        return cls(data_dir / cls.FILENAME)

    def load(self) -> Optional[Conversation]:
        if not self.path.exists():
            log.debug("No conversation at %s", self.path)
            return None
        try:
            raw = self.path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedConversationError(f"Conversation at {self.path} is not UTF-8 text") from exc
        conversation = load_conversation(raw)
        log.debug(
            "Loaded %d messages from %s",
            len(conversation) if conversation else 0,
            self.path,
        )
        return conversation

    def save(self, conversation: Conversation) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(".tmp")
        tmp_path.write_text(serialize(conversation), encoding="utf-8")
        tmp_path.replace(self.path)
        log.debug("Saved %d messages to %s", len(conversation), self.path)
