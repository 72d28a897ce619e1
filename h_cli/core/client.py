"""Chat completions client: one request/response exchange per question."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, NamedTuple, Optional

import httpx
import openai
from openai import OpenAI  # type: ignore

from .conversation import (
    Conversation,
    append_assistant_turn,
    append_user_turn,
    new_conversation,
)
from .errors import (
    ConfigurationError,
    ProtocolError,
    TransportError,
    UnsupportedModelError,
)

log = logging.getLogger("h.client")

DEFAULT_BASE_URL = "https://api.openai.com/v1"

# The preamble asks the model to finish every answer with this marker so the
# server can cut generation there.
STOP_SEQUENCE = "END_OF_MESSAGE"

SUPPORTED_MODELS = [
    "gpt-4",  # default
    "gpt-4-0314",
    "gpt-4-32k",
    "gpt-4-32k-0314",
    "gpt-3.5-turbo",
    "gpt-3.5-turbo-0301",
]


class Reply(NamedTuple):
    msg: str
    conversation: Conversation


def _provider_message(body: Any) -> Optional[str]:
    """Pull the human-readable message out of an API error body."""
    if isinstance(body, dict):
        error = body.get("error", body)
        if isinstance(error, dict):
            message = error.get("message")
            return message if isinstance(message, str) else None
        if isinstance(error, str):
            return error
    elif isinstance(body, str) and body:
        return body
    return None


class ChatClient:
    """Sends a conversation to the chat completions endpoint.

    The preamble seeds every fresh conversation. ``http_client`` is handed
    to the OpenAI SDK untouched, which lets tests plug in a mock transport.
    """

    def __init__(
        self,
        preamble: str,
        *,
        base_url: Optional[str] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        self.preamble = preamble
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self._http_client = http_client

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/chat/completions"

    def _sdk(self, credential: str) -> OpenAI:
        # Retries are disabled: a failed exchange is reported, never repeated.
        return OpenAI(
            api_key=credential,
            base_url=self.base_url,
            max_retries=0,
            http_client=self._http_client,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def ask(
        self,
        prompt: str,
        credential: str,
        model: str,
        conversation: Optional[Conversation] = None,
    ) -> Reply:
        """Send *prompt* as the next user turn and return the model's answer.

        The returned conversation holds the user turn and the assistant
        reply. On any failure an :class:`~h_cli.core.errors.HError` is raised
        and no updated conversation is handed back.
        """
        if model not in SUPPORTED_MODELS:
            raise UnsupportedModelError(model, SUPPORTED_MODELS)
        if not credential:
            raise ConfigurationError("An OpenAI API key is required to send a request.")
        if not isinstance(prompt, str):
            raise TypeError(f"Prompt must be a string, not {type(prompt).__name__}")

        working = conversation if conversation is not None else new_conversation(self.preamble)
        working = append_user_turn(working, prompt)

        body = self._post(credential, model, working)
        msg = self._extract_content(body)

        return Reply(msg, append_assistant_turn(working, msg))

    # ------------------------------------------------------------------
    # Helper methods
    # ------------------------------------------------------------------

    def _post(self, credential: str, model: str, conversation: Conversation) -> Any:
        log.debug("POST %s model=%s messages=%d", self.endpoint, model, len(conversation))
        try:
            raw = self._sdk(credential).chat.completions.with_raw_response.create(
                model=model,
                messages=conversation.to_list(),  # type: ignore[arg-type]
                stop=STOP_SEQUENCE,
            )
        except openai.APIStatusError as exc:
            provider_message = _provider_message(exc.body)
            log.debug("HTTP %s from %s: %s", exc.status_code, self.endpoint, exc.body)
            raise TransportError(
                f"Invalid request posted to {self.endpoint} "
                f"(HTTP {exc.status_code}): {provider_message or ''}".rstrip(),
                status=exc.status_code,
                provider_message=provider_message,
            ) from exc
        except openai.APIConnectionError as exc:
            log.debug("Connection to %s failed: %s", self.endpoint, exc)
            raise TransportError(f"Could not reach {self.endpoint}: {exc}") from exc

        response = raw.http_response
        log.debug("HTTP %s from %s", response.status_code, self.endpoint)
        try:
            return response.json()
        except ValueError as exc:
            raise ProtocolError(
                f"Expected a JSON response from {self.endpoint}, got: {response.text!r}",
                payload=response.text,
            ) from exc

    @staticmethod
    def _extract_content(body: Any) -> str:
        choices = body.get("choices") if isinstance(body, dict) else None
        if not isinstance(choices, list) or not choices:
            raise ProtocolError(
                "Expected at least one choice from OpenAI, got: "
                + json.dumps(body, indent=2, default=str),
                payload=body,
            )

        choice: Dict[str, Any] = choices[0]
        message = choice.get("message") if isinstance(choice, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise ProtocolError(
                "Expected response from OpenAI, but got null message instead: "
                + json.dumps(choice, indent=2, default=str),
                payload=choice,
            )
        return content
