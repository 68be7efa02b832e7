"""
Dialogue Service - turns a trainee utterance plus the prior turns into the
angry customer's next line.

The server keeps no conversation state. The client resends the full history
on every turn and the persona prompt is prepended each time.
"""

import logging
from functools import lru_cache
from typing import Any, Dict, List, Optional, Sequence

from openai import OpenAI

import config
from errors import EmptyResult, InvalidRequest, MissingCredentials
from persona import SYSTEM_PROMPT, wrap_representative

logger = logging.getLogger(__name__)

HISTORY_ROLES = ("user", "assistant")


@lru_cache(maxsize=1)
def get_openai_client() -> OpenAI:
    if not config.OPENAI_API_KEY:
        raise MissingCredentials("OPENAI_API_KEY is not set (missing API key)")
    return OpenAI(api_key=config.OPENAI_API_KEY)


def validate_history(history: Any) -> List[Dict[str, str]]:
    """Check the client-supplied history and return a clean copy of it."""
    if history is None:
        return []
    if not isinstance(history, list):
        raise InvalidRequest("Invalid conversation history")

    clean_history = []
    for entry in history:
        if not isinstance(entry, dict):
            raise InvalidRequest("Invalid conversation history")
        role = entry.get("role")
        content = entry.get("content")
        if role not in HISTORY_ROLES or not isinstance(content, str):
            raise InvalidRequest("Invalid conversation history")
        # Only role and content go upstream
        clean_history.append({"role": role, "content": content})
    return clean_history


def build_messages(message: str, history: Sequence[Dict[str, str]] = ()) -> List[Dict[str, str]]:
    """Persona first, then the prior turns, then the wrapped latest utterance."""
    messages = [{"role": "system", "content": SYSTEM_PROMPT}]
    messages.extend({"role": m["role"], "content": m["content"]} for m in history)
    messages.append({"role": "user", "content": wrap_representative(message)})
    return messages


def generate_reply(message: str, history: Sequence[Dict[str, str]] = (), client: Optional[OpenAI] = None) -> str:
    """
    Ask the completion API for the customer's reply.

    Raises EmptyResult when the model comes back without any text. Upstream
    errors from the OpenAI SDK propagate unchanged so the route can classify them.
    """
    client = client or get_openai_client()
    messages = build_messages(message, history)
    settings = config.MODELS["openai"]

    logger.info(f"🤖 Sending {len(messages)} messages to {settings['chat_model']}")
    completion = client.chat.completions.create(
        model=settings["chat_model"],
        messages=messages,
        temperature=settings["temperature"],
        max_tokens=settings["max_tokens"],
    )

    reply = ""
    if completion.choices:
        reply = (completion.choices[0].message.content or "").strip()
    if not reply:
        logger.warning("⚠️ No response from OpenAI")
        raise EmptyResult("No response from AI")

    logger.info(f"🎙️ Customer reply: {reply[:100]}")
    return reply
