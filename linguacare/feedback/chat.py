"""Chat replies with embedded navigation directives."""

import logging
import re
from typing import Optional, Tuple

from .base import AbstractFeedbackBackend
from ..exceptions import LinguacareError
from ..models.feedback import ChatReply
from ..models.speech import Language

logger = logging.getLogger(__name__)

# e.g. "Sure, heading there now![action:navigate,page:exercises]"
ACTION_PATTERN = re.compile(r"\[action:(\w+),page:([\w_]+)\]")

FALLBACK_REPLY = "Sorry, I'm having a little trouble right now. Please try again in a moment."

PAGES_BY_ROLE = {
    "user": ("dashboard", "exercises", "schedule", "settings"),
    "admin": ("admin_panel", "settings"),
}


def parse_chat_reply(text: str, role: Optional[str] = None) -> ChatReply:
    """Strip the navigation directive from a reply.

    Args:
        text: Full reply text
        role: When given, directives to pages the role cannot open are dropped

    Returns:
        ChatReply with the visible text and the target page, if any
    """
    match = ACTION_PATTERN.search(text)
    clean = ACTION_PATTERN.sub('', text).strip()
    if not match:
        return ChatReply(text=clean)

    action, page = match.groups()
    if action != "navigate":
        logger.debug(f"Ignoring unknown chat action: {action}")
        return ChatReply(text=clean)
    if role is not None and page not in PAGES_BY_ROLE.get(role, ()):
        logger.warning(f"Chat asked to open '{page}', which role '{role}' cannot access")
        return ChatReply(text=clean)
    return ChatReply(text=clean, navigate_to=page)


def collect_chat_reply(backend: AbstractFeedbackBackend, role: str, language: Language,
                       message: str) -> Tuple[ChatReply, str]:
    """Consume a streamed chat response into a parsed reply.

    Returns:
        The parsed reply and the raw accumulated text
    """
    try:
        raw = ''.join(backend.chat(role, language, message))
    except LinguacareError as e:
        logger.error(f"Error communicating with chat service: {e}")
        raw = FALLBACK_REPLY
    return parse_chat_reply(raw, role), raw
