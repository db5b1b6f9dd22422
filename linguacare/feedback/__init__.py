"""Contract and response handling for the AI feedback service."""

from .base import (
    AbstractFeedbackBackend,
    parse_feedback,
    parse_phrase_analysis,
    parse_service_response,
)
from .chat import collect_chat_reply, parse_chat_reply

__all__ = [
    "AbstractFeedbackBackend",
    "parse_feedback",
    "parse_phrase_analysis",
    "parse_service_response",
    "collect_chat_reply",
    "parse_chat_reply",
]
