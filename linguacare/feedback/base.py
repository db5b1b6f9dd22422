"""Abstract contract for the remote pronunciation inference service."""

import logging
from abc import ABC, abstractmethod
from typing import Iterator, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..exceptions import INVALID_RESPONSE_MESSAGE, FeedbackFormatError
from ..models.audio import RecordingArtifact
from ..models.feedback import DetailedPhraseAnalysis, PronunciationFeedback
from ..models.speech import Language

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_service_response(text: str, model: Type[ModelT]) -> ModelT:
    """Validate a JSON document returned by the service against a response model.

    Raises:
        FeedbackFormatError: If the text is not valid JSON or misses required fields
    """
    try:
        return model.model_validate_json(text.strip())
    except ValidationError as e:
        logger.error(f"Failed to parse service response: {text!r} ({e.error_count()} errors)")
        raise FeedbackFormatError(INVALID_RESPONSE_MESSAGE) from e


def parse_feedback(text: str) -> PronunciationFeedback:
    return parse_service_response(text, PronunciationFeedback)


def parse_phrase_analysis(text: str) -> DetailedPhraseAnalysis:
    return parse_service_response(text, DetailedPhraseAnalysis)


class AbstractFeedbackBackend(ABC):
    """Abstract base class for AI feedback backends.

    Implementations wrap one generative AI vendor; the rest of the package
    depends only on this interface.
    """

    @abstractmethod
    def analyze_pronunciation(self, phrase: str, language: Language,
                              artifact: RecordingArtifact) -> PronunciationFeedback:
        """Score a recorded attempt at saying a phrase.

        Args:
            phrase: The phrase the user was asked to say
            language: Language of the phrase
            artifact: The user's recording

        Returns:
            Overall score, summary and per-word analysis
        """
        pass

    @abstractmethod
    def get_phrase_guide(self, phrase: str, language: Language) -> DetailedPhraseAnalysis:
        """Phonetic guidance for a phrase, before any attempt is recorded."""
        pass

    @abstractmethod
    def transcribe(self, artifact: RecordingArtifact) -> str:
        """Plain transcript of a recording."""
        pass

    @abstractmethod
    def chat(self, role: str, language: Language, message: str) -> Iterator[str]:
        """Stream a chat response as text chunks.

        Args:
            role: "user" or "admin"; decides which pages may be navigated to
            language: Conversation language
            message: The user's message
        """
        pass
