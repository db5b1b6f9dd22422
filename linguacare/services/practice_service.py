"""Practice service that drives one pronunciation exercise end to end."""

import logging
from typing import Optional, Union

from ..audio.capture import AudioCaptureSession
from ..exceptions import NoRecordingError
from ..feedback.base import AbstractFeedbackBackend
from ..models.feedback import DetailedPhraseAnalysis, PronunciationFeedback
from ..models.speech import Language
from ..speech.manager import SpeechOutputManager

logger = logging.getLogger(__name__)


class PracticeService:
    """Listen to a phrase, record an attempt and get feedback on it."""

    def __init__(
        self,
        capture: AudioCaptureSession,
        speech: SpeechOutputManager,
        backend: AbstractFeedbackBackend,
        language: Union[Language, str] = Language.ENGLISH,
    ):
        """Initialize practice service.

        Args:
            capture: Recording session used for attempts
            speech: Speech manager used to model the phrase
            backend: Feedback service
            language: Exercise language
        """
        self.capture = capture
        self.speech = speech
        self.backend = backend
        self.language = Language(language)
        self.last_feedback: Optional[PronunciationFeedback] = None

    def listen(self, phrase: str) -> None:
        """Speak the phrase so the user can hear the target pronunciation."""
        self.speech.speak(phrase, self.language)

    def phrase_guide(self, phrase: str) -> DetailedPhraseAnalysis:
        return self.backend.get_phrase_guide(phrase, self.language)

    def start_attempt(self) -> None:
        self.last_feedback = None
        self.capture.start_recording()

    def finish_attempt(self) -> Optional[str]:
        """Stop recording.

        Returns:
            The recorder error to show the user, if any
        """
        self.capture.stop_recording()
        return self.capture.recorder_error

    def submit(self, phrase: str) -> PronunciationFeedback:
        """Send the last recorded attempt for scoring.

        Raises:
            NoRecordingError: If there is no completed recording to submit
        """
        artifact = self.capture.audio_blob
        if artifact is None:
            raise NoRecordingError("There is no recording to analyze. Please record your attempt first.")

        logger.info(f"Submitting {artifact.duration_seconds:.1f}s attempt at '{phrase}' "
                    f"({self.language.value})")
        feedback = self.backend.analyze_pronunciation(phrase, self.language, artifact)
        self.last_feedback = feedback
        logger.info(f"Feedback received: score {feedback.overall_score}, "
                    f"{len(feedback.mispronounced_words)} words to practice")
        return feedback

    def close(self) -> None:
        """Clean up service resources."""
        self.capture.close()
        self.speech.shutdown()
        logger.info("PracticeService cleaned up")
