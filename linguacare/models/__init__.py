"""Data models for the Linguacare application."""

from .audio import RecordingState, RecordingArtifact, RecordingStats
from .speech import (
    Language,
    LANGUAGE_CODES,
    LoadState,
    UtteranceState,
    Voice,
    Utterance,
    VoiceCategories,
)
from .events import RecordingEvent, SpeechEvent
from .feedback import (
    WordFeedback,
    PronunciationFeedback,
    ChallengingWord,
    DetailedPhraseAnalysis,
    ChatReply,
)

__all__ = [
    "RecordingState",
    "RecordingArtifact",
    "RecordingStats",
    # Speech models
    "Language",
    "LANGUAGE_CODES",
    "LoadState",
    "UtteranceState",
    "Voice",
    "Utterance",
    "VoiceCategories",
    # Events
    "RecordingEvent",
    "SpeechEvent",
    # Feedback models
    "WordFeedback",
    "PronunciationFeedback",
    "ChallengingWord",
    "DetailedPhraseAnalysis",
    "ChatReply",
]
