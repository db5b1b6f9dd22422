"""Speech output: voice catalog, voice selection and utterance management."""

from .base import AbstractSpeechEngine
from .catalog import VoiceCatalog
from .manager import SpeechOutputManager
from .selection import categorize_voices, select_voice, voice_preference_key

__all__ = [
    "AbstractSpeechEngine",
    "VoiceCatalog",
    "SpeechOutputManager",
    "categorize_voices",
    "select_voice",
    "voice_preference_key",
]
