"""Speech synthesis data models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class Language(str, Enum):
    """Languages supported by the practice exercises."""
    ENGLISH = "english"
    TAMIL = "tamil"
    MALAYALAM = "malayalam"


# Platform language codes for each supported language
LANGUAGE_CODES = {
    Language.ENGLISH: "en-US",
    Language.TAMIL: "ta-IN",
    Language.MALAYALAM: "ml-IN",
}


class LoadState(Enum):
    """Voice catalog load lifecycle."""
    NOT_STARTED = "not_started"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class UtteranceState(Enum):
    """Lifecycle of one utterance request."""
    IDLE = "idle"
    SPEAKING = "speaking"
    ENDED = "ended"
    ERRORED = "errored"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class Voice:
    """A synthesis voice reported by the speech engine."""
    name: str
    lang: str  # BCP 47 style tag, e.g. "ta-IN"
    voice_id: Optional[str] = None
    default: bool = False


@dataclass(frozen=True)
class Utterance:
    """One request to the engine to vocalize a string."""
    text: str
    lang: str
    voice: Optional[Voice]
    request_id: int


@dataclass
class VoiceCategories:
    """Voices grouped by supported language for a preference screen."""
    english: List[Voice] = field(default_factory=list)
    tamil: List[Voice] = field(default_factory=list)
    malayalam: List[Voice] = field(default_factory=list)

    def for_language(self, language: Language) -> List[Voice]:
        return getattr(self, Language(language).value)
