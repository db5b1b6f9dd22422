"""Structured pronunciation feedback returned by the inference service."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _ServiceModel(BaseModel):
    """Accepts the service's camelCase keys as well as field names."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class WordFeedback(_ServiceModel):
    """Per-word verdict; the error, tip and guide are only set for mispronounced words."""
    word: str
    is_correct: bool = Field(alias="isCorrect")
    user_pronunciation_error: Optional[str] = Field(default=None, alias="userPronunciationError")
    tip: Optional[str] = None
    pronunciation_guide: Optional[str] = Field(default=None, alias="pronunciationGuide")


class PronunciationFeedback(_ServiceModel):
    overall_score: int = Field(alias="overallScore", ge=0, le=100)
    summary: str
    word_analysis: List[WordFeedback] = Field(default_factory=list, alias="wordAnalysis")

    @property
    def mispronounced_words(self) -> List[str]:
        return [w.word for w in self.word_analysis if not w.is_correct]


class ChallengingWord(_ServiceModel):
    word: str
    syllables: str
    phonetic_guide: str = Field(alias="phoneticGuide")
    common_mistakes: List[str] = Field(default_factory=list, alias="commonMistakes")
    practice_tip: str = Field(alias="practiceTip")


class DetailedPhraseAnalysis(_ServiceModel):
    """Phrase-level pronunciation guidance, produced without any recording."""
    overall_pronunciation_guide: str = Field(alias="overallPronunciationGuide")
    challenging_words: List[ChallengingWord] = Field(default_factory=list, alias="challengingWords")


class ChatReply(_ServiceModel):
    """A chat response with any navigation directive stripped out."""
    text: str
    navigate_to: Optional[str] = None
