"""Voice selection and categorisation rules."""

import re
from typing import Iterable, List, Optional, Sequence

from ..models.speech import Voice, VoiceCategories

DEFAULT_PREFERRED_PROVIDER = "google"


def voice_preference_key(lang_code: str) -> str:
    """Preference store key holding the user's chosen voice name for a language code."""
    return f"linguacare_tts_voice_{lang_code}"


def find_voice_by_name(voices: Iterable[Voice], name: str) -> Optional[Voice]:
    return next((v for v in voices if v.name == name), None)


def select_voice(
    voices: Sequence[Voice],
    lang_code: str,
    preferred_name: Optional[str] = None,
    preferred_provider: str = DEFAULT_PREFERRED_PROVIDER,
) -> Optional[Voice]:
    """Pick the best voice for a language code.

    Precedence: the stored preference; an exact code match from the preferred
    provider; any exact code match; a base-language match from the preferred
    provider; any base-language match. None means the engine default.
    """
    if preferred_name:
        voice = find_voice_by_name(voices, preferred_name)
        if voice is not None:
            return voice

    target = lang_code.lower()
    base = target.split('-')[0]
    provider = re.compile(re.escape(preferred_provider), re.IGNORECASE) if preferred_provider else None

    candidates = [v for v in voices if v.lang.lower().replace('_', '-').startswith(base)]
    exact = [v for v in candidates if v.lang.lower().replace('_', '-') == target]

    for group in (exact, candidates):
        if provider is not None:
            for v in group:
                if provider.search(v.name):
                    return v
        if group:
            return group[0]
    return None


def _with_prefix(voices: Iterable[Voice], prefix: str) -> List[Voice]:
    return [v for v in voices if v.lang.lower().startswith(prefix)]


def categorize_voices(voices: Sequence[Voice]) -> VoiceCategories:
    """Split the catalog into the supported languages by language prefix."""
    return VoiceCategories(
        english=_with_prefix(voices, 'en'),
        tamil=_with_prefix(voices, 'ta'),
        malayalam=_with_prefix(voices, 'ml'),
    )
