"""Speech engine implementation on top of pyttsx3."""

import logging
import threading
from typing import Callable, List, Optional

import pyttsx3

from .base import AbstractSpeechEngine
from ..exceptions import SpeechEngineError
from ..models.speech import Utterance, Voice

logger = logging.getLogger(__name__)


def _voice_language(voice) -> str:
    """Best-effort language tag for a pyttsx3 voice (e.g. b'\\x05en-us' -> 'en-US')."""
    for lang in getattr(voice, 'languages', None) or []:
        if isinstance(lang, bytes):
            lang = lang.decode('utf-8', errors='ignore')
        lang = ''.join(ch for ch in str(lang) if ch.isprintable()).strip()
        if lang:
            parts = lang.replace('_', '-').split('-')
            if len(parts) > 1:
                return f"{parts[0].lower()}-{parts[1].upper()}"
            return parts[0].lower()
    return ''


class Pyttsx3SpeechEngine(AbstractSpeechEngine):
    """Speaks through pyttsx3 on one worker thread per utterance."""

    def __init__(self, driver_name: Optional[str] = None, rate: Optional[int] = None):
        """Initialize the engine wrapper; the pyttsx3 engine itself is created lazily.

        Args:
            driver_name: pyttsx3 driver (sapi5, nsss, espeak); None picks the platform default
            rate: Speech rate in words per minute; None keeps the driver default
        """
        self.driver_name = driver_name
        self.rate = rate
        self._available: Optional[bool] = None
        self._engine = None
        self._speak_lock = threading.Lock()

    def _get_engine(self):
        if self._engine is None:
            self._engine = pyttsx3.init(self.driver_name)
            if self.rate:
                self._engine.setProperty('rate', self.rate)
        return self._engine

    def is_supported(self) -> bool:
        if self._available is not None:
            return self._available

        try:
            self._get_engine()
            self._available = True
        except (ImportError, RuntimeError, OSError) as e:
            logger.debug(f"pyttsx3 not available: {e}")
            self._available = False

        return self._available

    def list_voices(self) -> List[Voice]:
        if not self.is_supported():
            return []
        engine = self._get_engine()
        return [
            Voice(name=v.name, lang=_voice_language(v), voice_id=v.id)
            for v in engine.getProperty('voices') or []
        ]

    def speak(
        self,
        utterance: Utterance,
        on_end: Callable[[], None],
        on_error: Callable[[Exception], None],
    ) -> None:
        worker = threading.Thread(
            target=self._run_utterance, args=(utterance, on_end, on_error), daemon=True
        )
        worker.name = f"SpeechThread-{utterance.request_id}"
        worker.start()

    def _run_utterance(self, utterance: Utterance, on_end, on_error) -> None:
        try:
            with self._speak_lock:
                engine = self._get_engine()
                if utterance.voice is not None and utterance.voice.voice_id:
                    engine.setProperty('voice', utterance.voice.voice_id)
                engine.say(utterance.text)
                engine.runAndWait()
        except (RuntimeError, OSError) as e:
            logger.error(f"pyttsx3 failed to speak: {e}")
            on_error(SpeechEngineError(str(e)))
            return
        on_end()

    def cancel(self) -> None:
        if self._engine is not None:
            self._engine.stop()
