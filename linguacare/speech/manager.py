"""Text-to-speech manager with voice selection, keep-alive and a failsafe timeout."""

import logging
import threading
from typing import Any, Callable, Optional, Union

from .base import AbstractSpeechEngine
from .catalog import VoiceCatalog
from .selection import (
    DEFAULT_PREFERRED_PROVIDER,
    categorize_voices,
    find_voice_by_name,
    select_voice,
    voice_preference_key,
)
from ..exceptions import SpeechEngineError, VoiceLoadTimeoutError
from ..models.events import SpeechEvent
from ..models.speech import (
    LANGUAGE_CODES,
    Language,
    Utterance,
    UtteranceState,
    VoiceCategories,
)
from ..storage.preferences import PreferenceStore

logger = logging.getLogger(__name__)

FAILSAFE_TIMEOUT_SECONDS = 8.0
KEEP_ALIVE_INTERVAL_SECONDS = 14.0

TimerFactory = Callable[[float, Callable[[], None]], Any]


class SpeechOutputManager:
    """Speaks text in a supported language, never leaving ``is_speaking`` stuck.

    Every ``speak`` call gets a request id. End, error and failsafe callbacks
    only take effect when their id is still the current one, so a superseded
    utterance finishing late cannot flip the state of a newer one.
    """

    def __init__(
        self,
        engine: AbstractSpeechEngine,
        catalog: Optional[VoiceCatalog] = None,
        preferences: Optional[PreferenceStore] = None,
        callback: Optional[Callable[[SpeechEvent], None]] = None,
        failsafe_seconds: float = FAILSAFE_TIMEOUT_SECONDS,
        keep_alive_seconds: float = KEEP_ALIVE_INTERVAL_SECONDS,
        preferred_provider: str = DEFAULT_PREFERRED_PROVIDER,
        timer_factory: TimerFactory = threading.Timer,
    ):
        """Initialize the speech manager.

        Args:
            engine: Platform speech engine
            catalog: Shared voice catalog; a private one is created when omitted
            preferences: Store holding preferred voice names per language code
            callback: Receives a SpeechEvent on every utterance state change
            failsafe_seconds: Forced reset if the engine never reports completion
            keep_alive_seconds: Interval between engine resume nudges
            preferred_provider: Voice name pattern preferred among equal matches
            timer_factory: threading.Timer compatible factory for the failsafe
        """
        self.engine = engine
        self.catalog = catalog if catalog is not None else VoiceCatalog(engine)
        self.preferences = preferences if preferences is not None else PreferenceStore()
        self.event_callback = callback
        self.failsafe_seconds = failsafe_seconds
        self.keep_alive_seconds = keep_alive_seconds
        self.preferred_provider = preferred_provider
        self._timer_factory = timer_factory

        self._lock = threading.RLock()
        self._request_id = 0
        self._is_speaking = False
        self._utterance: Optional[Utterance] = None
        self._text = ""
        self._failsafe_timer = None
        self._shut_down = False

        self.voices_loading = True
        self.available_voices = VoiceCategories()

        self._keep_alive_thread: Optional[threading.Thread] = None
        self._stop_keep_alive = threading.Event()

    @property
    def is_speaking(self) -> bool:
        return self._is_speaking

    @property
    def current_utterance(self) -> Optional[Utterance]:
        return self._utterance

    def start(self) -> None:
        """Begin the keep-alive loop and load the voice categories in the background."""
        with self._lock:
            if self._keep_alive_thread is not None or self._shut_down:
                return
            self._stop_keep_alive.clear()
            self._keep_alive_thread = threading.Thread(target=self._keep_alive, daemon=True)
            self._keep_alive_thread.name = "SpeechKeepAliveThread"
            self._keep_alive_thread.start()

        loader = threading.Thread(target=self.refresh_voices, daemon=True)
        loader.name = "VoiceCatalogLoader"
        loader.start()

    def shutdown(self) -> None:
        """Cancel speech, clear timers and stop the keep-alive loop. Idempotent."""
        with self._lock:
            self._shut_down = True
            self._request_id += 1
            self._cancel_failsafe()
            self._utterance = None
            self._is_speaking = False
            keep_alive = self._keep_alive_thread
            self._keep_alive_thread = None
        self._stop_keep_alive.set()
        self.engine.cancel()
        if keep_alive is not None and keep_alive is not threading.current_thread():
            keep_alive.join(timeout=2.0)
        logger.info("SpeechOutputManager shut down")

    def refresh_voices(self) -> VoiceCategories:
        """Load the catalog and regroup it by supported language."""
        try:
            voices = self.catalog.load()
        except VoiceLoadTimeoutError as e:
            logger.error(f"TTS: Failed to load voices for settings. {e}")
        else:
            self.available_voices = categorize_voices(voices)
        finally:
            self.voices_loading = False
        return self.available_voices

    def preferred_voice(self, language: Union[Language, str]) -> Optional[str]:
        code = LANGUAGE_CODES[Language(language)]
        return self.preferences.get(voice_preference_key(code))

    def set_preferred_voice(self, language: Union[Language, str], voice_name: Optional[str]) -> None:
        """Store the voice to use for a language; an empty name clears the preference."""
        key = voice_preference_key(LANGUAGE_CODES[Language(language)])
        if voice_name:
            self.preferences.set(key, voice_name)
        else:
            self.preferences.remove(key)

    def speak(self, text: str, language: Union[Language, str]) -> None:
        """Speak text in a supported language, replacing any utterance in flight.

        Args:
            text: Text to vocalize
            language: One of the supported languages

        Raises:
            ValueError: If the language is not supported
        """
        language = Language(language)
        if self._shut_down:
            return
        if not self.engine.is_supported():
            logger.warning("Speech synthesis is not supported on this platform.")
            return

        with self._lock:
            self._request_id += 1
            request_id = self._request_id
            self._cancel_failsafe()
            self._utterance = None
            self._text = text
            self._is_speaking = True
            self._failsafe_timer = self._timer_factory(
                self.failsafe_seconds, lambda: self._on_failsafe(request_id, text)
            )
            self._failsafe_timer.daemon = True
            self._failsafe_timer.start()
        # Stale callbacks from the cancelled utterance no longer match request_id
        self.engine.cancel()
        self._emit(request_id, UtteranceState.SPEAKING, text)
        logger.info(f'TTS: Attempting to speak "{text}" in {language.value}.')

        try:
            voices = self.catalog.load()
        except VoiceLoadTimeoutError as e:
            logger.error(f"TTS: {e} Using the engine default voice.")
            voices = ()

        lang_code = LANGUAGE_CODES[language]
        preferred_name = self.preferences.get(voice_preference_key(lang_code))
        if preferred_name:
            if find_voice_by_name(voices, preferred_name):
                logger.info(f"TTS: Using preferred voice '{preferred_name}'.")
            else:
                logger.warning(f"TTS Warning: Preferred voice '{preferred_name}' not found. "
                               f"Falling back to default selection.")

        voice = select_voice(voices, lang_code, preferred_name, self.preferred_provider)
        if voice is not None:
            logger.info(f"TTS: Using voice '{voice.name}' ({voice.lang}) for language '{language.value}'.")
        else:
            logger.warning(f"TTS Warning: No specific voice found for lang '{lang_code}'. "
                           f"Using engine default.")

        utterance = Utterance(text=text, lang=lang_code, voice=voice, request_id=request_id)
        with self._lock:
            if request_id != self._request_id or not self._is_speaking:
                logger.debug(f"TTS: Request {request_id} superseded or reset before it was issued")
                return
            self._utterance = utterance

        try:
            self.engine.speak(
                utterance,
                on_end=lambda: self._reset(request_id, UtteranceState.ENDED,
                                           f'end event for "{text}"'),
                on_error=lambda error: self._on_engine_error(request_id, text, error),
            )
        except SpeechEngineError as e:
            logger.error(f"TTS Error: Failed to initiate speech: {e}")
            self._reset(request_id, UtteranceState.ERRORED,
                        f"Caught error during speak setup: {e}")

    def _on_engine_error(self, request_id: int, text: str, error: Exception) -> None:
        if request_id == self._request_id:
            logger.error(f"SpeechSynthesis Error: {error}")
        self._reset(request_id, UtteranceState.ERRORED, f'error event for "{text}"')

    def _on_failsafe(self, request_id: int, text: str) -> None:
        # Claim the outcome before cancelling so a cancel-triggered end event is stale
        if self._reset(request_id, UtteranceState.TIMED_OUT, "Failsafe Timeout"):
            logger.warning(f'TTS Failsafe: Timed out after {self.failsafe_seconds:.0f}s for "{text}". '
                           f'Forcibly cancelled and reset state.')
            self.engine.cancel()

    def _reset(self, request_id: int, outcome: UtteranceState, reason: str) -> bool:
        """Return to idle if request_id is still current; the first caller wins."""
        with self._lock:
            if request_id != self._request_id or not self._is_speaking:
                logger.debug(f"TTS: Ignoring {outcome.value} for request {request_id}")
                return False
            self._cancel_failsafe()
            text = self._text
            self._utterance = None
            self._is_speaking = False
        logger.info(f"TTS: State reset. Reason: {reason}")
        self._emit(request_id, outcome, text, reason)
        return True

    def _cancel_failsafe(self) -> None:
        if self._failsafe_timer is not None:
            self._failsafe_timer.cancel()
            self._failsafe_timer = None

    def _keep_alive(self) -> None:
        while not self._stop_keep_alive.wait(self.keep_alive_seconds):
            self.engine.resume()

    def _emit(self, request_id: int, state: UtteranceState, text: str,
              reason: Optional[str] = None) -> None:
        if self.event_callback is None:
            return
        self.event_callback(SpeechEvent(
            request_id=request_id,
            state=state,
            is_speaking=state is UtteranceState.SPEAKING,
            text=text,
            reason=reason,
        ))
