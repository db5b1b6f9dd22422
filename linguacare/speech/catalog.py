"""Process-wide cache of the speech engine's voice catalog."""

import logging
import threading
from typing import Optional, Tuple

from .base import AbstractSpeechEngine
from ..exceptions import VoiceLoadTimeoutError
from ..models.speech import LoadState, Voice

logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = 0.25
MAX_POLL_ATTEMPTS = 20


class VoiceCatalog:
    """Loads the engine's voices once and shares the result with every caller.

    Engines report voices inconsistently: some immediately, some only after a
    "voices changed" notification, some only on a later query. A load checks
    immediately, then polls while listening for the notification; whichever
    sees a non-empty list first fulfils the shared latch.
    """

    def __init__(
        self,
        engine: AbstractSpeechEngine,
        poll_interval_seconds: float = POLL_INTERVAL_SECONDS,
        max_poll_attempts: int = MAX_POLL_ATTEMPTS,
    ):
        self.engine = engine
        self.poll_interval_seconds = poll_interval_seconds
        self.max_poll_attempts = max_poll_attempts

        self._lock = threading.Lock()
        self._state = LoadState.NOT_STARTED
        self._voices: Tuple[Voice, ...] = ()
        self._latch: Optional[threading.Event] = None
        self._diagnostics_run = False

    @property
    def state(self) -> LoadState:
        return self._state

    @property
    def voices(self) -> Tuple[Voice, ...]:
        return self._voices

    def load(self) -> Tuple[Voice, ...]:
        """Return the voice catalog, loading it on first use.

        Returns:
            All voices; empty when synthesis is unsupported

        Raises:
            VoiceLoadTimeoutError: If no voices appeared within the polling window,
                or the engine failed while they were being loaded
        """
        with self._lock:
            if self._state is LoadState.READY:
                return self._voices
            if self._state is LoadState.LOADING:
                latch = self._latch
                owner = False
            else:
                # NOT_STARTED, or FAILED being retried by a new request
                self._state = LoadState.LOADING
                latch = self._latch = threading.Event()
                owner = True

        if owner:
            try:
                self._run_load(latch)
            except Exception as e:
                # Waiters block on the latch, so it must be released on any failure
                with self._lock:
                    unresolved = not latch.is_set()
                    if unresolved:
                        self._state = LoadState.FAILED
                        latch.set()
                logger.error(f"TTS Error: Voice loading failed: {e}")
                if unresolved:
                    raise VoiceLoadTimeoutError("Failed to load voices.") from e
        else:
            logger.debug("Voice load already in progress, waiting for it")
            latch.wait()

        with self._lock:
            if self._state is LoadState.READY:
                return self._voices
        raise VoiceLoadTimeoutError("Timed out waiting for voices.")

    def _run_load(self, latch: threading.Event) -> None:
        if not self.engine.is_supported():
            logger.warning("Speech synthesis is not supported on this platform.")
            self._resolve(latch, ())
            return

        if self._check_and_resolve(latch):
            return

        def on_voices_changed() -> None:
            self._check_and_resolve(latch)

        self.engine.add_voices_changed_listener(on_voices_changed)
        try:
            for _ in range(self.max_poll_attempts):
                if latch.wait(self.poll_interval_seconds):
                    break
                if self._check_and_resolve(latch):
                    break
        finally:
            self.engine.remove_voices_changed_listener(on_voices_changed)

        with self._lock:
            if latch.is_set():
                return
            self._state = LoadState.FAILED
            latch.set()
        logger.error("TTS Error: Timed out waiting for voices to load.")

    def _check_and_resolve(self, latch: threading.Event) -> bool:
        if latch.is_set():
            return True
        voices = self.engine.list_voices()
        if not voices:
            return False
        self._resolve(latch, tuple(voices))
        return True

    def _resolve(self, latch: threading.Event, voices: Tuple[Voice, ...]) -> None:
        with self._lock:
            if latch.is_set():
                return
            self._voices = voices
            self._state = LoadState.READY
            run_diagnostics = bool(voices) and not self._diagnostics_run
            if run_diagnostics:
                self._diagnostics_run = True
            latch.set()

        if run_diagnostics:
            self._log_diagnostics(voices)

    def _log_diagnostics(self, voices: Tuple[Voice, ...]) -> None:
        logger.info("--- Linguacare TTS Diagnostics: Available Voices ---")
        for v in voices:
            logger.info(f"- Voice: {v.name}, Lang: {v.lang}, Default: {v.default}")
        if not any(v.lang.lower().startswith('ta') for v in voices):
            logger.warning("TTS Warning: Tamil (ta-IN) voice may not be available.")
        if not any(v.lang.lower().startswith('ml') for v in voices):
            logger.warning("TTS Warning: Malayalam (ml-IN) voice may not be available.")
        logger.info("-" * 49)
