"""Abstract base class for speech synthesis engines."""

from abc import ABC, abstractmethod
from typing import Callable, List

from ..models.speech import Utterance, Voice


class AbstractSpeechEngine(ABC):
    """Platform speech engine boundary."""

    def is_supported(self) -> bool:
        """Whether synthesis is available at all on this platform."""
        return True

    @abstractmethod
    def list_voices(self) -> List[Voice]:
        """Voices currently known to the engine; may be empty while loading."""
        pass

    @abstractmethod
    def speak(
        self,
        utterance: Utterance,
        on_end: Callable[[], None],
        on_error: Callable[[Exception], None],
    ) -> None:
        """Start speaking without blocking.

        Exactly one of the callbacks is expected when the utterance finishes,
        but callers must not rely on it.
        """
        pass

    @abstractmethod
    def cancel(self) -> None:
        """Stop any speech in progress."""
        pass

    def resume(self) -> None:
        """Nudge an engine that may have auto-suspended."""
        pass

    def add_voices_changed_listener(self, callback: Callable[[], None]) -> None:
        """Register for the engine's "voices changed" notification, if it has one."""
        pass

    def remove_voices_changed_listener(self, callback: Callable[[], None]) -> None:
        pass
