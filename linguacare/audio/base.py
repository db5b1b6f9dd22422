"""Abstract base classes for microphone input devices."""

from abc import ABC, abstractmethod


class AbstractInputStream(ABC):
    """An exclusively-owned live microphone stream."""

    sample_rate: int
    channels: int

    @abstractmethod
    def read(self) -> bytes:
        """Read the next block of 16-bit PCM audio.

        Returns:
            Raw audio bytes; may be empty when the device produced nothing
        """
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop all tracks and release the device. Must be idempotent."""
        pass


class AbstractAudioInput(ABC):
    """Factory for microphone streams."""

    @abstractmethod
    def open_stream(self) -> AbstractInputStream:
        """Request the microphone and open a stream on it.

        Raises:
            DeviceAccessError: If permission is denied or no device is usable
        """
        pass
