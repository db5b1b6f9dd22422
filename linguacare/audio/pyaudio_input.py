"""PyAudio-backed microphone input."""

import logging
import threading
from typing import Optional

import pyaudio

from .base import AbstractAudioInput, AbstractInputStream
from ..exceptions import DeviceAccessError

logger = logging.getLogger(__name__)


class PyAudioInputStream(AbstractInputStream):
    """One open PyAudio input stream and the PyAudio instance that owns it."""

    def __init__(self, pyaudio_instance: pyaudio.PyAudio, stream, sample_rate: int,
                 channels: int, chunk_size: int):
        self.pyaudio_instance = pyaudio_instance
        self.stream = stream
        self.sample_rate = sample_rate
        self.channels = channels
        self.chunk_size = chunk_size
        self._lock = threading.Lock()
        self._stopped = False

    def read(self) -> bytes:
        with self._lock:
            if self._stopped:
                return b''
            stream = self.stream
        return stream.read(self.chunk_size, exception_on_overflow=False)

    def stop(self) -> None:
        with self._lock:
            if self._stopped:
                return
            self._stopped = True

        try:
            self.stream.stop_stream()
            self.stream.close()
        except OSError as e:
            logger.warning(f"Error closing audio stream: {e}")
        finally:
            self.pyaudio_instance.terminate()
        logger.info("Audio stream released")


class PyAudioInput(AbstractAudioInput):
    """Opens 16-bit PCM microphone streams through PyAudio."""

    def __init__(
        self,
        sample_rate: int = 16000,
        chunk_size: int = 1024,
        channels: int = 1,
        device_index: Optional[int] = None,
    ):
        """Initialize microphone input with specified parameters.

        Args:
            sample_rate: Audio sample rate
            chunk_size: Size of each audio chunk in samples
            channels: Number of audio channels (1 for mono)
            device_index: PyAudio input device index, None for the default device
        """
        self.sample_rate = sample_rate
        self.chunk_size = chunk_size
        self.channels = channels
        self.device_index = device_index

    def open_stream(self) -> PyAudioInputStream:
        pyaudio_instance = pyaudio.PyAudio()
        try:
            if self.device_index is None:
                device_info = pyaudio_instance.get_default_input_device_info()
                logger.debug(f"Default input device: {device_info.get('name', 'Unknown')}")

            stream = pyaudio_instance.open(
                format=pyaudio.paInt16,
                channels=self.channels,
                rate=self.sample_rate,
                input=True,
                input_device_index=self.device_index,
                frames_per_buffer=self.chunk_size,
            )
        except (OSError, ValueError) as e:
            pyaudio_instance.terminate()
            logger.error(f"Could not open microphone: {e}")
            raise DeviceAccessError(f"Could not open microphone: {e}") from e

        logger.info(f"Audio stream opened: {self.sample_rate}Hz, "
                    f"{self.chunk_size} samples/chunk")
        return PyAudioInputStream(
            pyaudio_instance=pyaudio_instance,
            stream=stream,
            sample_rate=self.sample_rate,
            channels=self.channels,
            chunk_size=self.chunk_size,
        )
