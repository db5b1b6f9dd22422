"""Pytest configuration and fixtures for Linguacare tests."""

import pytest
import tempfile
import threading
import time
import logging
from collections import deque
from typing import Callable, List, Optional

import numpy as np

from linguacare.audio.base import AbstractAudioInput, AbstractInputStream
from linguacare.exceptions import DeviceAccessError
from linguacare.models.speech import Voice
from linguacare.speech.base import AbstractSpeechEngine


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests with fake devices")
    config.addinivalue_line("markers", "integration: several components wired together")
    config.addinivalue_line("markers", "hardware: needs a real microphone or speech driver")


def pytest_addoption(parser):
    parser.addoption(
        "--hardware",
        action="store_true",
        default=False,
        help="Run tests that need a real microphone and speech engine",
    )


def pytest_collection_modifyitems(config, items):
    if config.getoption("--hardware"):
        return
    skip_hardware = pytest.mark.skip(reason="needs --hardware to run")
    for item in items:
        if "hardware" in item.keywords:
            item.add_marker(skip_hardware)


class FakeInputStream(AbstractInputStream):
    """Scripted microphone stream."""

    def __init__(self, fragments=None, repeat_chunk: Optional[bytes] = None,
                 sample_rate: int = 16000, channels: int = 1, paced: bool = False,
                 read_error: Optional[Exception] = None):
        self.fragments = deque(fragments or [])
        self.repeat_chunk = repeat_chunk
        self.sample_rate = sample_rate
        self.channels = channels
        self.chunk_size = 1024
        self.paced = paced
        self.read_error = read_error
        self.stopped = False
        self.stop_calls = 0
        self.reads = 0

    def read(self) -> bytes:
        if self.stopped:
            return b''
        if self.read_error is not None:
            raise self.read_error
        chunk = b''
        if self.fragments:
            chunk = self.fragments.popleft()
        elif self.repeat_chunk is not None:
            chunk = self.repeat_chunk
        if chunk and self.paced:
            # Deliver audio no faster than real time, like a real device
            time.sleep(len(chunk) / float(self.sample_rate * self.channels * 2))
        elif not chunk:
            time.sleep(0.001)
        self.reads += 1
        return chunk

    def stop(self) -> None:
        self.stop_calls += 1
        self.stopped = True


class FakeAudioInput(AbstractAudioInput):
    """Hands out FakeInputStreams and checks that only one is ever open."""

    def __init__(self, stream_factory: Callable[[], FakeInputStream], error: Optional[Exception] = None):
        self.stream_factory = stream_factory
        self.error = error
        self.streams: List[FakeInputStream] = []
        self.overlapping_opens = 0

    def open_stream(self) -> FakeInputStream:
        if self.error is not None:
            raise self.error
        if any(not s.stopped for s in self.streams):
            self.overlapping_opens += 1
        stream = self.stream_factory()
        self.streams.append(stream)
        return stream

    @property
    def open_streams(self) -> List[FakeInputStream]:
        return [s for s in self.streams if not s.stopped]


class FakeTimer:
    """threading.Timer stand-in that only fires when the test says so."""

    def __init__(self, interval: float, function: Callable[[], None]):
        self.interval = interval
        self.function = function
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if not self.cancelled:
            self.function()


class FakeSpeechEngine(AbstractSpeechEngine):
    """Records utterances; completion callbacks are triggered by the test."""

    def __init__(self, voices=None, supported: bool = True, empty_until_call: int = 0):
        self.voices = list(voices or [])
        self.supported = supported
        self.empty_until_call = empty_until_call
        self.spoken = []
        self.cancel_count = 0
        self.resume_count = 0
        self.list_calls = 0
        self.listeners = []
        self.listener_registrations = 0
        self._lock = threading.Lock()

    def is_supported(self) -> bool:
        return self.supported

    def list_voices(self):
        with self._lock:
            self.list_calls += 1
            if self.list_calls <= self.empty_until_call:
                return []
            return list(self.voices)

    def speak(self, utterance, on_end, on_error) -> None:
        self.spoken.append((utterance, on_end, on_error))

    def cancel(self) -> None:
        self.cancel_count += 1

    def resume(self) -> None:
        self.resume_count += 1

    def add_voices_changed_listener(self, callback) -> None:
        with self._lock:
            self.listener_registrations += 1
            self.listeners.append(callback)

    def remove_voices_changed_listener(self, callback) -> None:
        with self._lock:
            if callback in self.listeners:
                self.listeners.remove(callback)

    def publish_voices(self, voices) -> None:
        """Simulate the platform's "voices changed" notification."""
        with self._lock:
            self.voices = list(voices)
            listeners = list(self.listeners)
        for callback in listeners:
            callback()

    @property
    def last_utterance(self):
        return self.spoken[-1][0]

    def finish(self, index: int = -1) -> None:
        self.spoken[index][1]()

    def fail(self, index: int = -1, error: Exception = None) -> None:
        self.spoken[index][2](error or RuntimeError("synthesis-failed"))


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def sample_audio_chunk():
    """Generate a sample audio chunk for testing."""
    # Generate 1024 samples of 16-bit audio (sine wave)
    sample_rate = 16000
    duration = 1024 / sample_rate  # ~0.064 seconds
    freq = 440  # A4 note

    t = np.linspace(0, duration, 1024, False)
    wave_data = np.sin(2 * np.pi * freq * t)

    # Convert to 16-bit integers at half scale
    audio_data = (wave_data * 16383).astype(np.int16)
    return audio_data.tobytes()


@pytest.fixture
def silent_audio_chunk():
    return b'\x00' * 2048


@pytest.fixture
def fake_timers():
    """Timer factory that collects FakeTimers for the test to fire."""
    timers: List[FakeTimer] = []

    def factory(interval, function):
        timer = FakeTimer(interval, function)
        timers.append(timer)
        return timer

    factory.timers = timers
    return factory


@pytest.fixture
def make_audio_input():
    """Build a FakeAudioInput whose streams are created with the given arguments."""
    def build(error: Optional[Exception] = None, **stream_kwargs) -> FakeAudioInput:
        return FakeAudioInput(lambda: FakeInputStream(**stream_kwargs), error=error)
    return build


@pytest.fixture
def denied_audio_input():
    return FakeAudioInput(lambda: FakeInputStream(), error=DeviceAccessError("Permission denied"))


@pytest.fixture
def sample_voices():
    return [
        Voice(name="Microsoft David", lang="en-US", voice_id="david"),
        Voice(name="Google US English", lang="en-US", voice_id="google-en-us"),
        Voice(name="Google UK English", lang="en-GB", voice_id="google-en-gb"),
        Voice(name="Lekha", lang="ta-IN", voice_id="lekha"),
        Voice(name="Google Tamil", lang="ta-IN", voice_id="google-ta"),
        Voice(name="Tamil Sri Lanka", lang="ta-LK", voice_id="ta-lk"),
        Voice(name="Google Français", lang="fr-FR", voice_id="google-fr"),
    ]


@pytest.fixture
def make_speech_engine():
    def build(voices=None, **kwargs) -> FakeSpeechEngine:
        return FakeSpeechEngine(voices=voices, **kwargs)
    return build


@pytest.fixture
def wait_for():
    """Poll a condition until it holds or the timeout expires."""
    def wait(condition: Callable[[], bool], timeout: float = 2.0, interval: float = 0.005) -> bool:
        deadline = time.time() + timeout
        while time.time() < deadline:
            if condition():
                return True
            time.sleep(interval)
        return condition()
    return wait
