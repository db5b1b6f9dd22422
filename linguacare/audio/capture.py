"""Microphone recording session with a hard deadline and live volume metering."""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .analyser import VolumeAnalyser, compute_volume_level
from .base import AbstractAudioInput, AbstractInputStream
from .encoder import DEFAULT_MIME_TYPE, WavEncoder
from ..exceptions import (
    MICROPHONE_ERROR_MESSAGE,
    DeviceAccessError,
    RecordingTimeoutError,
    recording_timeout_message,
)
from ..models.audio import RecordingArtifact, RecordingState, RecordingStats
from ..models.events import RecordingEvent

logger = logging.getLogger(__name__)

RECORDING_TIME_LIMIT_SECONDS = 15.0
METER_INTERVAL_SECONDS = 1.0 / 60
VOLUME_GAIN = 5.0

TimerFactory = Callable[[float, Callable[[], None]], Any]


@dataclass
class _ActiveCapture:
    """Resources owned by one live recording."""
    token: int
    stream: AbstractInputStream
    encoder: WavEncoder
    analyser: VolumeAnalyser
    stop_event: threading.Event
    capture_thread: Optional[threading.Thread] = None
    meter_thread: Optional[threading.Thread] = None
    started_at: float = 0.0


class AudioCaptureSession:
    """Manages the lifecycle of one microphone recording at a time.

    Observable state (``state``, ``volume``, ``recorder_error``, ``audio_blob``,
    ``audio_url``) is updated from the capture, meter and deadline threads and
    every change is reported through the optional event callback.
    """

    def __init__(
        self,
        audio_input: AbstractAudioInput,
        callback: Optional[Callable[[RecordingEvent], None]] = None,
        time_limit_seconds: float = RECORDING_TIME_LIMIT_SECONDS,
        meter_interval_seconds: float = METER_INTERVAL_SECONDS,
        volume_gain: float = VOLUME_GAIN,
        mime_type: str = DEFAULT_MIME_TYPE,
        store=None,
        timer_factory: TimerFactory = threading.Timer,
    ):
        """Initialize the capture session.

        Args:
            audio_input: Microphone device factory
            callback: Receives a RecordingEvent for every state or volume change
            time_limit_seconds: Deadline after which a recording is forcibly ended
            meter_interval_seconds: Volume metering tick
            volume_gain: Multiplier applied to the RMS level before clamping
            mime_type: Preferred artifact content type
            store: Optional RecordingStore; artifacts get a file URL when set
            timer_factory: threading.Timer compatible factory for the deadline
        """
        self.audio_input = audio_input
        self.event_callback = callback
        self.time_limit_seconds = time_limit_seconds
        self.meter_interval_seconds = meter_interval_seconds
        self.volume_gain = volume_gain
        self.mime_type = mime_type
        self.store = store
        self._timer_factory = timer_factory

        self._lock = threading.RLock()
        self._token = 0
        self._capture: Optional[_ActiveCapture] = None
        self._deadline_timer = None

        self.state = RecordingState.IDLE
        self.volume = 0.0
        self.recorder_error: Optional[str] = None
        self.audio_blob: Optional[RecordingArtifact] = None
        self.audio_url: Optional[str] = None
        self.last_duration_seconds = 0.0

    @property
    def is_recording(self) -> bool:
        return self.state is RecordingState.RECORDING

    def start_recording(self) -> None:
        """Acquire the microphone and begin recording.

        Any previous session is torn down first. Failures are reported through
        ``recorder_error``; nothing is raised to the caller.
        """
        with self._lock:
            previous = self._detach()
            self._token += 1
            token = self._token
            self.recorder_error = None
            self.audio_blob = None
            self.audio_url = None
            self.state = RecordingState.ACQUIRING
        if previous is not None:
            logger.info("Tearing down previous recording session")
            self._release(previous)
        self._emit("state")

        try:
            stream = self.audio_input.open_stream()
        except DeviceAccessError as e:
            logger.error(f"Error starting recording: {e}")
            with self._lock:
                if token == self._token:
                    self.recorder_error = MICROPHONE_ERROR_MESSAGE
                    self.state = RecordingState.FAILED
                    self.volume = 0.0
            self._emit("state")
            return

        with self._lock:
            if token != self._token:
                # Superseded or closed while waiting for the device
                stream.stop()
                return

            capture = _ActiveCapture(
                token=token,
                stream=stream,
                encoder=WavEncoder(stream.sample_rate, stream.channels, self.mime_type),
                analyser=VolumeAnalyser(),
                stop_event=threading.Event(),
                started_at=time.monotonic(),
            )
            self._capture = capture
            self.state = RecordingState.RECORDING

            capture.capture_thread = threading.Thread(
                target=self._record_continuously, args=(capture,), daemon=True
            )
            capture.capture_thread.name = "AudioCaptureThread"
            capture.meter_thread = threading.Thread(
                target=self._monitor_volume, args=(capture,), daemon=True
            )
            capture.meter_thread.name = "VolumeMeterThread"
            capture.capture_thread.start()
            capture.meter_thread.start()

            self._deadline_timer = self._timer_factory(
                self.time_limit_seconds, lambda: self._on_deadline(token)
            )
            self._deadline_timer.daemon = True
            self._deadline_timer.start()

        logger.info(f"Recording started (limit {self.time_limit_seconds:.0f}s, "
                    f"content type {capture.encoder.mime_type})")
        self._emit("state")

    def stop_recording(self) -> None:
        """Stop the active recording and assemble its artifact."""
        with self._lock:
            self._cancel_deadline()
            token = self._token
        self._finish(token, timed_out=False)

    def close(self) -> None:
        """Release every resource held by the session. Safe to call repeatedly."""
        with self._lock:
            capture = self._detach()
            self._token += 1
            if self.state in (RecordingState.ACQUIRING, RecordingState.RECORDING,
                              RecordingState.STOPPING):
                self.state = RecordingState.IDLE
        if capture is not None:
            self._release(capture)
            logger.info("Recording session closed")
            self._emit("state")

    def get_recording_stats(self) -> RecordingStats:
        """Get current recording statistics."""
        with self._lock:
            capture = self._capture
            if capture is not None:
                duration = time.monotonic() - capture.started_at
                fragments = capture.encoder.fragment_count
            else:
                duration = self.last_duration_seconds
                fragments = self.audio_blob.fragment_count if self.audio_blob else 0
            return RecordingStats(
                state=self.state,
                is_recording=self.is_recording,
                duration_seconds=duration,
                sample_rate=capture.stream.sample_rate if capture else 0,
                chunk_size=getattr(capture.stream, 'chunk_size', 0) if capture else 0,
                total_fragments=fragments,
                volume=self.volume,
            )

    def _on_deadline(self, token: int) -> None:
        with self._lock:
            if token != self._token or self.state is not RecordingState.RECORDING:
                return
        logger.warning(f"Recording reached the {self.time_limit_seconds:.0f}s limit")
        self._finish(token, timed_out=True)

    def _finish(self, token: int, timed_out: bool) -> None:
        """End the recording; the first caller for a token decides the outcome."""
        with self._lock:
            capture = self._capture
            if (token != self._token or capture is None
                    or self.state is not RecordingState.RECORDING):
                logger.debug("No recording in progress")
                return
            self.state = RecordingState.STOPPING
            self._deadline_timer = None

        self._emit("state")
        self._release(capture)

        with self._lock:
            if token != self._token:
                return
            self._capture = None
            self.volume = 0.0
            self.last_duration_seconds = time.monotonic() - capture.started_at

            if timed_out:
                error = RecordingTimeoutError(recording_timeout_message(self.time_limit_seconds))
                logger.error(f"Recording discarded: {error}")
                capture.encoder.discard()
                self.recorder_error = str(error)
                self.audio_blob = None
                self.audio_url = None
                self.state = RecordingState.FAILED
            elif capture.encoder.fragment_count > 0:
                artifact = capture.encoder.finalize()
                self.audio_blob = artifact
                try:
                    self.audio_url = self._make_url(artifact)
                except OSError as e:
                    logger.error(f"Could not store recording, keeping it inline: {e}")
                    self.audio_url = artifact.to_data_url()
                self.state = RecordingState.COMPLETED
                logger.info(f"Recording completed: {artifact.fragment_count} fragments, "
                            f"{artifact.duration_seconds:.2f}s")
            else:
                logger.warning("Recording stopped, but no audio data was captured.")
                self.state = RecordingState.COMPLETED

        self._emit("state")

    def _make_url(self, artifact: RecordingArtifact) -> str:
        if self.store is not None:
            return self.store.save_artifact(artifact).as_uri()
        return artifact.to_data_url()

    def _record_continuously(self, capture: _ActiveCapture) -> None:
        """Internal method: fragment collection loop in background thread."""
        while not capture.stop_event.is_set():
            try:
                audio_chunk = capture.stream.read()
            except OSError as e:
                if capture.stop_event.is_set():
                    break
                logger.error(f"Audio device failed during recording: {e}")
                self._fail_device(capture.token)
                break

            if not audio_chunk:
                capture.stop_event.wait(0.005)
                continue

            capture.analyser.feed(audio_chunk)
            with self._lock:
                if capture.token == self._token and not capture.stop_event.is_set():
                    capture.encoder.add_fragment(audio_chunk)

    def _fail_device(self, token: int) -> None:
        with self._lock:
            capture = self._capture
            if token != self._token or capture is None:
                return
            self._cancel_deadline()
            self._capture = None
            self.recorder_error = MICROPHONE_ERROR_MESSAGE
            self.state = RecordingState.FAILED
            self.volume = 0.0
        self._release(capture)
        self._emit("state")

    def _monitor_volume(self, capture: _ActiveCapture) -> None:
        """Internal method: volume metering loop, one level per tick."""
        while not capture.stop_event.wait(self.meter_interval_seconds):
            self._meter_tick(capture)

    def _meter_tick(self, capture: _ActiveCapture) -> None:
        samples = capture.analyser.get_time_domain_data()
        level = compute_volume_level(samples, self.volume_gain)
        with self._lock:
            if capture.token != self._token or self.state is not RecordingState.RECORDING:
                return
            self.volume = level
        self._emit("volume")

    def _release(self, capture: _ActiveCapture) -> None:
        """Stop threads, close the analyser and stop the device tracks."""
        capture.stop_event.set()
        current = threading.current_thread()
        for thread in (capture.capture_thread, capture.meter_thread):
            if thread is not None and thread is not current and thread.is_alive():
                thread.join(timeout=2.0)
                if thread.is_alive():
                    logger.warning(f"{thread.name} did not stop cleanly")
        capture.analyser.close()
        capture.stream.stop()

    def _detach(self) -> Optional[_ActiveCapture]:
        """Unconditionally take ownership of the active capture. Caller holds the lock
        and must pass the result to _release() after dropping it.
        """
        self._cancel_deadline()
        capture = self._capture
        self._capture = None
        self.volume = 0.0
        return capture

    def _cancel_deadline(self) -> None:
        if self._deadline_timer is not None:
            self._deadline_timer.cancel()
            self._deadline_timer = None

    def _emit(self, event_type: str) -> None:
        if self.event_callback is None:
            return
        with self._lock:
            event = RecordingEvent(
                event_type=event_type,
                state=self.state,
                volume=self.volume,
                error=self.recorder_error,
                audio_url=self.audio_url,
            )
        self.event_callback(event)

    def __del__(self):
        """Ensure resources are cleaned up on deletion."""
        if getattr(self, '_capture', None) is not None:
            self.close()
