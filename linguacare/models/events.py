"""Event models published on pub/sub topics for UI consumers."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .audio import RecordingState
from .speech import UtteranceState


@dataclass
class RecordingEvent:
    """Observable change of an AudioCaptureSession."""
    event_type: str  # "state" or "volume"
    state: RecordingState
    volume: float = 0.0
    error: Optional[str] = None
    audio_url: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def is_recording(self) -> bool:
        return self.state is RecordingState.RECORDING


@dataclass
class SpeechEvent:
    """Observable change of a SpeechOutputManager utterance."""
    request_id: int
    state: UtteranceState
    is_speaking: bool
    text: str = ""
    reason: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)
