"""Audio recording data models."""

import base64
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class RecordingState(Enum):
    """Lifecycle of a single recording session."""
    IDLE = "idle"
    ACQUIRING = "acquiring"
    RECORDING = "recording"
    STOPPING = "stopping"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class RecordingArtifact:
    """Immutable encoded result of a completed recording."""
    data: bytes
    content_type: str
    sample_rate: int
    channels: int
    duration_seconds: float  # Derived from the PCM payload, not wall clock
    fragment_count: int
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def size_bytes(self) -> int:
        return len(self.data)

    def to_base64(self) -> str:
        """Base64 payload, as inline audio data for remote inference requests."""
        return base64.b64encode(self.data).decode('ascii')

    def to_data_url(self) -> str:
        """Playable self-contained reference to the artifact."""
        return f"data:{self.content_type};base64,{self.to_base64()}"


@dataclass
class RecordingStats:
    """Recording session statistics."""
    state: RecordingState
    is_recording: bool
    duration_seconds: float
    sample_rate: int
    chunk_size: int
    total_fragments: int
    volume: float
