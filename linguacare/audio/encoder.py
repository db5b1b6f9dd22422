"""Fragment collector that assembles a recording into one encoded artifact."""

import io
import logging
import wave
from typing import List

from ..models.audio import RecordingArtifact

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "audio/wav"
SUPPORTED_MIME_TYPES = ("audio/wav", "audio/L16")
BYTES_PER_SAMPLE = 2  # 16-bit audio


class WavEncoder:
    """Collects raw PCM fragments and finalizes them into a single artifact."""

    def __init__(self, sample_rate: int, channels: int = 1, mime_type: str = DEFAULT_MIME_TYPE):
        """Initialize the encoder, negotiating the output content type.

        Args:
            sample_rate: Sample rate of the incoming PCM fragments
            channels: Number of interleaved channels
            mime_type: Preferred content type; unsupported types fall back to the default
        """
        self.sample_rate = sample_rate
        self.channels = channels
        if not self.is_type_supported(mime_type):
            logger.warning(f"{mime_type} is not supported, using default {DEFAULT_MIME_TYPE}.")
            mime_type = DEFAULT_MIME_TYPE
        self.mime_type = mime_type
        self.fragments: List[bytes] = []

    @staticmethod
    def is_type_supported(mime_type: str) -> bool:
        return mime_type in SUPPORTED_MIME_TYPES

    @property
    def fragment_count(self) -> int:
        return len(self.fragments)

    def add_fragment(self, data: bytes) -> None:
        """Append one fragment; empty fragments are ignored."""
        if data:
            self.fragments.append(data)

    def discard(self) -> None:
        self.fragments = []

    def finalize(self) -> RecordingArtifact:
        """Concatenate all fragments into one artifact in the negotiated format."""
        pcm = b''.join(self.fragments)
        duration = len(pcm) / float(self.sample_rate * self.channels * BYTES_PER_SAMPLE)

        if self.mime_type == "audio/wav":
            buffer = io.BytesIO()
            with wave.open(buffer, 'wb') as wf:
                wf.setnchannels(self.channels)
                wf.setsampwidth(BYTES_PER_SAMPLE)
                wf.setframerate(self.sample_rate)
                wf.writeframes(pcm)
            data = buffer.getvalue()
            content_type = self.mime_type
        else:
            data = pcm
            content_type = f"{self.mime_type};rate={self.sample_rate};channels={self.channels}"

        logger.debug(f"Encoded {len(self.fragments)} fragments into {len(data)} bytes "
                     f"({duration:.2f}s, {content_type})")
        return RecordingArtifact(
            data=data,
            content_type=content_type,
            sample_rate=self.sample_rate,
            channels=self.channels,
            duration_seconds=duration,
            fragment_count=len(self.fragments),
        )
