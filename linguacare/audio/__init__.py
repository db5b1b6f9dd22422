"""Audio capture and processing module."""

from .base import AbstractAudioInput, AbstractInputStream
from .capture import AudioCaptureSession
from .encoder import WavEncoder
from .analyser import VolumeAnalyser, compute_volume_level

__all__ = [
    'AbstractAudioInput',
    'AbstractInputStream',
    'AudioCaptureSession',
    'WavEncoder',
    'VolumeAnalyser',
    'compute_volume_level',
]
