"""File-backed storage for recordings and user preferences."""

from .recording_store import RecordingStore
from .preferences import PreferenceStore

__all__ = [
    "RecordingStore",
    "PreferenceStore",
]
