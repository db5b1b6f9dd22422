"""Linguacare speech practice toolkit: microphone capture, speech output and AI feedback contracts."""

__version__ = "0.1.0"
