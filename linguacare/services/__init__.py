"""Services layer for Linguacare application logic."""

from .practice_service import PracticeService

__all__ = [
    "PracticeService",
]
