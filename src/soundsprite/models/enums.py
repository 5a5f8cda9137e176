"""Enumerations for the soundboard."""

from enum import Enum


class RecorderState(str, Enum):
    """Microphone recorder lifecycle states."""

    IDLE = "idle"              # No capture session
    CAPTURING = "capturing"    # Microphone open, chunks accumulating
    FINALIZING = "finalizing"  # Capture closed, decoding and committing
